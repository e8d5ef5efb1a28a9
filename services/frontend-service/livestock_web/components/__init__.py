"""Presentation components."""

from .livestock_form import LivestockFormComponent
from .livestock_list import LivestockListComponent

__all__ = ["LivestockFormComponent", "LivestockListComponent"]
