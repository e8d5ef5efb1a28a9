"""Frontend services."""

from .livestock_service import LivestockViewService

__all__ = ["LivestockViewService"]
