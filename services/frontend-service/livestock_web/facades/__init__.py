"""Facades: the components' only entry point into client state."""

from .livestock_facade import LivestockFacade

__all__ = ["LivestockFacade"]
