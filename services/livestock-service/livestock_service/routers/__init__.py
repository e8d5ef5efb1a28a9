"""
API routers for livestock service endpoints.
"""

from . import health_router, livestock_router

__all__ = ["livestock_router", "health_router"]
