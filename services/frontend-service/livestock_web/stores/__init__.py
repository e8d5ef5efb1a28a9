"""Client-side stores."""

from .app_store import AppStore, get_app_store
from .livestock_store import LivestockStore, LoadStatus

__all__ = ["AppStore", "LivestockStore", "LoadStatus", "get_app_store"]
