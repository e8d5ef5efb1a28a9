"""
Process-wide application store.

The only store shared across features: a user-facing notice and the
backend connectivity flag. Obtain it through ``get_app_store()``.
"""

from typing import Optional

from ..state import StateNode


class AppStore:
    """Global notice and connectivity state."""

    def __init__(self) -> None:
        self._notice: StateNode[Optional[str]] = StateNode(None)
        self._online: StateNode[bool] = StateNode(True)

        self.notice = self._notice.read_only()
        self.online = self._online.read_only()

    def set_notice(self, message: Optional[str]) -> None:
        self._notice.set(message)

    def set_online(self, online: bool) -> None:
        self._online.set(online)


_app_store: Optional[AppStore] = None


def get_app_store() -> AppStore:
    """Return the process-wide AppStore, creating it on first use."""
    global _app_store
    if _app_store is None:
        _app_store = AppStore()
    return _app_store


def reset_app_store() -> None:
    """Drop the process-wide AppStore; the next call creates a fresh one."""
    global _app_store
    _app_store = None
