"""
Livestock feature store.

Holds the client-side state of one livestock feature. Setters replace or
merge a single node and nothing else; deciding what to write is the
facade's job.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..config import settings
from ..state import ReadOnlyState, StateNode, computed


class LoadStatus(str, Enum):
    """Phase of one facade operation."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


OPERATIONS = ("load_list", "select", "submit_create", "submit_update", "delete")


class LivestockStore:
    """
    State for one livestock feature.

    Read surface: ``items``, ``total``, ``page``, ``page_size``,
    ``filters``, ``selected``, ``form_errors``, the derived ``page_count``
    and ``is_loading``, and per operation ``status_of(operation)`` and
    ``error_of(operation)``.

    Each operation in ``OPERATIONS`` has its own status and error node, so
    one operation settling never overwrites the phase of another that is
    still in flight.
    """

    def __init__(self, page_size: Optional[int] = None) -> None:
        self._page_size_default = page_size or settings.DEFAULT_PAGE_SIZE

        self._items: StateNode[List[BaseModel]] = StateNode([])
        self._total: StateNode[int] = StateNode(0)
        self._page: StateNode[int] = StateNode(1)
        self._page_size: StateNode[int] = StateNode(self._page_size_default)
        self._filters: StateNode[Dict[str, Any]] = StateNode({})
        self._selected: StateNode[Optional[BaseModel]] = StateNode(None)
        self._statuses: Dict[str, StateNode[LoadStatus]] = {
            operation: StateNode(LoadStatus.IDLE) for operation in OPERATIONS
        }
        self._errors: Dict[str, StateNode[Optional[str]]] = {
            operation: StateNode(None) for operation in OPERATIONS
        }
        self._form_errors: StateNode[Dict[str, str]] = StateNode({})

        self.items = self._items.read_only()
        self.total = self._total.read_only()
        self.page = self._page.read_only()
        self.page_size = self._page_size.read_only()
        self.filters = self._filters.read_only()
        self.selected = self._selected.read_only()
        self.form_errors = self._form_errors.read_only()

        self.page_count: ReadOnlyState[int] = computed(
            lambda total, size: max(1, -(-total // size)), self.total, self.page_size
        )
        self.is_loading: ReadOnlyState[bool] = computed(
            lambda *statuses: LoadStatus.LOADING in statuses,
            *(node.read_only() for node in self._statuses.values()),
        )

    def status_of(self, operation: str) -> ReadOnlyState[LoadStatus]:
        """Phase of ``operation``; raises KeyError for an unknown operation."""
        return self._statuses[operation].read_only()

    def error_of(self, operation: str) -> ReadOnlyState[Optional[str]]:
        """Last user-facing error of ``operation``, or None."""
        return self._errors[operation].read_only()

    def set_items(self, items: List[BaseModel]) -> None:
        self._items.set(list(items))

    def set_total(self, total: int) -> None:
        self._total.set(total)

    def set_page(self, page: int) -> None:
        self._page.set(page)

    def set_page_size(self, page_size: int) -> None:
        self._page_size.set(page_size)

    def set_filters(self, filters: Dict[str, Any]) -> None:
        self._filters.set(dict(filters))

    def set_selected(self, item: Optional[BaseModel]) -> None:
        self._selected.set(item)

    def set_status(self, operation: str, status: LoadStatus) -> None:
        self._statuses[operation].set(status)

    def set_error(self, operation: str, message: Optional[str]) -> None:
        self._errors[operation].set(message)

    def set_form_errors(self, errors: Dict[str, str]) -> None:
        self._form_errors.set(dict(errors))

    def merge_item(self, item: BaseModel) -> None:
        """Replace the item with the same id, or append it."""
        items = [existing for existing in self._items.value if existing.id != item.id]
        position = next(
            (i for i, existing in enumerate(self._items.value) if existing.id == item.id),
            len(items),
        )
        items.insert(position, item)
        self._items.set(items)

    def remove_item(self, livestock_id: Any) -> None:
        self._items.set(
            [item for item in self._items.value if str(item.id) != str(livestock_id)]
        )

    def reset(self) -> None:
        """Restore the initial state."""
        self._items.set([])
        self._total.set(0)
        self._page.set(1)
        self._page_size.set(self._page_size_default)
        self._filters.set({})
        self._selected.set(None)
        for operation in OPERATIONS:
            self._statuses[operation].set(LoadStatus.IDLE)
            self._errors[operation].set(None)
        self._form_errors.set({})
