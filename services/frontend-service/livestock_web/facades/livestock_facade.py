"""
Livestock facade.

The single entry point a livestock component talks to. Each command drives
its own operation status through ``loading`` into ``success`` or
``error``; the read surface is the store's read-only projections. Every
data-access failure is caught here and turned into a user-facing message.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from ..exceptions import (
    FrontendServiceException,
    NotFoundException,
    RequestTimeoutException,
    ServiceUnavailableException,
    ValidationException,
)
from ..logging_config import get_logger
from ..services.livestock_service import LivestockViewService
from ..stores.app_store import AppStore, get_app_store
from ..stores.livestock_store import OPERATIONS, LivestockStore, LoadStatus

logger = get_logger(__name__)

FORM_ERROR_MESSAGE = "Please correct the highlighted fields."


class LivestockFacade:
    """
    Commands and read surface for one livestock UI surface.

    Each operation carries its own request counter. When a settlement
    arrives for a request that has since been superseded by a newer call
    of the same operation, it is discarded, so only the latest request of
    each operation ever reaches the store.
    """

    def __init__(
        self,
        store: LivestockStore,
        service: LivestockViewService,
        app_store: Optional[AppStore] = None,
    ) -> None:
        self._store = store
        self._service = service
        self._app_store = app_store or get_app_store()
        self._tokens: Dict[str, int] = {}

        self.items = store.items
        self.total = store.total
        self.page = store.page
        self.page_size = store.page_size
        self.page_count = store.page_count
        self.filters = store.filters
        self.selected = store.selected
        self.form_errors = store.form_errors
        self.is_loading = store.is_loading
        self.notice = self._app_store.notice
        self.online = self._app_store.online
        self.status_of = store.status_of
        self.error_of = store.error_of

    @property
    def view(self) -> LivestockViewService:
        """Formatting helpers for components."""
        return self._service

    async def load_list(self) -> bool:
        """Load the current page with the current filters."""
        operation = "load_list"
        token = self._begin(operation)
        try:
            page = await self._service.load_page(
                self._store.page.value,
                self._store.page_size.value,
                self._store.filters.value,
            )
        except FrontendServiceException as error:
            return self._fail(operation, token, error)

        if not self._is_current(operation, token):
            return False
        self._store.set_items(page.items)
        self._store.set_total(page.total)
        self._succeed(operation)
        return True

    async def request_page(self, page: int) -> bool:
        """Switch to ``page`` (1-based, clamped to the known range) and load it."""
        last = max(1, self._store.page_count.value)
        self._store.set_page(min(max(1, page), last))
        return await self.load_list()

    async def apply_filters(self, **filters: Any) -> bool:
        """Replace the filters, go back to the first page and load it."""
        active = {
            name: value
            for name, value in filters.items()
            if value is not None and value != ""
        }
        self._store.set_filters(active)
        self._store.set_page(1)
        return await self.load_list()

    async def select(self, livestock_id: str) -> bool:
        """Load one record into ``selected``."""
        operation = "select"
        token = self._begin(operation)
        try:
            item = await self._service.get(livestock_id)
        except FrontendServiceException as error:
            not_found = isinstance(error, NotFoundException)
            if not_found and self._is_current(operation, token):
                self._store.set_selected(None)
                self._drop_item(livestock_id)
            return self._fail(operation, token, error)

        if not self._is_current(operation, token):
            return False
        self._store.set_selected(item)
        self._succeed(operation)
        return True

    async def submit_create(self, data: Mapping[str, Any]) -> bool:
        """
        Validate and create a record; the new record becomes ``selected``.

        The list only takes the record when it passes the active filters,
        and only appends it while the current page has room, since new
        records sort last.
        """
        operation = "submit_create"
        if not self._accept_form(operation, data, partial=False):
            return False

        token = self._begin(operation)
        try:
            created = await self._service.create(data)
        except FrontendServiceException as error:
            return self._fail(operation, token, error)

        if not self._is_current(operation, token):
            return False
        if self._service.matches_filters(created, self._store.filters.value):
            if len(self._store.items.value) < self._store.page_size.value:
                self._store.merge_item(created)
            self._store.set_total(self._store.total.value + 1)
        self._store.set_selected(created)
        self._succeed(operation, f"Added {self._service.display_label(created)}")
        return True

    async def submit_update(self, livestock_id: str, data: Mapping[str, Any]) -> bool:
        """Validate and apply a partial update."""
        operation = "submit_update"
        if not self._accept_form(operation, data, partial=True):
            return False

        token = self._begin(operation)
        try:
            updated = await self._service.update(livestock_id, data)
        except FrontendServiceException as error:
            return self._fail(operation, token, error)

        if not self._is_current(operation, token):
            return False
        if self._is_listed(livestock_id):
            if self._service.matches_filters(updated, self._store.filters.value):
                self._store.merge_item(updated)
            else:
                self._drop_item(livestock_id)
        if self._is_selected(livestock_id):
            self._store.set_selected(updated)
        self._succeed(operation, f"Saved {self._service.display_label(updated)}")
        return True

    async def delete(self, livestock_id: str) -> bool:
        """Delete a record and drop it from the list."""
        operation = "delete"
        token = self._begin(operation)
        try:
            await self._service.delete(livestock_id)
        except FrontendServiceException as error:
            return self._fail(operation, token, error)

        if not self._is_current(operation, token):
            return False
        self._drop_item(livestock_id)
        if self._is_selected(livestock_id):
            self._store.set_selected(None)
        self._succeed(operation, "Animal removed")
        return True

    def dismiss_error(self, *operations: str) -> None:
        """Clear the errors of ``operations`` (all by default) and form errors."""
        for operation in operations or OPERATIONS:
            self._store.set_error(operation, None)
            if self._store.status_of(operation).value == LoadStatus.ERROR:
                self._store.set_status(operation, LoadStatus.IDLE)
        self._store.set_form_errors({})

    def _begin(self, operation: str) -> int:
        token = self._tokens.get(operation, 0) + 1
        self._tokens[operation] = token
        self._store.set_error(operation, None)
        self._store.set_status(operation, LoadStatus.LOADING)
        return token

    def _is_current(self, operation: str, token: int) -> bool:
        current = self._tokens.get(operation) == token
        if not current:
            logger.debug(
                "Discarding superseded response",
                extra={"extra_fields": {"operation": operation, "token": token}},
            )
        return current

    def _is_selected(self, livestock_id: str) -> bool:
        selected: Optional[BaseModel] = self._store.selected.value
        return selected is not None and str(selected.id) == str(livestock_id)

    def _is_listed(self, livestock_id: str) -> bool:
        return any(str(item.id) == str(livestock_id) for item in self._store.items.value)

    def _drop_item(self, livestock_id: str) -> None:
        # Total only counts records the list knew about.
        if self._is_listed(livestock_id):
            self._store.remove_item(livestock_id)
            self._store.set_total(max(0, self._store.total.value - 1))

    def _accept_form(self, operation: str, data: Mapping[str, Any], partial: bool) -> bool:
        errors = self._service.validate_form(data, partial=partial)
        self._store.set_form_errors(errors)
        if errors:
            self._store.set_error(operation, FORM_ERROR_MESSAGE)
            self._store.set_status(operation, LoadStatus.ERROR)
            return False
        return True

    def _succeed(self, operation: str, notice: Optional[str] = None) -> None:
        if operation in ("submit_create", "submit_update"):
            self._store.set_form_errors({})
        self._store.set_status(operation, LoadStatus.SUCCESS)
        self._app_store.set_online(True)
        if notice:
            self._app_store.set_notice(notice)

    def _fail(self, operation: str, token: int, error: FrontendServiceException) -> bool:
        if not self._is_current(operation, token):
            return False

        logger.warning(
            "Livestock operation failed",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "error_type": type(error).__name__,
                    "error_message": error.message,
                }
            },
        )
        if isinstance(error, ValidationException):
            self._store.set_form_errors(error.field_errors)
        if isinstance(error, (ServiceUnavailableException, RequestTimeoutException)):
            self._app_store.set_online(False)

        message = self._service.to_user_message(error)
        self._store.set_error(operation, message)
        self._store.set_status(operation, LoadStatus.ERROR)
        self._app_store.set_notice(message)
        return False
