"""
Livestock list component.

Renders the current page of records as plain text lines and forwards user
events to its facade. Re-renders whenever a projection it shows changes.
"""

from typing import Any, Callable, List, Optional

from ..composition import LivestockFeature
from ..stores.livestock_store import LoadStatus

LIST_OPERATIONS = ("load_list", "select", "delete")


class LivestockListComponent:
    """Paged, filterable list of livestock records."""

    def __init__(self, feature: LivestockFeature, consumer: str = "livestock-list") -> None:
        self.consumer = consumer
        self._feature = feature
        self.facade = feature.facade_for(consumer)
        self.lines: List[str] = []
        self.render_count = 0
        self._unsubscribers: List[Callable[[], None]] = []

    async def mount(self) -> None:
        """Subscribe to the facade and load the first page."""
        projections = [self.facade.items, self.facade.page, self.facade.page_count]
        for operation in LIST_OPERATIONS:
            projections.append(self.facade.status_of(operation))
            projections.append(self.facade.error_of(operation))
        for projection in projections:
            self._unsubscribers.append(projection.subscribe(self._on_change))
        self.refresh()
        await self.facade.load_list()

    def unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._feature.release(self.consumer)

    def _on_change(self, _: Any) -> None:
        self.refresh()

    def refresh(self) -> None:
        self.lines = self.render()
        self.render_count += 1

    def render(self) -> List[str]:
        facade = self.facade
        view = facade.view
        loading = facade.status_of("load_list").value == LoadStatus.LOADING

        if loading and not facade.items.value:
            return ["Loading..."]

        lines: List[str] = []
        for operation in LIST_OPERATIONS:
            error = facade.error_of(operation).value
            if facade.status_of(operation).value == LoadStatus.ERROR and error:
                lines.append(f"! {error}")

        items = facade.items.value
        if not items:
            lines.append("No animals found")
        for item in items:
            lines.append(
                f"{view.display_label(item)} | {item.sex} | "
                f"{view.format_weight(item)} | {item.status}"
            )

        lines.append(view.summarize(items))
        lines.append(f"Page {facade.page.value} of {facade.page_count.value}")
        return lines

    async def on_next_page(self) -> None:
        await self.facade.request_page(self.facade.page.value + 1)

    async def on_previous_page(self) -> None:
        await self.facade.request_page(self.facade.page.value - 1)

    async def on_page(self, page: int) -> None:
        await self.facade.request_page(page)

    async def on_filter(self, **filters: Any) -> None:
        await self.facade.apply_filters(**filters)

    async def on_select(self, livestock_id: str) -> None:
        await self.facade.select(livestock_id)

    async def on_delete(self, livestock_id: str) -> None:
        await self.facade.delete(livestock_id)

    def on_dismiss(self) -> None:
        self.facade.dismiss_error(*LIST_OPERATIONS)

    @property
    def selected_label(self) -> Optional[str]:
        selected = self.facade.selected.value
        if selected is None:
            return None
        return self.facade.view.display_label(selected)
