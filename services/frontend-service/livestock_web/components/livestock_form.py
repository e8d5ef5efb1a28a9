"""
Livestock form component.

Keeps the draft of the form being edited and submits it through its
facade. Field errors and the outcome come back through the facade's
projections.
"""

from typing import Any, Callable, Dict, List, Optional

from ..composition import LivestockFeature
from ..stores.livestock_store import LoadStatus

FORM_FIELDS = (
    "name",
    "type",
    "tag_number",
    "breed",
    "sex",
    "birth_date",
    "weight_kg",
    "status",
    "dam_id",
    "notes",
)

SUBMIT_OPERATIONS = ("submit_create", "submit_update")


class LivestockFormComponent:
    """Create or edit one livestock record."""

    def __init__(self, feature: LivestockFeature, consumer: str = "livestock-form") -> None:
        self.consumer = consumer
        self._feature = feature
        self.facade = feature.facade_for(consumer)
        self.draft: Dict[str, Any] = {}
        self.editing_id: Optional[str] = None
        self.lines: List[str] = []
        self._unsubscribers: List[Callable[[], None]] = []

    def mount(self) -> None:
        projections = [self.facade.form_errors]
        for operation in SUBMIT_OPERATIONS:
            projections.append(self.facade.status_of(operation))
            projections.append(self.facade.error_of(operation))
        for projection in projections:
            self._unsubscribers.append(projection.subscribe(self._on_change))
        self.refresh()

    def unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._feature.release(self.consumer)

    def _on_change(self, _: Any) -> None:
        self.refresh()

    def refresh(self) -> None:
        self.lines = self.render()

    def render(self) -> List[str]:
        title = "Edit animal" if self.editing_id else "New animal"
        lines = [title]
        errors = self.facade.form_errors.value
        for field in FORM_FIELDS:
            value = self.draft.get(field, "")
            line = f"{field}: {value}"
            if field in errors:
                line += f"  <- {errors[field]}"
            lines.append(line)
        status = self.facade.status_of(self.operation).value
        error = self.facade.error_of(self.operation).value
        if status == LoadStatus.LOADING:
            lines.append("Saving...")
        elif error:
            lines.append(f"! {error}")
        return lines

    @property
    def operation(self) -> str:
        return "submit_update" if self.editing_id else "submit_create"

    def edit(self, item: Any) -> None:
        """Load an existing record into the draft."""
        self.editing_id = str(item.id)
        self.draft = {
            field: getattr(item, field)
            for field in FORM_FIELDS
            if getattr(item, field) is not None
        }
        self.refresh()

    def on_change(self, field: str, value: Any) -> None:
        self.draft[field] = value
        self.refresh()

    def on_cancel(self) -> None:
        self.editing_id = None
        self.draft = {}
        self.facade.dismiss_error(*SUBMIT_OPERATIONS)
        self.refresh()

    async def on_submit(self) -> bool:
        if self.editing_id:
            saved = await self.facade.submit_update(self.editing_id, self.draft)
        else:
            saved = await self.facade.submit_create(self.draft)
            if saved:
                self.draft = {}
        self.refresh()
        return saved
