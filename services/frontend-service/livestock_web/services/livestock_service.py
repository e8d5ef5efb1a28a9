"""
Livestock view service.

Stateless helpers shared by the livestock facades: display formatting,
form validation against the contract, user-facing error messages, and the
data calls, which are delegated to the API client.
"""

from collections import Counter
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from livestock_contracts.livestock import (
    LIVESTOCK_TYPES,
    LivestockCreate,
    LivestockPatch,
)
from pydantic import BaseModel, ValidationError

from ..api_client import LivestockApiClient, field_errors
from ..exceptions import (
    ConflictException,
    ContractViolationException,
    FrontendServiceException,
    NotFoundException,
    RequestTimeoutException,
    ServiceUnavailableException,
    ValidationException,
)
from ..logging_config import get_logger

logger = get_logger(__name__)

CONFLICT_MESSAGES = {
    "duplicate_identifier": "That tag number is already in use.",
    "referenced_entity_missing": "The selected dam does not exist or cannot be a dam.",
    "invalid_state_transition": "Sold or deceased animals cannot change status.",
}


class LivestockViewService:
    """
    Formatting, validation and data access for livestock views.

    Holds no state between calls; the API client is its only collaborator.
    """

    def __init__(self, client: LivestockApiClient) -> None:
        self.client = client

    # Data access

    async def load_page(
        self, page: int, page_size: int, filters: Mapping[str, Any]
    ) -> BaseModel:
        """Fetch one page (1-based) of records matching ``filters``."""
        query = {**filters, "limit": page_size, "offset": (page - 1) * page_size}
        return await self.client.list(query)

    async def get(self, livestock_id: str) -> BaseModel:
        return await self.client.get(livestock_id)

    async def create(self, data: Mapping[str, Any]) -> BaseModel:
        return await self.client.create(self.clean_form(data))

    async def update(self, livestock_id: str, data: Mapping[str, Any]) -> BaseModel:
        return await self.client.update(livestock_id, self.clean_form(data))

    async def delete(self, livestock_id: str) -> None:
        await self.client.delete(livestock_id)

    # Validation

    @staticmethod
    def clean_form(data: Mapping[str, Any]) -> Dict[str, Any]:
        """Drop blank text inputs so they count as not provided; None clears a field."""
        return {
            name: value.strip() if isinstance(value, str) else value
            for name, value in data.items()
            if not (isinstance(value, str) and not value.strip())
        }

    def validate_form(
        self, data: Mapping[str, Any], partial: bool = False
    ) -> Dict[str, str]:
        """
        Check form input against the contract.

        Args:
            data: Raw form values
            partial: Validate as an update (all fields optional)

        Returns:
            Mapping of field name to error message; empty when valid
        """
        model = LivestockPatch if partial else LivestockCreate
        try:
            model.model_validate(self.clean_form(data))
        except ValidationError as e:
            return field_errors(e.errors())
        return {}

    @staticmethod
    def matches_filters(item: BaseModel, filters: Mapping[str, Any]) -> bool:
        """True when ``item`` would appear in a list fetched with ``filters``."""
        return all(
            str(getattr(item, name, None)) == str(value) for name, value in filters.items()
        )

    # Formatting

    @staticmethod
    def display_label(item: BaseModel) -> str:
        label = f"{item.name} ({item.type})"
        if item.tag_number:
            label += f" #{item.tag_number}"
        return label

    @staticmethod
    def format_weight(item: BaseModel) -> str:
        if item.weight_kg is None:
            return "-"
        return f"{item.weight_kg:.1f} kg"

    @staticmethod
    def age_in_months(item: BaseModel, today: Optional[date] = None) -> Optional[int]:
        """Whole months since birth, or None when the birth date is unknown."""
        if item.birth_date is None:
            return None
        today = today or date.today()
        born = item.birth_date
        months = (today.year - born.year) * 12 + today.month - born.month
        if today.day < born.day:
            months -= 1
        return max(0, months)

    @staticmethod
    def summarize_by_type(items: Iterable[BaseModel]) -> Dict[str, int]:
        """Head count per type, in contract order, omitting absent types."""
        counts = Counter(item.type for item in items)
        return {kind: counts[kind] for kind in LIVESTOCK_TYPES if counts[kind]}

    @staticmethod
    def to_user_message(error: Exception) -> str:
        """Translate any failure into a message fit for display."""
        if isinstance(error, ValidationException):
            return "Please correct the highlighted fields."
        if isinstance(error, NotFoundException):
            return "This animal no longer exists."
        if isinstance(error, ConflictException):
            return CONFLICT_MESSAGES.get(
                error.error_code, "The change conflicts with existing records."
            )
        if isinstance(error, RequestTimeoutException):
            return "The server took too long to respond. Please try again."
        if isinstance(error, ServiceUnavailableException):
            return "The livestock service is unavailable. Please try again later."
        if isinstance(error, ContractViolationException):
            return "The server sent an unexpected response."
        if isinstance(error, FrontendServiceException):
            return "The request could not be completed."
        logger.error(
            "Unexpected error reached the view layer",
            extra={"extra_fields": {"error_type": type(error).__name__}},
        )
        return "Something went wrong."

    @staticmethod
    def summarize(items: List[BaseModel]) -> str:
        """One-line herd summary, e.g. ``3 animals: cow 2, pig 1``."""
        counts = LivestockViewService.summarize_by_type(items)
        if not counts:
            return "No animals"
        parts = ", ".join(f"{kind} {count}" for kind, count in counts.items())
        noun = "animal" if len(items) == 1 else "animals"
        return f"{len(items)} {noun}: {parts}"
