"""
Custom exceptions for the livestock service domain.

These exceptions represent business-rule violations and are independent
of infrastructure concerns (HTTP, database, etc.). Persistence failures are
not wrapped: SQLAlchemy errors reach the API layer unmodified.
"""

from typing import Any, Optional


class LivestockServiceException(Exception):
    """Base exception for all livestock service domain errors."""

    error_code = "domain_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class LivestockNotFoundException(LivestockServiceException):
    """Raised when no record exists for a key."""

    error_code = "not_found"

    def __init__(self, livestock_id: str):
        super().__init__(
            message=f"Livestock not found: {livestock_id}",
            details={"id": livestock_id},
        )


class DuplicateIdentifierException(LivestockServiceException):
    """Raised when a unique business identifier is already taken."""

    error_code = "duplicate_identifier"

    def __init__(self, field: str, value: Any):
        super().__init__(
            message=f"Duplicate {field}: {value}",
            details={"field": field, "value": str(value)},
        )


class ReferencedEntityMissingException(LivestockServiceException):
    """Raised when a referenced record does not exist or cannot be referenced."""

    error_code = "referenced_entity_missing"

    def __init__(self, field: str, value: Any, reason: Optional[str] = None):
        message = f"Referenced record for {field} not found: {value}"
        if reason:
            message = f"Invalid reference in {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class InvalidStateTransitionException(LivestockServiceException):
    """Raised when a status change is not allowed by the herd lifecycle."""

    error_code = "invalid_state_transition"

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot change status from '{current}' to '{target}'",
            details={"current": current, "target": target},
        )
