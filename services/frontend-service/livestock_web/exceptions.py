"""
Custom exception classes for the livestock web client.

Every failure the data-access layer can produce is one of these, so the
facades only ever need to catch FrontendServiceException.
"""

from typing import Any, Dict, Optional


class FrontendServiceException(Exception):
    """
    Base exception for livestock web client errors.

    Attributes:
        message: Text suitable for logs, not for end users
        details: Structured context, e.g. the service's error body
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ServiceUnavailableException(FrontendServiceException):
    """
    Raised when the livestock service cannot be reached or fails.

    Covers connection failures, network errors and 5xx responses.
    """

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.service_name = service_name
        super().__init__(message or f"{service_name} is unavailable", details)


class RequestTimeoutException(FrontendServiceException):
    """Exception raised when a request exceeds the configured timeout."""

    def __init__(
        self,
        operation: str,
        timeout_seconds: float,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        message = f"Request '{operation}' timed out after {timeout_seconds}s"
        super().__init__(message, details)


class NotFoundException(FrontendServiceException):
    """Exception raised when the requested record does not exist."""

    def __init__(self, livestock_id: str, details: Optional[Dict[str, Any]] = None):
        self.livestock_id = livestock_id
        super().__init__(f"Livestock not found: {livestock_id}", details)


class ConflictException(FrontendServiceException):
    """
    Exception raised when the service rejects a change on business grounds.

    Attributes:
        error_code: Machine-readable reason reported by the service
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.error_code = error_code
        super().__init__(message, details)


class ValidationException(FrontendServiceException):
    """
    Exception raised when input does not satisfy the contract.

    Raised for local validation before a request is sent and for 422
    responses from the service.

    Attributes:
        field_errors: Mapping of field name to error message
    """

    def __init__(
        self,
        field_errors: Dict[str, str],
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.field_errors = field_errors
        default_message = "Validation failed for: " + ", ".join(sorted(field_errors))
        super().__init__(message or default_message, details)


class ContractViolationException(FrontendServiceException):
    """Exception raised when a service response does not match the contract."""

    def __init__(self, model_name: str, details: Optional[Dict[str, Any]] = None):
        self.model_name = model_name
        super().__init__(f"Response does not match contract '{model_name}'", details)
