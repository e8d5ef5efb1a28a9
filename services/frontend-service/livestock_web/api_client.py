"""
HTTP client module for the livestock service API.

Provides the async data-access client the frontend services use. Outbound
payloads are validated against the shared contract before they are sent and
every response body is validated against the contract before it is
returned, so view code only ever sees contract-shaped data. Transport and
HTTP failures are translated into the exceptions in ``exceptions``.
"""

import time
from typing import Any, Dict, Mapping, Optional, Type, Union

import httpx
from livestock_contracts.livestock import (
    LivestockCreate,
    LivestockFilter,
    LivestockPage,
    LivestockPatch,
    LivestockRead,
)
from pydantic import BaseModel, ValidationError

from .config import settings
from .exceptions import (
    ConflictException,
    ContractViolationException,
    FrontendServiceException,
    NotFoundException,
    RequestTimeoutException,
    ServiceUnavailableException,
    ValidationException,
)
from .logging_config import get_logger, get_request_id

logger = get_logger(__name__)

SERVICE_NAME = "livestock-service"
COLLECTION_PATH = "/api/v1/livestock"

Payload = Union[BaseModel, Mapping[str, Any]]


def field_errors(errors: Any) -> Dict[str, str]:
    """
    Reduce pydantic-style error entries to a field -> message mapping.

    Accepts both local ``ValidationError.errors()`` output and the
    ``details.errors`` list of a 422 response. Only the first message per
    field is kept.
    """
    result: Dict[str, str] = {}
    for error in errors or []:
        parts = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        name = ".".join(parts) or "__root__"
        result.setdefault(name, error.get("msg", "Invalid value"))
    return result


class LivestockApiClient:
    """
    Client for interacting with the livestock service API.

    Uses a persistent HTTP client with connection pooling. All methods are
    async, carry the current request ID and raise FrontendServiceException
    subclasses on failure.

    Attributes:
        base_url: Base URL of the livestock service
        timeout: Request timeout in seconds
        _client: Persistent httpx.AsyncClient, created on first use
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize livestock service client.

        Args:
            base_url: Base URL of the livestock service (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            transport: Optional httpx transport, e.g. a MockTransport
        """
        self.base_url = (base_url or settings.LIVESTOCK_SERVICE_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized LivestockApiClient: base_url={self.base_url}, "
            f"timeout={self.timeout}s"
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the persistent HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=100,
                    keepalive_expiry=30.0,
                ),
            )
            logger.debug("Created new HTTP client with connection pooling")
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    def _get_request_headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": "Livestock-Web/1.0",
            "Accept": "application/json",
        }

        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        return headers

    async def list(self, query: Optional[Payload] = None) -> BaseModel:
        """
        List livestock records.

        Args:
            query: LivestockFilter or mapping of filter values

        Returns:
            LivestockPage
        """
        params = self._outbound(LivestockFilter, query or {}).model_dump(
            mode="json", exclude_none=True
        )
        response = await self._request("list", "GET", COLLECTION_PATH, params=params)
        return self._parse(LivestockPage, response)

    async def get(self, livestock_id: str) -> BaseModel:
        """Get one record as LivestockRead."""
        response = await self._request(
            "get", "GET", f"{COLLECTION_PATH}/{livestock_id}", key=livestock_id
        )
        return self._parse(LivestockRead, response)

    async def create(self, payload: Payload) -> BaseModel:
        """Create a record; returns the created LivestockRead."""
        body = self._outbound(LivestockCreate, payload).model_dump(mode="json")
        response = await self._request("create", "POST", COLLECTION_PATH, json=body)
        return self._parse(LivestockRead, response)

    async def update(self, livestock_id: str, payload: Payload) -> BaseModel:
        """Partially update a record; only the fields given are sent."""
        body = self._outbound(LivestockPatch, payload).model_dump(
            mode="json", exclude_unset=True
        )
        response = await self._request(
            "update",
            "PATCH",
            f"{COLLECTION_PATH}/{livestock_id}",
            json=body,
            key=livestock_id,
        )
        return self._parse(LivestockRead, response)

    async def delete(self, livestock_id: str) -> None:
        """Delete a record."""
        await self._request(
            "delete", "DELETE", f"{COLLECTION_PATH}/{livestock_id}", key=livestock_id
        )

    async def health_check(self) -> bool:
        """
        Check if the livestock service is healthy and responding.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            client = await self._get_client()
            response = await client.get(
                "/api/v1/health", headers=self._get_request_headers(), timeout=1.0
            )
            return response.status_code == 200
        except httpx.HTTPError as error:
            logger.warning(
                "Livestock service health check failed with exception",
                extra={
                    "extra_fields": {
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            return False

    def _outbound(self, model: Type[BaseModel], payload: Payload) -> BaseModel:
        """Validate an outbound payload against its contract model."""
        if isinstance(payload, model):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_unset=True)
        try:
            return model.model_validate(dict(payload))
        except ValidationError as e:
            errors = field_errors(e.errors())
            logger.info(
                "Payload rejected before sending",
                extra={"extra_fields": {"model": model.__name__, "fields": sorted(errors)}},
            )
            raise ValidationException(errors) from e

    def _parse(self, model: Type[BaseModel], response: httpx.Response) -> BaseModel:
        """Validate a response body against its contract model."""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(
                "Response does not match contract",
                extra={
                    "extra_fields": {
                        "model": model.__name__,
                        "status_code": response.status_code,
                        "error_message": str(e)[:500],
                    }
                },
            )
            raise ContractViolationException(model.__name__) from e

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        key: Optional[str] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        start_time = time.perf_counter()
        client = await self._get_client()

        try:
            response = await client.request(
                method, path, headers=self._get_request_headers(), **kwargs
            )
        except (httpx.TimeoutException, TimeoutError) as error:
            logger.error(
                "Livestock request timed out",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "timeout": self.timeout,
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                    }
                },
            )
            raise RequestTimeoutException(operation, self.timeout) from error
        except httpx.RequestError as error:
            logger.error(
                "Connection error to livestock service",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            raise ServiceUnavailableException(
                SERVICE_NAME, details={"operation": operation}
            ) from error

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Received response from livestock service",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            },
        )

        self._raise_for_status(operation, response, key)
        return response

    def _raise_for_status(
        self, operation: str, response: httpx.Response, key: Optional[str]
    ) -> None:
        status_code = response.status_code
        if status_code < 400:
            return

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or f"Livestock service returned {status_code}"
        details = body.get("details") or {}

        logger.warning(
            "Livestock service rejected request",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "status_code": status_code,
                    "error": body.get("error"),
                }
            },
        )

        if status_code == 404:
            raise NotFoundException(key or "", details)
        if status_code == 409:
            raise ConflictException(body.get("error") or "conflict", message, details)
        if status_code == 422:
            raise ValidationException(
                field_errors(details.get("errors")), message, details
            )
        if status_code >= 500:
            raise ServiceUnavailableException(SERVICE_NAME, message, details)
        raise FrontendServiceException(message, details)
