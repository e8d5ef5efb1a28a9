"""
Livestock Web Tests - API Client Tests.

Tests for LivestockApiClient against an httpx MockTransport: contract
validation in both directions and translation of HTTP and transport
failures into client exceptions.
"""

import json
from decimal import Decimal
from typing import Any, Callable, Dict, List

import httpx
import pytest
from livestock_contracts.livestock import LivestockFilter, LivestockRead

from livestock_web.api_client import LivestockApiClient, field_errors
from livestock_web.exceptions import (
    ConflictException,
    ContractViolationException,
    NotFoundException,
    RequestTimeoutException,
    ServiceUnavailableException,
    ValidationException,
)
from livestock_web.logging_config import clear_request_id, set_request_id

BASE_URL = "http://livestock.test"


@pytest.fixture
def requests() -> List[httpx.Request]:
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
def make_client(requests: List[httpx.Request]) -> Callable[..., LivestockApiClient]:
    """Build a client whose transport answers with ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> LivestockApiClient:
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        return LivestockApiClient(
            base_url=BASE_URL, timeout=2.0, transport=httpx.MockTransport(record)
        )

    return factory


def _error(status_code: int, error: str, details: Dict[str, Any] = None) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"error": error, "message": f"{error} happened", "details": details or {}},
    )


@pytest.mark.asyncio
async def test_get_returns_contract_model(make_client, read_json, requests) -> None:
    """A valid response is returned as LivestockRead."""
    client = make_client(lambda request: httpx.Response(200, json=read_json))

    item = await client.get(read_json["id"])

    assert isinstance(item, LivestockRead)
    assert item.weight_kg == Decimal("612.50")
    assert requests[0].url.path == f"/api/v1/livestock/{read_json['id']}"
    await client.aclose()


@pytest.mark.asyncio
async def test_list_sends_filter_params(make_client, read_json, requests) -> None:
    """Filters and paging are sent as query parameters."""
    page = {"items": [read_json], "total": 1, "limit": 5, "offset": 0}
    client = make_client(lambda request: httpx.Response(200, json=page))

    result = await client.list(LivestockFilter(type="cow", limit=5))

    assert result.total == 1
    assert result.items[0].name == "Bessy"
    params = dict(requests[0].url.params)
    assert params == {"type": "cow", "limit": "5", "offset": "0"}


@pytest.mark.asyncio
async def test_create_validates_before_sending(make_client, requests) -> None:
    """An invalid payload is rejected locally and never sent."""
    client = make_client(lambda request: httpx.Response(201, json={}))

    with pytest.raises(ValidationException) as exc_info:
        await client.create({"type": "cow"})

    assert "name" in exc_info.value.field_errors
    assert requests == []


@pytest.mark.asyncio
async def test_create_posts_contract_json(make_client, read_json, requests) -> None:
    """A valid payload is posted as contract JSON."""
    client = make_client(lambda request: httpx.Response(201, json=read_json))

    created = await client.create({"name": "Bessy", "type": "cow", "weight_kg": "612.5"})

    body = json.loads(requests[0].content)
    assert requests[0].method == "POST"
    assert body["name"] == "Bessy"
    assert body["status"] == "active"
    assert str(created.id) == read_json["id"]


@pytest.mark.asyncio
async def test_update_sends_only_given_fields(make_client, read_json, requests) -> None:
    """PATCH bodies contain only the fields provided."""
    client = make_client(lambda request: httpx.Response(200, json=read_json))

    await client.update(read_json["id"], {"name": "Bess"})

    assert requests[0].method == "PATCH"
    assert json.loads(requests[0].content) == {"name": "Bess"}


@pytest.mark.asyncio
async def test_delete(make_client, requests) -> None:
    """DELETE returns nothing on 204."""
    client = make_client(lambda request: httpx.Response(204))

    assert await client.delete("abc") is None
    assert requests[0].method == "DELETE"


@pytest.mark.asyncio
async def test_not_found(make_client) -> None:
    """404 becomes NotFoundException."""
    client = make_client(lambda request: _error(404, "not_found"))

    with pytest.raises(NotFoundException) as exc_info:
        await client.get("abc")

    assert exc_info.value.livestock_id == "abc"


@pytest.mark.asyncio
async def test_conflict_keeps_error_code(make_client) -> None:
    """409 becomes ConflictException carrying the service's error code."""
    client = make_client(lambda request: _error(409, "duplicate_identifier"))

    with pytest.raises(ConflictException) as exc_info:
        await client.create({"name": "Bessy", "type": "cow"})

    assert exc_info.value.error_code == "duplicate_identifier"


@pytest.mark.asyncio
async def test_server_validation_errors(make_client) -> None:
    """422 field errors are mapped by field name."""
    details = {"errors": [{"loc": ["body", "tag_number"], "msg": "bad tag", "type": "x"}]}
    client = make_client(lambda request: _error(422, "validation_error", details))

    with pytest.raises(ValidationException) as exc_info:
        await client.create({"name": "Bessy", "type": "cow"})

    assert exc_info.value.field_errors == {"tag_number": "bad tag"}


@pytest.mark.asyncio
async def test_server_error(make_client) -> None:
    """5xx becomes ServiceUnavailableException."""
    client = make_client(lambda request: _error(503, "persistence_error"))

    with pytest.raises(ServiceUnavailableException):
        await client.get("abc")


@pytest.mark.asyncio
async def test_connection_error(make_client) -> None:
    """Connection failures become ServiceUnavailableException."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    client = make_client(refuse)

    with pytest.raises(ServiceUnavailableException):
        await client.get("abc")


@pytest.mark.asyncio
async def test_timeout(make_client) -> None:
    """Timeouts become RequestTimeoutException."""

    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(stall)

    with pytest.raises(RequestTimeoutException) as exc_info:
        await client.get("abc")

    assert exc_info.value.operation == "get"


@pytest.mark.asyncio
async def test_response_violating_contract(make_client) -> None:
    """Responses that fail the contract are rejected."""
    client = make_client(lambda request: httpx.Response(200, json={"items": "nope"}))

    with pytest.raises(ContractViolationException) as exc_info:
        await client.list()

    assert exc_info.value.model_name == "LivestockPage"


@pytest.mark.asyncio
async def test_request_id_forwarded(make_client, read_json, requests) -> None:
    """The current request ID is sent for tracing."""
    client = make_client(lambda request: httpx.Response(200, json=read_json))
    set_request_id("req-123")
    try:
        await client.get(read_json["id"])
    finally:
        clear_request_id()

    assert requests[0].headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_health_check(make_client) -> None:
    """Health check reports False on transport errors."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    assert await make_client(lambda request: httpx.Response(200)).health_check() is True
    assert await make_client(refuse).health_check() is False


def test_field_errors_keeps_first_message() -> None:
    """Only the first message per field is kept."""
    errors = [
        {"loc": ("name",), "msg": "first"},
        {"loc": ("name",), "msg": "second"},
        {"loc": ("query", "limit"), "msg": "too small"},
    ]

    assert field_errors(errors) == {"name": "first", "limit": "too small"}
