"""
Tests for livestock HTTP endpoints.

Covers:
- End-to-end create/get/update/delete through the API
- Contract validation errors with field-level detail
- Mapping of domain, integrity and persistence errors to status codes
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError

from livestock_service.app import add_request_id, app
from livestock_service.dependencies import get_livestock_service
from livestock_service.models import LivestockRecord
from livestock_service.services.livestock_service import LivestockService

BASE_URL = "/api/v1/livestock"
MISSING_ID = "00000000-0000-0000-0000-000000000000"


class TestCreateAndGet:
    """Test creating and reading records."""

    def test_create_then_get(self, client):
        """Test a created record is returned unchanged by its key."""
        response = client.post(BASE_URL, json={"name": "Bessy", "type": "cow"})

        assert response.status_code == 201
        created = response.json()
        assert created["id"]
        assert created["name"] == "Bessy"
        assert created["type"] == "cow"
        assert created["status"] == "active"

        response = client.get(f"{BASE_URL}/{created['id']}")

        assert response.status_code == 200
        fetched = response.json()
        for field in ("id", "name", "type", "status", "sex", "tag_number"):
            assert fetched[field] == created[field]

    def test_create_full_payload(self, client, sample_livestock_data):
        """Test every contract field is persisted."""
        response = client.post(BASE_URL, json=sample_livestock_data)

        assert response.status_code == 201
        data = response.json()
        assert data["tag_number"] == "UK-0001"
        assert data["birth_date"] == "2021-04-12"
        assert Decimal(data["weight_kg"]) == Decimal("612.50")

    def test_generated_keys_are_unique(self, client):
        """Test each create yields a distinct key."""
        first = client.post(BASE_URL, json={"name": "A", "type": "pig"}).json()
        second = client.post(BASE_URL, json={"name": "B", "type": "pig"}).json()

        assert first["id"] != second["id"]

    def test_get_missing(self, client):
        """Test unknown key returns 404 with the error body."""
        response = client.get(f"{BASE_URL}/{MISSING_ID}")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["details"] == {"id": MISSING_ID}

    def test_get_malformed_key(self, client):
        """Test a non-UUID key fails validation."""
        response = client.get(f"{BASE_URL}/not-a-uuid")

        assert response.status_code == 422


class TestValidation:
    """Test contract validation at the API boundary."""

    @pytest.mark.parametrize("missing", ["name", "type"])
    def test_missing_required_field(self, client, missing):
        """Test each missing required field is reported by name."""
        payload = {"name": "Bessy", "type": "cow"}
        del payload[missing]

        response = client.post(BASE_URL, json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        locations = [error["loc"] for error in body["details"]["errors"]]
        assert ["body", missing] in locations

    def test_invalid_enum_value(self, client):
        """Test values outside the schema enum are rejected."""
        response = client.post(BASE_URL, json={"name": "Nessie", "type": "dragon"})

        assert response.status_code == 422

    def test_unknown_field_rejected(self, client):
        """Test fields not in the schema are rejected."""
        response = client.post(
            BASE_URL, json={"name": "Bessy", "type": "cow", "colour": "brown"}
        )

        assert response.status_code == 422

    def test_invalid_tag_pattern(self, client):
        """Test tag numbers must match the schema pattern."""
        response = client.post(
            BASE_URL, json={"name": "Bessy", "type": "cow", "tag_number": "bad tag"}
        )

        assert response.status_code == 422
        locations = [e["loc"] for e in response.json()["details"]["errors"]]
        assert ["body", "tag_number"] in locations

    def test_negative_weight_rejected(self, client):
        """Test weight lower bound."""
        response = client.post(
            BASE_URL, json={"name": "Bessy", "type": "cow", "weight_kg": -1}
        )

        assert response.status_code == 422

    def test_weight_beyond_stored_scale_rejected(self, client):
        """Test weights with more decimal places than the column holds are rejected."""
        response = client.post(
            BASE_URL, json={"name": "Bessy", "type": "cow", "weight_kg": "12.345"}
        )

        assert response.status_code == 422
        locations = [e["loc"] for e in response.json()["details"]["errors"]]
        assert ["body", "weight_kg"] in locations

    def test_weight_read_back_as_submitted(self, client):
        """Test a stored weight reads back equal to the submitted one."""
        created = client.post(
            BASE_URL, json={"name": "Bessy", "type": "cow", "weight_kg": "12.34"}
        ).json()

        fetched = client.get(f"{BASE_URL}/{created['id']}").json()

        assert Decimal(created["weight_kg"]) == Decimal("12.34")
        assert Decimal(fetched["weight_kg"]) == Decimal(created["weight_kg"])

    @pytest.mark.parametrize(
        "method,payload",
        [
            ("post", {"type": "cow"}),
            ("post", {"name": "Bessy"}),
            ("put", {"name": "Bessy"}),
            ("put", {"type": "cow"}),
        ],
    )
    def test_invalid_payload_never_reaches_service(self, client, method, payload):
        """Test rejected payloads do not invoke the service."""
        service = MagicMock(spec=LivestockService)
        service.create = AsyncMock()
        service.replace = AsyncMock()
        app.dependency_overrides[get_livestock_service] = lambda: service
        url = BASE_URL if method == "post" else f"{BASE_URL}/{MISSING_ID}"

        response = getattr(client, method)(url, json=payload)

        assert response.status_code == 422
        service.create.assert_not_awaited()
        service.replace.assert_not_awaited()

    def test_invalid_filter(self, client):
        """Test invalid list query parameters are reported under query."""
        response = client.get(BASE_URL, params={"limit": 0})

        assert response.status_code == 422
        locations = [e["loc"] for e in response.json()["details"]["errors"]]
        assert ["query", "limit"] in locations


class TestList:
    """Test listing records."""

    def test_list_with_filter(self, client):
        """Test list filters by type and reports the total."""
        client.post(BASE_URL, json={"name": "A", "type": "cow"})
        client.post(BASE_URL, json={"name": "B", "type": "goat"})
        client.post(BASE_URL, json={"name": "C", "type": "cow"})

        response = client.get(BASE_URL, params={"type": "cow", "limit": 10})

        assert response.status_code == 200
        page = response.json()
        assert page["total"] == 2
        assert page["limit"] == 10
        assert page["offset"] == 0
        assert sorted(item["name"] for item in page["items"]) == ["A", "C"]

    def test_list_empty(self, client):
        """Test empty store returns an empty page."""
        page = client.get(BASE_URL).json()

        assert page["items"] == []
        assert page["total"] == 0


class TestUpdate:
    """Test replace and patch endpoints."""

    def test_patch(self, client):
        """Test patch changes only the submitted fields."""
        created = client.post(
            BASE_URL, json={"name": "Bessy", "type": "cow", "breed": "Jersey"}
        ).json()

        response = client.patch(f"{BASE_URL}/{created['id']}", json={"name": "Bess"})

        assert response.status_code == 200
        assert response.json()["name"] == "Bess"
        assert response.json()["breed"] == "Jersey"

    def test_patch_missing_leaves_store_unchanged(self, client, db_session):
        """Test patching an unknown key returns 404 and writes nothing."""
        client.post(BASE_URL, json={"name": "Bessy", "type": "cow"})

        response = client.patch(f"{BASE_URL}/{MISSING_ID}", json={"name": "Ghost"})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        names = [row.name for row in db_session.query(LivestockRecord).all()]
        assert names == ["Bessy"]

    def test_put(self, client):
        """Test replace requires the full contract."""
        created = client.post(BASE_URL, json={"name": "Bessy", "type": "cow"}).json()

        response = client.put(
            f"{BASE_URL}/{created['id']}", json={"name": "Bessy", "type": "sheep"}
        )

        assert response.status_code == 200
        assert response.json()["type"] == "sheep"

    def test_identical_put_writes_once(self, client, sample_livestock_data):
        """Test repeating a replace leaves the record and updated_at unchanged."""
        created = client.post(BASE_URL, json=sample_livestock_data).json()
        payload = {**sample_livestock_data, "weight_kg": "612.5", "name": "Bess"}

        first = client.put(f"{BASE_URL}/{created['id']}", json=payload).json()
        second = client.put(f"{BASE_URL}/{created['id']}", json=payload).json()

        assert first["name"] == "Bess"
        assert second == first

    def test_put_missing_required_field(self, client):
        """Test replace without a required field is rejected."""
        created = client.post(BASE_URL, json={"name": "Bessy", "type": "cow"}).json()

        response = client.put(f"{BASE_URL}/{created['id']}", json={"name": "Bessy"})

        assert response.status_code == 422

    def test_invalid_transition(self, client):
        """Test terminal statuses map to 409."""
        created = client.post(
            BASE_URL, json={"name": "Bessy", "type": "cow", "status": "deceased"}
        ).json()

        response = client.patch(
            f"{BASE_URL}/{created['id']}", json={"status": "active"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "invalid_state_transition"

    def test_duplicate_tag(self, client):
        """Test duplicate tag numbers map to 409."""
        client.post(BASE_URL, json={"name": "A", "type": "cow", "tag_number": "T-100"})

        response = client.post(
            BASE_URL, json={"name": "B", "type": "cow", "tag_number": "T-100"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_identifier"


class TestBatchAndDelete:
    """Test batch create and delete endpoints."""

    def test_batch_create(self, client):
        """Test batch create returns every created record."""
        response = client.post(
            f"{BASE_URL}/batch",
            json={"items": [{"name": "A", "type": "cow"}, {"name": "B", "type": "pig"}]},
        )

        assert response.status_code == 201
        assert [item["name"] for item in response.json()] == ["A", "B"]

    def test_batch_rolls_back(self, client, db_session):
        """Test a rejected batch leaves the store unchanged."""
        response = client.post(
            f"{BASE_URL}/batch",
            json={
                "items": [
                    {"name": "A", "type": "cow", "tag_number": "X-1"},
                    {"name": "B", "type": "cow", "dam_id": MISSING_ID},
                ]
            },
        )

        assert response.status_code == 409
        assert response.json()["error"] == "referenced_entity_missing"
        assert db_session.query(LivestockRecord).count() == 0

    def test_empty_batch_rejected(self, client):
        """Test a batch needs at least one item."""
        response = client.post(f"{BASE_URL}/batch", json={"items": []})

        assert response.status_code == 422

    def test_delete(self, client):
        """Test delete returns 204 and the record is gone."""
        created = client.post(BASE_URL, json={"name": "Bessy", "type": "cow"}).json()

        response = client.delete(f"{BASE_URL}/{created['id']}")

        assert response.status_code == 204
        assert client.get(f"{BASE_URL}/{created['id']}").status_code == 404

    def test_delete_missing(self, client):
        """Test delete of unknown key returns 404."""
        response = client.delete(f"{BASE_URL}/{MISSING_ID}")

        assert response.status_code == 404


class TestInfrastructureErrors:
    """Test persistence and unexpected error mapping."""

    def _override_repository(self, repository):
        app.dependency_overrides[get_livestock_service] = lambda: LivestockService(
            repository, retry_attempts=1
        )

    def test_persistence_error_maps_to_503(self, client):
        """Test database outages return a generic 503."""
        repository = MagicMock()
        repository.find_by_id = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("secret dsn"))
        )
        self._override_repository(repository)

        response = client.get(f"{BASE_URL}/{MISSING_ID}")

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "persistence_error"
        assert "secret" not in response.text

    def test_integrity_error_maps_to_409(self, client):
        """Test constraint violations return a generic 409."""
        repository = MagicMock()
        repository.find_by_id = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("unique"))
        )
        self._override_repository(repository)

        response = client.get(f"{BASE_URL}/{MISSING_ID}")

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_unexpected_error_maps_to_500(self):
        """Test unexpected errors return a generic 500."""
        repository = MagicMock()
        repository.find_by_id = AsyncMock(side_effect=RuntimeError("internal detail"))
        self._override_repository(repository)

        try:
            with patch("livestock_service.app.init_db"), TestClient(
                app, raise_server_exceptions=False
            ) as client:
                response = client.get(
                    f"{BASE_URL}/{MISSING_ID}", headers={"X-Request-ID": "req-42"}
                )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["details"] == {"request_id": "req-42"}
        assert "internal detail" not in response.text


class TestHealth:
    """Test health endpoints."""

    def test_health(self, client):
        """Test liveness probe."""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        """Test readiness probe checks the database."""
        response = client.get("/api/v1/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {"database": "healthy"}

    def test_root_reports_contract(self, client):
        """Test root endpoint exposes the contract version."""
        body = client.get("/").json()

        assert body["contract"]["entity"] == "Livestock"
        assert len(body["contract"]["fingerprint"]) == 64

    def test_request_id_echoed(self, client):
        """Test the caller's request ID is returned."""
        response = client.get("/api/v1/health", headers={"X-Request-ID": "trace-1"})

        assert response.headers["X-Request-ID"] == "trace-1"

    def test_metrics_record_operations(self, client, sample_livestock_data):
        """Test operation counters appear on the metrics endpoint."""
        client.post("/api/v1/livestock", json=sample_livestock_data)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'livestock_operations_total{operation="create",status="success"}' in response.text
        assert "livestock_http_requests_total" in response.text


class TestRequestContext:
    """Test per-request logging context."""

    @pytest.mark.asyncio
    async def test_log_context_cleared_when_handler_raises(self):
        """Test the bound request ID does not outlive a failing request."""
        request = Request(
            {
                "type": "http",
                "method": "GET",
                "path": "/",
                "headers": [(b"x-request-id", b"req-9")],
            }
        )
        seen = {}

        async def failing_call_next(_request):
            seen.update(structlog.contextvars.get_contextvars())
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await add_request_id(request, failing_call_next)

        assert seen == {"request_id": "req-9"}
        assert structlog.contextvars.get_contextvars() == {}
