"""
Livestock Web Tests - Test Configuration.

Provides contract-shaped sample records and a feature scope wired to a
mocked API client.
"""

import uuid
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from livestock_contracts.livestock import LivestockPage, LivestockRead

from livestock_web.api_client import LivestockApiClient
from livestock_web.composition import LivestockFeature
from livestock_web.stores.app_store import AppStore


def make_item(**overrides: Any) -> LivestockRead:
    """Build a LivestockRead with sensible defaults."""
    data: Dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "name": "Bessy",
        "type": "cow",
        "sex": "female",
        "status": "active",
        "created_at": "2024-01-01T00:00:00",
        "updated_at": "2024-01-01T00:00:00",
    }
    data.update(overrides)
    return LivestockRead.model_validate(data)


def make_page(items: List[LivestockRead], total: int = None, limit: int = 2) -> LivestockPage:
    """Build a LivestockPage around ``items``."""
    return LivestockPage(
        items=items,
        total=len(items) if total is None else total,
        limit=limit,
        offset=0,
    )


@pytest.fixture
def read_json() -> Dict[str, Any]:
    """Read-model JSON as the service returns it."""
    return {
        "id": str(uuid.uuid4()),
        "name": "Bessy",
        "type": "cow",
        "tag_number": "UK-0001",
        "breed": None,
        "sex": "female",
        "birth_date": "2021-04-12",
        "weight_kg": "612.50",
        "status": "active",
        "dam_id": None,
        "notes": None,
        "created_at": "2024-01-01T00:00:00",
        "updated_at": "2024-01-01T00:00:00",
    }


@pytest.fixture
def api_client() -> MagicMock:
    """Mocked LivestockApiClient."""
    client = MagicMock(spec=LivestockApiClient)
    client.list = AsyncMock(return_value=make_page([]))
    client.get = AsyncMock()
    client.create = AsyncMock()
    client.update = AsyncMock()
    client.delete = AsyncMock(return_value=None)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def app_store() -> AppStore:
    """Fresh application store, isolated from the process-wide one."""
    return AppStore()


@pytest.fixture
def feature(api_client: MagicMock, app_store: AppStore) -> LivestockFeature:
    """Feature scope over the mocked client with two records per page."""
    return LivestockFeature(client=api_client, app_store=app_store, page_size=2)


@pytest.fixture
def item_factory():
    """Factory for LivestockRead records."""
    return make_item


@pytest.fixture
def page_factory():
    """Factory for LivestockPage responses."""
    return make_page
