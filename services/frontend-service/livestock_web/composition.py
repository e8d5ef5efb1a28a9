"""
Feature composition.

A LivestockFeature owns the objects one livestock feature shares: the API
client, the view service and exactly one store. Each consumer gets its own
facade over that store.
"""

from typing import Dict, Optional

from .api_client import LivestockApiClient
from .facades.livestock_facade import LivestockFacade
from .logging_config import get_logger
from .services.livestock_service import LivestockViewService
from .stores.app_store import AppStore, get_app_store
from .stores.livestock_store import LivestockStore

logger = get_logger(__name__)


class LivestockFeature:
    """
    Dependency scope for one livestock feature.

    Usage::

        async with LivestockFeature() as feature:
            list_view = LivestockListComponent(feature)
            await list_view.mount()
    """

    def __init__(
        self,
        client: Optional[LivestockApiClient] = None,
        app_store: Optional[AppStore] = None,
        page_size: Optional[int] = None,
    ) -> None:
        self.client = client or LivestockApiClient()
        self.service = LivestockViewService(self.client)
        self._store = LivestockStore(page_size=page_size)
        self._app_store = app_store or get_app_store()
        self._facades: Dict[str, LivestockFacade] = {}

    def facade_for(self, consumer: str) -> LivestockFacade:
        """
        Create the facade for ``consumer``.

        Raises:
            ValueError: If ``consumer`` already received a facade
        """
        if consumer in self._facades:
            raise ValueError(f"Consumer '{consumer}' already has a facade")
        facade = LivestockFacade(self._store, self.service, self._app_store)
        self._facades[consumer] = facade
        logger.debug(
            "Created facade",
            extra={"extra_fields": {"consumer": consumer, "facades": len(self._facades)}},
        )
        return facade

    def release(self, consumer: str) -> None:
        """Forget the facade of a consumer that was unmounted."""
        self._facades.pop(consumer, None)

    async def aclose(self) -> None:
        """Release the facades and close the API client."""
        self._facades.clear()
        await self.client.aclose()

    async def __aenter__(self) -> "LivestockFeature":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
