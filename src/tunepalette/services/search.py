"""Search Gateway facade over the remote catalog client.

``SearchService.search(query)`` is the only network entry point the
palette uses. It may raise ``GatewayError`` or return late; the query
controller handles both.
"""

from __future__ import annotations

import logging
from typing import Protocol

from tunepalette.config import PaletteConfig
from tunepalette.models import RawResult

logger = logging.getLogger(__name__)


class SearchGateway(Protocol):
    """Anything with an async ``search(query) -> list[RawResult]``."""

    async def search(self, query: str) -> list[RawResult]: ...


class SearchService:
    """Async facade for catalog searches.

    The HTTP client is created lazily on the first search so the service
    can be constructed before an event loop exists.

    Usage::

        svc = SearchService(client_id, client_secret, config=PaletteConfig())
        results = await svc.search("arctic")
        await svc.close()
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        config: PaletteConfig | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._config = config or PaletteConfig()
        self._client = None  # CatalogSearchClient, lazily initialized

    def _ensure_client(self) -> None:
        if self._client is not None:
            return

        from tunepalette.search.client import CatalogSearchClient

        self._client = CatalogSearchClient(
            self._client_id,
            self._client_secret,
            api_base_url=self._config.api_base_url,
            auth_url=self._config.auth_url,
            limit=self._config.search_limit,
            market=self._config.market,
            timeout_seconds=self._config.search_timeout_seconds,
            max_retries=self._config.search_retries,
        )

    async def search(self, query: str) -> list[RawResult]:
        """Search the catalog for *query*.

        Returns:
            Raw results in upstream relevance order.

        Raises:
            GatewayError: If the catalog cannot be reached or answers badly.
        """
        self._ensure_client()
        return await self._client.search_with_retry(query)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
