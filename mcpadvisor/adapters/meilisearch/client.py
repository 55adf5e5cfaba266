"""
Meilisearch Client - REST client for the full-text search backend.

Features:
- Async HTTP client (httpx)
- Read-only cloud instance and writable local instance
- Transport and HTTP errors surfaced as BackendUnavailableError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mcpadvisor.config.backends import BackendConfig, BackendKind
from mcpadvisor.config.errors import BackendUnavailableError

from .models import BackendSearchResponse, IndexStats

logger = logging.getLogger(__name__)

__all__ = [
    "MeilisearchBackend",
    "LocalMeilisearchBackend",
    "create_backend",
    "SEARCHABLE_ATTRIBUTES",
    "FILTERABLE_ATTRIBUTES",
]

SEARCHABLE_ATTRIBUTES = ["title", "description", "categories", "tags", "github_url"]
FILTERABLE_ATTRIBUTES = ["categories", "tags"]


class MeilisearchBackend:
    """
    Search-only Meilisearch client.

    Example:
        >>> backend = MeilisearchBackend(config)
        >>> response = await backend.search("database tools", limit=10)
    """

    def __init__(
        self,
        config: BackendConfig,
        timeout: float = 30.0,
        health_timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            config: Host, credentials and index of the instance
            timeout: Request timeout in seconds
            health_timeout: Timeout for health checks in seconds
            transport: Optional httpx transport (tests)
        """
        self.config = config
        self.base_url = config.host.rstrip("/")
        self.timeout = timeout
        self.health_timeout = health_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def kind(self) -> BackendKind:
        return self.config.kind

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise BackendUnavailableError(
                f"{self.kind.value} search backend request failed: {e}",
                {"host": self.base_url, "path": path},
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailableError(
                f"{self.kind.value} search backend returned invalid JSON",
                {"host": self.base_url, "path": path},
            ) from e

    async def search(self, query: str, limit: int = 10) -> BackendSearchResponse:
        """
        Full-text search on the configured index.

        Args:
            query: Query text
            limit: Maximum hits

        Returns:
            Parsed search response

        Raises:
            BackendUnavailableError: Request failed
        """
        data = await self._request(
            "POST",
            f"/indexes/{self.config.index_name}/search",
            json={"q": query, "limit": limit, "showRankingScore": True},
        )
        response = BackendSearchResponse.model_validate(data or {})
        logger.debug(
            "%s backend returned %d hits for '%s'",
            self.kind.value,
            len(response.hits),
            query[:50],
        )
        return response

    async def health_check(self) -> bool:
        """True when ``/health`` answers with status available."""
        client = await self._get_client()
        try:
            response = await client.get("/health", timeout=self.health_timeout)
            response.raise_for_status()
            return response.json().get("status") == "available"
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("%s backend health check failed: %s", self.kind.value, e)
            return False

    async def get_index_stats(self) -> IndexStats:
        data = await self._request("GET", f"/indexes/{self.config.index_name}/stats")
        return IndexStats.model_validate(data or {})

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class LocalMeilisearchBackend(MeilisearchBackend):
    """
    Meilisearch client for a self-hosted instance that also manages the index.

    Example:
        >>> backend = LocalMeilisearchBackend(config)
        >>> await backend.create_index()
        >>> await backend.add_documents([{"id": "fs", "title": "Filesystem"}])
    """

    async def create_index(self) -> None:
        await self._request(
            "POST",
            "/indexes",
            json={"uid": self.config.index_name, "primaryKey": "id"},
        )
        logger.info("Created index: %s", self.config.index_name)

    async def configure_search_attributes(self) -> None:
        await self._request(
            "PATCH",
            f"/indexes/{self.config.index_name}/settings",
            json={
                "searchableAttributes": SEARCHABLE_ATTRIBUTES,
                "filterableAttributes": FILTERABLE_ATTRIBUTES,
            },
        )
        logger.info("Configured search attributes for index: %s", self.config.index_name)

    async def add_documents(self, documents: list[dict[str, Any]]) -> None:
        """Queue documents for indexing (upsert by ``id``)."""
        if not documents:
            return
        await self._request(
            "POST",
            f"/indexes/{self.config.index_name}/documents",
            params={"primaryKey": "id"},
            json=documents,
        )
        logger.info("Queued %d documents for index %s", len(documents), self.config.index_name)


def create_backend(
    config: BackendConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MeilisearchBackend:
    """Build the client matching the instance kind."""
    if config.kind == BackendKind.LOCAL:
        return LocalMeilisearchBackend(config, transport=transport)
    return MeilisearchBackend(config, transport=transport)
