"""
GetMCP Provider - Vector search over the getmcp.io directory.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from mcpadvisor.domains.catalog.cache import TTLCache
from mcpadvisor.domains.catalog.fetcher import CatalogFetcher
from mcpadvisor.domains.catalog.models import CatalogEntry
from mcpadvisor.domains.catalog.refresh import DEFAULT_RETRY_AFTER_SECONDS, BackgroundIndex
from mcpadvisor.domains.vector.contracts import WritableVectorSearchEngine
from mcpadvisor.domains.vector.embeddings import EmbeddingProvider
from mcpadvisor.domains.vector.engine import InMemoryVectorEngine
from mcpadvisor.domains.vector.models import VectorSearchOptions

from ..models import CandidateResult, SearchQuery

logger = logging.getLogger(__name__)

__all__ = ["GetMcpSearchProvider"]


class GetMcpSearchProvider:
    """
    Embeds the directory into a vector engine and searches it.

    The directory is embedded in a background task into an engine from
    ``engine_factory``. Once the cache expires, searches keep using the
    previous engine until the rebuilt one replaces it.

    Example:
        >>> provider = GetMcpSearchProvider(fetcher, embedder)
        >>> provider.start()
        >>> results = await provider.search(SearchQuery(task_description="web scraping"))
    """

    name = "getmcp"

    def __init__(
        self,
        fetcher: CatalogFetcher,
        embedder: EmbeddingProvider,
        engine_factory: Callable[[], WritableVectorSearchEngine] = InMemoryVectorEngine,
        cache: TTLCache[dict[str, CatalogEntry]] | None = None,
        limit: int = 5,
        min_similarity: float | None = None,
        retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
    ) -> None:
        """
        Initialize provider.

        Args:
            fetcher: Directory source
            embedder: Embedding provider for entries and queries
            engine_factory: Returns the engine each build writes into
            cache: Decides when the directory is fetched again
            limit: Maximum results
            min_similarity: Drop results below this similarity
            retry_after: Seconds between attempts after a failed build
        """
        self._fetcher = fetcher
        self._embedder = embedder
        self._engine_factory = engine_factory
        self._cache = cache or TTLCache()
        self._limit = limit
        self._min_similarity = min_similarity
        self._index: BackgroundIndex[WritableVectorSearchEngine] = BackgroundIndex(
            self._build, name=self.name, retry_after=retry_after
        )

    def start(self) -> None:
        """Begin embedding the directory without waiting for it."""
        self._index.refresh()

    async def wait_ready(self) -> None:
        await self._index.wait()

    async def close(self) -> None:
        await self._index.close()

    async def search(self, query: SearchQuery) -> list[CandidateResult]:
        engine = await self._index.get(stale=not self._cache.is_valid())
        if engine is None:
            return []

        vector = await asyncio.to_thread(self._embedder.embed, query.to_text())
        results = await engine.search(
            vector,
            limit=self._limit,
            options=VectorSearchOptions(min_similarity=self._min_similarity),
        )
        return [r.model_copy(update={"provider_name": self.name}) for r in results]

    async def _build(self) -> WritableVectorSearchEngine:
        entries = await self._fetcher.fetch()
        engine = self._engine_factory()
        await engine.clear()
        for entry_id, entry in entries.items():
            vector = await asyncio.to_thread(self._embedder.embed, entry.searchable_text())
            await engine.add_entry(entry_id, vector, entry.to_candidate(entry_id, self.name))
        self._cache.set(entries)
        logger.info("Indexed %d directory entries for vector search", len(entries))
        return engine
