"""
Meilisearch Provider - Full-text search through the resilient backend client.

Features:
- Hits mapped to candidates (``_rankingScore`` becomes similarity)
- Optional catalog indexing into a writable local instance, refreshed per TTL
- Indexing runs in the background; queries never wait for it
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mcpadvisor.domains.catalog.cache import TTLCache
from mcpadvisor.domains.catalog.fetcher import CatalogFetcher
from mcpadvisor.domains.catalog.models import CatalogEntry
from mcpadvisor.domains.catalog.refresh import DEFAULT_RETRY_AFTER_SECONDS, BackgroundIndex

from ..models import CandidateResult, SearchQuery

if TYPE_CHECKING:
    from mcpadvisor.adapters.meilisearch.contracts import SearchBackend, WritableSearchBackend
    from mcpadvisor.adapters.meilisearch.models import BackendHit

logger = logging.getLogger(__name__)

__all__ = ["MeilisearchSearchProvider", "to_index_documents"]

DEFAULT_RANKING_SCORE = 0.5


def to_index_documents(entries: dict[str, CatalogEntry]) -> list[dict[str, Any]]:
    """Catalog entries as index documents."""
    return [
        {
            "id": entry_id,
            "title": entry.title or entry_id,
            "description": entry.description,
            "github_url": entry.source_url,
            "categories": entry.categories,
            "tags": entry.tags,
            "installations": entry.installations,
        }
        for entry_id, entry in entries.items()
    ]


class MeilisearchSearchProvider:
    """
    Full-text search provider.

    When an indexer and fetcher are given, the catalog is pushed into the
    local instance by a background task. Queries go to the backend right
    away, whether or not that task has finished.

    Example:
        >>> provider = MeilisearchSearchProvider(ResilientClient(local, cloud))
        >>> results = await provider.search(SearchQuery(task_description="postgres"))
    """

    name = "meilisearch"

    def __init__(
        self,
        backend: SearchBackend,
        indexer: WritableSearchBackend | None = None,
        fetcher: CatalogFetcher | None = None,
        cache: TTLCache[dict[str, CatalogEntry]] | None = None,
        limit: int = 10,
        retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
    ) -> None:
        """
        Initialize provider.

        Args:
            backend: Backend used for queries (usually a ResilientClient)
            indexer: Writable local backend to keep populated, if any
            fetcher: Catalog source for the indexer
            cache: Tracks when the index was last populated
            limit: Hits requested per query
            retry_after: Seconds between indexing attempts after a failure
        """
        self._backend = backend
        self._indexer = indexer
        self._fetcher = fetcher
        self._cache = cache or TTLCache()
        self._limit = limit
        self._index_configured = False
        self._index: BackgroundIndex[int] = BackgroundIndex(
            self._populate, name=self.name, retry_after=retry_after
        )

    @property
    def indexing(self) -> bool:
        """Whether this provider keeps a local index populated."""
        return self._indexer is not None and self._fetcher is not None

    def start(self) -> None:
        """Begin populating the local index without waiting for it."""
        if self.indexing:
            self._index.refresh()

    async def wait_indexed(self) -> None:
        await self._index.wait()

    async def close(self) -> None:
        await self._index.close()

    async def search(self, query: SearchQuery) -> list[CandidateResult]:
        if self.indexing and not self._cache.is_valid():
            self._index.refresh()

        response = await self._backend.search(query.to_text(), limit=self._limit)
        results = [self._to_candidate(hit) for hit in response.hits]
        logger.debug("Meilisearch returned %d results", len(results))
        return results

    async def _populate(self) -> int:
        if self._indexer is None or self._fetcher is None:
            return 0

        entries = await self._fetcher.fetch()
        if not self._index_configured:
            await self._indexer.create_index()
            await self._indexer.configure_search_attributes()
            self._index_configured = True
        await self._indexer.add_documents(to_index_documents(entries))
        self._cache.set(entries)
        logger.info("Indexed %d catalog entries into local backend", len(entries))
        return len(entries)

    def _to_candidate(self, hit: BackendHit) -> CandidateResult:
        similarity = hit.ranking_score if hit.ranking_score is not None else DEFAULT_RANKING_SCORE
        return CandidateResult(
            id=str(hit.id) if hit.id is not None else None,
            title=hit.title,
            description=hit.description or "",
            source_url=hit.github_url or "",
            similarity=similarity,
            score=hit.score,
            categories=hit.categories,
            tags=hit.tags,
            installations=hit.installations,
            provider_name=self.name,
        )
