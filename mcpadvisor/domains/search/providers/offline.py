"""
Offline Provider - Hybrid search over a bundled MCP server list.

Features:
- Works without network access
- Text matching and vector similarity run concurrently
- Weighted merge (text 0.7, vector 0.3 by default) with a minimum similarity
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from mcpadvisor.domains.catalog.loader import OfflineDataLoader, embedding_text
from mcpadvisor.domains.catalog.refresh import DEFAULT_RETRY_AFTER_SECONDS, BackgroundIndex
from mcpadvisor.domains.vector.contracts import WritableVectorSearchEngine
from mcpadvisor.domains.vector.embeddings import EmbeddingProvider
from mcpadvisor.domains.vector.engine import InMemoryVectorEngine
from mcpadvisor.domains.vector.text_match import term_match_score

from ..models import CandidateResult, SearchQuery

logger = logging.getLogger(__name__)

__all__ = ["OfflineSearchProvider"]


_OfflineIndex = tuple[list[CandidateResult], WritableVectorSearchEngine]


class OfflineSearchProvider:
    """
    Searches the bundled catalog with text matching plus embeddings.

    Entries are embedded once, in a background task that survives a
    timed-out search.

    Example:
        >>> provider = OfflineSearchProvider(loader, embedder)
        >>> results = await provider.search(SearchQuery(task_description="image tools"))
    """

    name = "offline"

    def __init__(
        self,
        loader: OfflineDataLoader,
        embedder: EmbeddingProvider,
        engine_factory: Callable[[], WritableVectorSearchEngine] = InMemoryVectorEngine,
        text_match_weight: float = 0.7,
        min_similarity: float = 0.3,
        limit: int = 10,
        retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
    ) -> None:
        """
        Initialize provider.

        Args:
            loader: Source of the bundled entries
            embedder: Embedding provider for entries and queries
            engine_factory: Returns the engine the entries are embedded into
            text_match_weight: Share of text matching in the final score
            min_similarity: Final scores below this are dropped
            limit: Maximum results
            retry_after: Seconds between attempts after a failed load
        """
        if not 0.0 <= text_match_weight <= 1.0:
            raise ValueError("text_match_weight must be within [0, 1]")
        self._loader = loader
        self._embedder = embedder
        self._engine_factory = engine_factory
        self._text_weight = text_match_weight
        self._vector_weight = 1.0 - text_match_weight
        self._min_similarity = min_similarity
        self._limit = limit
        self._index: BackgroundIndex[_OfflineIndex] = BackgroundIndex(
            self._build, name=self.name, retry_after=retry_after
        )

    def start(self) -> None:
        """Begin embedding the bundled entries without waiting for it."""
        self._index.refresh()

    async def wait_ready(self) -> None:
        await self._index.wait()

    async def close(self) -> None:
        await self._index.close()

    async def search(self, query: SearchQuery) -> list[CandidateResult]:
        index = await self._index.get()
        if index is None:
            return []
        entries, engine = index
        if not entries:
            return []

        text = query.to_text()
        vector_results, text_results = await asyncio.gather(
            self._vector_search(engine, text),
            asyncio.to_thread(self._text_search, text, entries),
        )

        merged: dict[str, float] = {}
        by_key: dict[str, CandidateResult] = {}
        for result, similarity in text_results:
            key = result.dedup_key
            by_key[key] = result
            merged[key] = similarity * self._text_weight
        for result in vector_results:
            key = result.dedup_key
            by_key.setdefault(key, result)
            merged[key] = merged.get(key, 0.0) + result.similarity * self._vector_weight

        results = [
            by_key[key].model_copy(update={"similarity": score, "provider_name": self.name})
            for key, score in merged.items()
            if score >= self._min_similarity
        ]
        results.sort(key=lambda r: r.similarity, reverse=True)
        logger.debug("Offline search matched %d of %d entries", len(results), len(entries))
        return results[: self._limit]

    async def _vector_search(
        self,
        engine: WritableVectorSearchEngine,
        text: str,
    ) -> list[CandidateResult]:
        vector = await asyncio.to_thread(self._embedder.embed, text)
        return await engine.search(vector, limit=self._limit * 2)

    @staticmethod
    def _text_search(
        text: str,
        entries: list[CandidateResult],
    ) -> list[tuple[CandidateResult, float]]:
        matches = []
        for entry in entries:
            score = term_match_score(
                text, entry.title, entry.description, entry.categories, entry.tags
            )
            if score > 0:
                matches.append((entry, score))
        return matches

    async def _build(self) -> _OfflineIndex:
        entries = await self._loader.load()
        engine = self._engine_factory()
        await engine.clear()
        for entry in entries:
            vector = await asyncio.to_thread(self._embedder.embed, embedding_text(entry))
            await engine.add_entry(entry.dedup_key, vector, entry)
        logger.info("Offline provider loaded %d entries", len(entries))
        return entries, engine
