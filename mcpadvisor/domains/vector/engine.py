"""
In-Memory Vector Engine - Writable vector search over MCP server entries.

Features:
- Cosine similarity over unit-normalized vectors
- Category and tag filters
- Optional text query blended with vector similarity
"""

from __future__ import annotations

import logging

import numpy as np

from mcpadvisor.domains.search.models import CandidateResult

from .models import VectorSearchOptions
from .normalization import cosine_scores, normalize
from .text_match import term_match_score

logger = logging.getLogger(__name__)

__all__ = ["InMemoryVectorEngine"]

VECTOR_WEIGHT = 0.7
TEXT_WEIGHT = 0.3


class InMemoryVectorEngine:
    """
    Vector engine holding entries in process memory.

    Example:
        >>> engine = InMemoryVectorEngine()
        >>> await engine.add_entry("fs", embedder.embed("files"), CandidateResult(title="fs"))
        >>> await engine.search(embedder.embed("file access"), limit=5)
    """

    def __init__(self) -> None:
        self._vectors: dict[str, np.ndarray] = {}
        self._entries: dict[str, CandidateResult] = {}

    @property
    def size(self) -> int:
        return len(self._entries)

    async def add_entry(
        self,
        entry_id: str,
        vector: np.ndarray,
        data: CandidateResult,
    ) -> None:
        self._vectors[entry_id] = normalize(vector)
        self._entries[entry_id] = data

    async def clear(self) -> None:
        self._vectors.clear()
        self._entries.clear()
        logger.debug("Cleared in-memory vector engine")

    async def search(
        self,
        query_vector: np.ndarray,
        limit: int = 10,
        options: VectorSearchOptions | None = None,
    ) -> list[CandidateResult]:
        """
        Search entries by cosine similarity.

        Args:
            query_vector: Query embedding (normalized here)
            limit: Maximum number of results
            options: Category/tag filters, min similarity, text query

        Returns:
            Entries with ``similarity`` set, best first
        """
        options = options or VectorSearchOptions()
        ids = [i for i in self._entries if self._matches_filters(self._entries[i], options)]
        if not ids or limit <= 0:
            return []

        matrix = np.vstack([self._vectors[i] for i in ids])
        scores = cosine_scores(matrix, normalize(query_vector))

        results: list[CandidateResult] = []
        for entry_id, vector_score in zip(ids, scores):
            entry = self._entries[entry_id]
            similarity = float(vector_score)
            if options.text_query:
                text_score = term_match_score(
                    options.text_query,
                    entry.title,
                    entry.description,
                    entry.categories,
                    entry.tags,
                )
                similarity = similarity * VECTOR_WEIGHT + text_score * TEXT_WEIGHT
            if options.min_similarity is not None and similarity < options.min_similarity:
                continue
            results.append(entry.model_copy(update={"similarity": similarity}))

        results.sort(key=lambda r: r.similarity, reverse=True)
        return results[:limit]

    @staticmethod
    def _matches_filters(entry: CandidateResult, options: VectorSearchOptions) -> bool:
        if options.categories:
            wanted = {c.lower() for c in options.categories}
            if not wanted.intersection(c.lower() for c in entry.categories):
                return False
        if options.tags:
            wanted = {t.lower() for t in options.tags}
            if not wanted.intersection(t.lower() for t in entry.tags):
                return False
        return True
