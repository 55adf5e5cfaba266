"""
OceanBase Vector Engine - Persisted variant of the vector search engine.

Features:
- Same contract as the in-memory engine
- Hybrid filtering (categories, text query, min similarity)
- No-op with a warning while the database is unset or not initialized
"""

from __future__ import annotations

import logging

import numpy as np

from mcpadvisor.config.errors import StorageError
from mcpadvisor.domains.search.models import CandidateResult
from mcpadvisor.domains.vector.models import VectorSearchOptions
from mcpadvisor.domains.vector.normalization import magnitude, normalize

from .client import OceanBaseClient

logger = logging.getLogger(__name__)

__all__ = ["OceanBaseVectorEngine"]


class OceanBaseVectorEngine:
    """
    Vector engine backed by OceanBase.

    Example:
        >>> engine = OceanBaseVectorEngine(OceanBaseClient(url))
        >>> await engine.initialize()
        >>> results = await engine.search(query_vector, limit=5)
    """

    def __init__(self, client: OceanBaseClient | None) -> None:
        """
        Initialize engine.

        Args:
            client: Database client, or None when no database URL is configured
        """
        self._client = client
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> bool:
        """Connect and create the schema; returns whether the engine is usable."""
        if self._client is None:
            logger.warning("OceanBase URL not configured, vector engine disabled")
            return False
        if self._initialized:
            return True
        await self._client.connect()
        await self._client.init_database()
        self._initialized = True
        logger.info("OceanBase vector engine initialized")
        return True

    def _ready(self, operation: str) -> OceanBaseClient | None:
        if self._client is None:
            logger.warning("OceanBase URL not configured, skipping %s", operation)
            return None
        if not self._initialized:
            logger.warning("OceanBase vector engine not initialized, skipping %s", operation)
            return None
        return self._client

    async def search(
        self,
        query_vector: np.ndarray,
        limit: int = 10,
        options: VectorSearchOptions | None = None,
    ) -> list[CandidateResult]:
        client = self._ready("search")
        if client is None:
            return []

        before = magnitude(query_vector)
        normalized = normalize(query_vector)
        logger.debug(
            "Query vector magnitude: %.6f before, %.6f after normalization",
            before,
            magnitude(normalized),
        )

        try:
            matches = await client.search_vectors(normalized, limit, options)
        except StorageError as e:
            logger.error("OceanBase vector search failed: %s", e)
            raise

        return [
            CandidateResult(
                id=match.id,
                title=match.metadata.get("server_name") or match.id,
                description=match.metadata.get("description", ""),
                source_url=match.metadata.get("github_url") or "",
                similarity=match.similarity,
                categories=match.metadata.get("categories", []),
                tags=match.metadata.get("tags", []),
            )
            for match in matches
        ]

    async def add_entry(
        self,
        entry_id: str,
        vector: np.ndarray,
        data: CandidateResult,
    ) -> None:
        client = self._ready("add_entry")
        if client is None:
            return
        await client.add_vector(
            entry_id,
            normalize(vector),
            {
                "server_name": data.title,
                "github_url": data.source_url,
                "description": data.description,
                "categories": data.categories,
                "tags": data.tags,
            },
        )

    async def clear(self) -> None:
        client = self._ready("clear")
        if client is None:
            return
        await client.delete_all()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._initialized = False
