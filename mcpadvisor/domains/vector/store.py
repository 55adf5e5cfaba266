"""
Vector Store - In-memory collection of embedded documents.

Features:
- Embeds and unit-normalizes on insert (re-adding an id replaces it)
- Cosine top-k search with distance = 1 - similarity
- Lookup by id and clear
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from typing import Any

import numpy as np

from .embeddings import EmbeddingProvider
from .models import VectorGetResult, VectorQueryResult, VectorRecord
from .normalization import cosine_scores, normalize, similarity_to_distance

logger = logging.getLogger(__name__)

__all__ = ["VectorStore"]


class VectorStore:
    """
    In-memory vector store over a pluggable embedding provider.

    Example:
        >>> store = VectorStore(HashingEmbeddingProvider())
        >>> await store.add("Filesystem server", {"id": "fs"})
        >>> result = await store.search("files", k=3)
        >>> result.ids
        ['fs']
    """

    def __init__(self, embedder: EmbeddingProvider) -> None:
        """
        Initialize store.

        Args:
            embedder: Embedding provider used for documents and queries
        """
        self._embedder = embedder
        self._records: dict[str, VectorRecord] = {}
        self._matrix: np.ndarray | None = None

    @property
    def size(self) -> int:
        """Number of stored records."""
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    async def _embed(self, text: str) -> np.ndarray:
        vector = await asyncio.to_thread(self._embedder.embed, text)
        return normalize(vector)

    async def add(self, text: str, metadata: dict[str, Any] | None = None) -> str:
        """
        Embed and store a document.

        Args:
            text: Document text
            metadata: Payload; ``metadata["id"]`` is the record id if present

        Returns:
            Record id
        """
        metadata = dict(metadata or {})
        record_id = str(metadata.get("id") or uuid.uuid4())
        vector = await self._embed(text)

        if record_id in self._records:
            logger.debug("Replacing vector record: %s", record_id)

        self._records[record_id] = VectorRecord(
            id=record_id,
            vector=vector,
            document=text,
            metadata=metadata,
        )
        self._matrix = None
        return record_id

    async def add_many(
        self,
        ids: Sequence[str],
        documents: Sequence[str],
        metadatas: Sequence[dict[str, Any]] | None = None,
    ) -> int:
        """Add documents in bulk; returns number stored."""
        if len(ids) != len(documents):
            raise ValueError("ids and documents must have the same length")
        metadatas = metadatas or [{} for _ in ids]

        for record_id, document, metadata in zip(ids, documents, metadatas):
            await self.add(document, {**metadata, "id": record_id})

        logger.info("Added %d documents to vector store", len(ids))
        return len(ids)

    async def search(self, query: str, k: int = 5) -> VectorQueryResult:
        """
        Find the k records most similar to the query text.

        Args:
            query: Query text
            k: Maximum number of matches

        Returns:
            Matches ordered by similarity descending
        """
        if not self._records or k <= 0:
            return VectorQueryResult()

        query_vector = await self._embed(query)
        records = list(self._records.values())
        scores = cosine_scores(self._get_matrix(), query_vector)
        order = np.argsort(-scores, kind="stable")[:k]

        result = VectorQueryResult()
        for idx in order:
            record = records[int(idx)]
            result.ids.append(record.id)
            result.documents.append(record.document)
            result.metadatas.append(record.metadata)
            result.distances.append(similarity_to_distance(float(scores[idx])))

        logger.debug("Vector store search returned %d of %d records", len(result), self.size)
        return result

    async def get(self, ids: Sequence[str] | None = None) -> VectorGetResult:
        """Fetch records by id (all records when ids is None)."""
        keys = list(self._records) if ids is None else list(ids)
        result = VectorGetResult()
        for record_id in keys:
            record = self._records.get(record_id)
            if record is None:
                continue
            result.ids.append(record.id)
            result.documents.append(record.document)
            result.metadatas.append(record.metadata)
        return result

    async def clear(self) -> None:
        """Remove every record."""
        count = len(self._records)
        self._records.clear()
        self._matrix = None
        logger.info("Cleared %d vector records", count)

    def _get_matrix(self) -> np.ndarray:
        if self._matrix is None:
            self._matrix = np.vstack([r.vector for r in self._records.values()])
        return self._matrix
