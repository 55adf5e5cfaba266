"""
Vector Contracts - Read-only and writable vector search engines.

Writability is a separate contract so callers pick the capability they
need when wiring components, instead of probing objects at runtime.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from mcpadvisor.domains.search.models import CandidateResult

from .models import VectorSearchOptions


@runtime_checkable
class VectorSearchEngine(Protocol):
    """Contract for vector similarity search over MCP server entries."""

    async def search(
        self,
        query_vector: np.ndarray,
        limit: int = 10,
        options: VectorSearchOptions | None = None,
    ) -> list[CandidateResult]:
        """Return entries most similar to the query vector."""
        ...


@runtime_checkable
class WritableVectorSearchEngine(VectorSearchEngine, Protocol):
    """Vector search engine that also accepts new entries."""

    async def add_entry(
        self,
        entry_id: str,
        vector: np.ndarray,
        data: CandidateResult,
    ) -> None:
        """Store or replace an entry."""
        ...

    async def clear(self) -> None:
        """Remove all entries."""
        ...
