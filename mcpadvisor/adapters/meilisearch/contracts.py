"""
Search Backend Contracts - Capabilities of full-text backend clients.

Each capability is its own contract; wrappers decide at construction time
which ones a backend provides.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .models import BackendSearchResponse, IndexStats


@runtime_checkable
class SearchBackend(Protocol):
    """Read-only full-text search backend."""

    async def search(self, query: str, limit: int = 10) -> BackendSearchResponse:
        """Run a full-text query."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


@runtime_checkable
class HealthCheckedSearchBackend(SearchBackend, Protocol):
    """Search backend that can report its health."""

    async def health_check(self) -> bool:
        """True when the backend answers."""
        ...


@runtime_checkable
class WritableSearchBackend(HealthCheckedSearchBackend, Protocol):
    """Search backend that also manages its index."""

    async def create_index(self) -> None:
        ...

    async def configure_search_attributes(self) -> None:
        ...

    async def add_documents(self, documents: list[dict[str, Any]]) -> None:
        ...

    async def get_index_stats(self) -> IndexStats:
        ...
