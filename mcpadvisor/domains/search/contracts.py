"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import CandidateResult, ProviderResult, RerankOptions, SearchQuery


@runtime_checkable
class SearchProvider(Protocol):
    """Contract for sources of candidate MCP servers."""

    name: str

    async def search(self, query: SearchQuery) -> list[CandidateResult]:
        """Execute search and return candidates."""
        ...


@runtime_checkable
class Ranker(Protocol):
    """Contract for merging provider results into one ranked list."""

    def rerank(
        self,
        provider_results: Sequence[ProviderResult],
        options: RerankOptions | None = None,
    ) -> list[CandidateResult]:
        """Merge, deduplicate, filter, sort and truncate results."""
        ...
