"""
Search Orchestrator - Concurrent fan-out across search providers.

Features:
- All providers queried concurrently
- Per-provider failure and timeout isolation
- Results merged by a Ranker
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from .contracts import Ranker, SearchProvider
from .models import CandidateResult, ProviderResult, RerankOptions, SearchQuery
from .reranker import Reranker

logger = logging.getLogger(__name__)

__all__ = ["SearchOrchestrator"]


class SearchOrchestrator:
    """
    Queries every configured provider and ranks the combined results.

    A failing or slow provider contributes an empty list; the search
    itself never fails because of a provider.

    Example:
        >>> orchestrator = SearchOrchestrator([compass, meilisearch])
        >>> results = await orchestrator.search(SearchQuery(task_description="git tools"))
    """

    def __init__(
        self,
        providers: Sequence[SearchProvider],
        ranker: Ranker | None = None,
        default_options: RerankOptions | None = None,
        provider_timeout: float | None = 10.0,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            providers: Search providers to query
            ranker: Merging strategy (priority-weighted Reranker by default)
            default_options: Options used when a search passes none
            provider_timeout: Seconds allowed per provider call (None disables)
        """
        self._providers: list[SearchProvider] = list(providers)
        self._ranker = ranker or Reranker()
        self._default_options = default_options or RerankOptions()
        self._provider_timeout = provider_timeout

    @property
    def providers(self) -> list[SearchProvider]:
        return list(self._providers)

    def add_provider(self, provider: SearchProvider) -> None:
        self._providers.append(provider)
        logger.info("Added search provider: %s", provider.name)

    def remove_provider(self, name: str) -> bool:
        """Remove a provider by name; returns whether one was removed."""
        before = len(self._providers)
        self._providers = [p for p in self._providers if p.name != name]
        return len(self._providers) < before

    async def search(
        self,
        query: SearchQuery,
        options: RerankOptions | None = None,
    ) -> list[CandidateResult]:
        """
        Search all providers and return ranked results.

        Args:
            query: Search request
            options: Overrides for the default ranking options

        Returns:
            Ranked, deduplicated results (empty if every provider failed)
        """
        if not self._providers:
            logger.warning("No search providers configured")
            return []

        merged = self._merge_options(options)
        provider_results = await asyncio.gather(
            *(self._run_provider(provider, query) for provider in self._providers)
        )

        answered = sum(1 for r in provider_results if r.results)
        logger.info(
            "Search '%s': %d/%d providers returned results",
            query.task_description[:50],
            answered,
            len(provider_results),
        )
        return self._ranker.rerank(provider_results, merged)

    async def _run_provider(
        self,
        provider: SearchProvider,
        query: SearchQuery,
    ) -> ProviderResult:
        try:
            if self._provider_timeout is None:
                results = await provider.search(query)
            else:
                results = await asyncio.wait_for(
                    provider.search(query), timeout=self._provider_timeout
                )
        except asyncio.TimeoutError:
            logger.warning(
                "Provider %s timed out after %.1fs", provider.name, self._provider_timeout
            )
            return ProviderResult(provider_name=provider.name)
        except Exception as e:
            logger.error("Provider %s failed: %s", provider.name, e)
            return ProviderResult(provider_name=provider.name)

        logger.debug("Provider %s returned %d results", provider.name, len(results))
        return ProviderResult(provider_name=provider.name, results=list(results))

    def _merge_options(self, options: RerankOptions | None) -> RerankOptions:
        if options is None:
            return self._default_options
        overrides = options.model_dump(exclude_unset=True)
        return self._default_options.model_copy(update=overrides)
