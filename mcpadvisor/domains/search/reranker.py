"""
Reranker - Merge provider result sets into one ranked list.

Features:
- Effective score: explicit score, else provider priority x similarity
- Deduplication by source URL (falling back to id)
- Threshold filtering, stable descending sort, truncation
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .models import CandidateResult, ProviderResult, RerankOptions

logger = logging.getLogger(__name__)

__all__ = ["Reranker", "DEFAULT_PROVIDER_PRIORITY"]

DEFAULT_PROVIDER_PRIORITY = 1


@dataclass(frozen=True)
class _Scored:
    result: CandidateResult
    score: float
    priority: int


class Reranker:
    """
    Priority-weighted merge of results from several providers.

    Scores derived from priority x similarity are not clamped
    to [0, 1]; a provider with priority 10 can produce scores up to 10.

    Example:
        >>> reranker = Reranker({"compass": 2})
        >>> ranked = reranker.rerank(
        ...     [ProviderResult(provider_name="compass", results=[...])],
        ...     RerankOptions(limit=5),
        ... )
    """

    def __init__(self, priorities: Mapping[str, int] | None = None) -> None:
        """
        Initialize reranker.

        Args:
            priorities: Provider name to positive weight; unknown names get 1
        """
        self._priorities = dict(priorities or {})

    def priority_for(self, provider_name: str) -> int:
        return self._priorities.get(provider_name, DEFAULT_PROVIDER_PRIORITY)

    def rerank(
        self,
        provider_results: Sequence[ProviderResult],
        options: RerankOptions | None = None,
    ) -> list[CandidateResult]:
        """
        Merge results from all providers.

        Args:
            provider_results: One entry per provider call
            options: Limit and score threshold

        Returns:
            Deduplicated results, score descending, at most ``limit`` long
        """
        options = options or RerankOptions()

        scored = self._score(provider_results)
        unique = self._deduplicate(scored)
        kept = self._filter(unique, options.threshold)
        # sorted() is stable, so equal scores keep their merge order
        ranked = sorted(kept, key=lambda s: s.score, reverse=True)
        if options.limit is not None:
            ranked = ranked[: options.limit]

        logger.info(
            "Reranked %d candidates from %d providers: %d unique, %d returned",
            len(scored),
            len(provider_results),
            len(unique),
            len(ranked),
        )
        return [s.result for s in ranked]

    def _score(self, provider_results: Sequence[ProviderResult]) -> list[_Scored]:
        scored: list[_Scored] = []
        for provider_result in provider_results:
            name = provider_result.provider_name
            priority = self.priority_for(name)
            for result in provider_result.results:
                if result.score is not None:
                    score = result.score
                else:
                    score = priority * (result.similarity or 0.0)
                tagged = result.model_copy(update={"provider_name": name, "score": score})
                scored.append(_Scored(result=tagged, score=score, priority=priority))
        return scored

    def _deduplicate(self, scored: list[_Scored]) -> list[_Scored]:
        # dict keeps the position of the first occurrence of each key
        merged: dict[str, _Scored] = {}
        for entry in scored:
            key = entry.result.dedup_key
            existing = merged.get(key)
            if existing is None:
                merged[key] = entry
                continue
            if entry.score > existing.score or (
                entry.score == existing.score and entry.priority > existing.priority
            ):
                logger.debug("Duplicate %s replaced by %s", key, entry.result.provider_name)
                merged[key] = entry
        return list(merged.values())

    def _filter(self, scored: list[_Scored], threshold: float | None) -> list[_Scored]:
        if threshold is None:
            return scored
        return [s for s in scored if s.score >= threshold]
