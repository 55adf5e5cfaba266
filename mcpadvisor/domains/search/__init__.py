"""
Search Domain - Multi-provider MCP server search.

This domain handles:
- Concurrent fan-out to search providers
- Priority-weighted merging, deduplication and filtering
- Provider adapters (see ``providers``)
"""

from .contracts import Ranker, SearchProvider
from .models import CandidateResult, ProviderResult, RerankOptions, SearchQuery
from .orchestrator import SearchOrchestrator
from .reranker import DEFAULT_PROVIDER_PRIORITY, Reranker

__all__ = [
    "SearchProvider",
    "Ranker",
    "SearchQuery",
    "CandidateResult",
    "ProviderResult",
    "RerankOptions",
    "Reranker",
    "DEFAULT_PROVIDER_PRIORITY",
    "SearchOrchestrator",
]
