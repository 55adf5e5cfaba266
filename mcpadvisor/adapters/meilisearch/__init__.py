"""
Meilisearch Adapter - Full-text search backend with failover.
"""

from .client import LocalMeilisearchBackend, MeilisearchBackend, create_backend
from .contracts import HealthCheckedSearchBackend, SearchBackend, WritableSearchBackend
from .models import BackendHit, BackendSearchResponse, IndexStats
from .monitor import BackendHealth, BackendMonitor, SystemHealthReport
from .resilient import ResilientClient

__all__ = [
    "MeilisearchBackend",
    "LocalMeilisearchBackend",
    "create_backend",
    "SearchBackend",
    "HealthCheckedSearchBackend",
    "WritableSearchBackend",
    "BackendHit",
    "BackendSearchResponse",
    "IndexStats",
    "BackendHealth",
    "BackendMonitor",
    "SystemHealthReport",
    "ResilientClient",
]
