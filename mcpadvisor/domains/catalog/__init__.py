"""
Catalog Domain - MCP server directory data.

This domain handles:
- Single-slot TTL caching of fetched catalogs
- Directory download and validation
- Offline and multi-source loading
- Background index builds
"""

from .cache import CacheEntry, TTLCache
from .fetcher import CatalogFetcher, parse_catalog
from .loader import OfflineDataLoader, embedding_text, load_sources, normalize_record
from .models import CatalogEntry, RepositoryInfo
from .refresh import BackgroundIndex

__all__ = [
    "CacheEntry",
    "TTLCache",
    "CatalogFetcher",
    "parse_catalog",
    "OfflineDataLoader",
    "embedding_text",
    "load_sources",
    "normalize_record",
    "CatalogEntry",
    "RepositoryInfo",
    "BackgroundIndex",
]
