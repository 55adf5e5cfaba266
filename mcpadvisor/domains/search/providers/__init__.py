"""
Search Providers - Adapters exposing each MCP source as a SearchProvider.
"""

from .compass import CompassSearchProvider
from .getmcp import GetMcpSearchProvider
from .meilisearch import MeilisearchSearchProvider
from .nacos import NacosSearchProvider, extract_keywords
from .offline import OfflineSearchProvider

__all__ = [
    "CompassSearchProvider",
    "GetMcpSearchProvider",
    "MeilisearchSearchProvider",
    "NacosSearchProvider",
    "OfflineSearchProvider",
    "extract_keywords",
]
