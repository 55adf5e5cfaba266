"""
OceanBase Adapter - Persisted vector search.
"""

from .client import OceanBaseClient, VectorMatch, merge_search_results
from .engine import OceanBaseVectorEngine

__all__ = ["OceanBaseClient", "OceanBaseVectorEngine", "VectorMatch", "merge_search_results"]
