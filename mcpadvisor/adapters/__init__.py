"""
Adapters - External service integrations.

- meilisearch: Full-text search backend with failover
- nacos: MCP server registry
- oceanbase: Persisted vector search
"""

__all__ = ["meilisearch", "nacos", "oceanbase"]
