"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Search orchestration
    search_default_limit: int = 5
    search_min_similarity: float | None = 0.5
    provider_timeout_seconds: float | None = 10.0
    provider_priorities: dict[str, int] = Field(
        default_factory=lambda: {
            "compass": 10,
            "meilisearch": 9,
            "getmcp": 5,
            "offline": 5,
            "nacos": 5,
        }
    )
    enabled_providers: list[str] = Field(
        default_factory=lambda: ["meilisearch", "compass", "getmcp", "offline"]
    )

    # Catalog sources
    getmcp_api_url: str = "https://getmcp.io/api/servers.json"
    compass_api_base: str = "https://registry.mcphub.io"
    catalog_cache_ttl_seconds: float = 3600.0
    catalog_remote_urls: list[str] = Field(default_factory=list)
    catalog_local_files: list[Path] = Field(default_factory=list)
    http_timeout_seconds: float = 30.0

    # Offline search
    offline_data_path: Path = Path("data/mcp_server_list.json")
    offline_min_similarity: float = 0.3
    offline_text_match_weight: float = 0.7

    # Meilisearch: "local" gets a cloud fallback, "cloud" runs alone
    meilisearch_instance: Literal["local", "cloud"] = "cloud"
    meilisearch_local_host: str = "http://localhost:7700"
    meilisearch_master_key: str = "developmentKey"
    meilisearch_index_name: str = "mcp_servers"
    meilisearch_cloud_host: str = "https://edge.meilisearch.com"
    meilisearch_cloud_api_key: str | None = None
    meilisearch_cloud_index_name: str = "mcp_server_info_from_getmcp_io"
    meilisearch_monitor_interval_seconds: float = 30.0

    # Nacos registry
    nacos_server_addr: str | None = None
    nacos_username: str | None = None
    nacos_password: str | None = None
    nacos_sync_interval_seconds: float = 5.0
    nacos_min_similarity: float = 0.3
    nacos_limit: int = 10

    # Vector engine
    vector_engine_type: Literal["memory", "oceanbase"] = "memory"
    oceanbase_url: str | None = None
    oceanbase_table_name: str = "mcp_vector_data"
    oceanbase_max_connections: int = 20

    # Embeddings
    embedding_provider: Literal["hashing", "sentence-transformers"] = "hashing"
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimension: int = 384

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
