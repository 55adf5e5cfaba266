"""
Backend Configs - Resolve the active full-text backend and its fallback.

A local instance is always paired with the cloud instance as fallback;
a cloud instance runs alone.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel

from .settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["BackendKind", "BackendConfig", "resolve_backend_configs"]


class BackendKind(str, Enum):
    """Where a search backend instance runs."""

    LOCAL = "local"
    CLOUD = "cloud"


class BackendConfig(BaseModel):
    """Connection details for one search backend instance."""

    kind: BackendKind
    host: str
    api_key: str | None = None
    index_name: str

    model_config = {"frozen": True}


def _local_config(settings: Settings) -> BackendConfig:
    return BackendConfig(
        kind=BackendKind.LOCAL,
        host=settings.meilisearch_local_host,
        api_key=settings.meilisearch_master_key,
        index_name=settings.meilisearch_index_name,
    )


def _cloud_config(settings: Settings) -> BackendConfig:
    return BackendConfig(
        kind=BackendKind.CLOUD,
        host=settings.meilisearch_cloud_host,
        api_key=settings.meilisearch_cloud_api_key,
        index_name=settings.meilisearch_cloud_index_name,
    )


def resolve_backend_configs(
    settings: Settings,
) -> tuple[BackendConfig, BackendConfig | None]:
    """
    Resolve the active backend config and, for local instances, its fallback.

    Args:
        settings: Application settings

    Returns:
        Tuple of (active config, fallback config or None)
    """
    if settings.meilisearch_instance == BackendKind.LOCAL.value:
        active = _local_config(settings)
        fallback = _cloud_config(settings)
        logger.info(
            "Using local search backend at %s with cloud fallback at %s",
            active.host,
            fallback.host,
        )
        return active, fallback

    active = _cloud_config(settings)
    logger.info("Using cloud search backend at %s", active.host)
    return active, None
