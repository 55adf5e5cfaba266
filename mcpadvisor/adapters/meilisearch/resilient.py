"""
Resilient Client - Primary/fallback failover for search backends.

Features:
- Fallback on any primary error, with the same arguments
- Fallback's error propagates when both fail
- Health checks follow the same precedence
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from mcpadvisor.config.backends import BackendConfig, BackendKind

from .client import create_backend
from .contracts import HealthCheckedSearchBackend, SearchBackend
from .models import BackendSearchResponse

logger = logging.getLogger(__name__)

__all__ = ["ResilientClient"]


class ResilientClient:
    """
    Routes requests to a primary backend and fails over to a fallback.

    Failover is reactive only: each call tries the primary first.

    Example:
        >>> client = ResilientClient(local_backend, fallback=cloud_backend)
        >>> response = await client.search("browser automation", limit=10)
    """

    def __init__(
        self,
        primary: SearchBackend,
        fallback: SearchBackend | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            primary: Backend tried first
            fallback: Backend used after a primary failure
        """
        self._primary = primary
        self._fallback = fallback
        self._primary_health = self._health_check_of(primary)
        self._fallback_health = self._health_check_of(fallback) if fallback else None

    @classmethod
    def from_configs(
        cls,
        active: BackendConfig,
        fallback: BackendConfig | None = None,
    ) -> ResilientClient:
        """Build clients for the active config and, for local ones, the fallback."""
        primary_backend = create_backend(active)
        fallback_backend = None
        if active.kind == BackendKind.LOCAL and fallback is not None:
            fallback_backend = create_backend(fallback)
        return cls(primary_backend, fallback_backend)

    @staticmethod
    def _health_check_of(
        backend: SearchBackend,
    ) -> Callable[[], Awaitable[bool]] | None:
        if isinstance(backend, HealthCheckedSearchBackend):
            return backend.health_check
        return None

    @property
    def primary(self) -> SearchBackend:
        return self._primary

    @property
    def fallback(self) -> SearchBackend | None:
        return self._fallback

    async def search(self, query: str, limit: int = 10) -> BackendSearchResponse:
        """
        Search the primary, then the fallback if the primary fails.

        Raises:
            Exception: Primary's error when there is no fallback,
                otherwise the fallback's error
        """
        try:
            return await self._primary.search(query, limit=limit)
        except Exception as e:
            if self._fallback is None:
                raise
            logger.warning("Primary search backend failed, falling back: %s", e)

        try:
            return await self._fallback.search(query, limit=limit)
        except Exception as e:
            logger.error("Fallback search backend failed as well: %s", e)
            raise

    async def health_check(self) -> bool:
        """
        Check the primary, then the fallback.

        A primary without health-check support counts as healthy.
        """
        if self._primary_health is None:
            return True

        try:
            if await self._primary_health():
                return True
            logger.warning("Primary search backend reported unhealthy")
        except Exception as e:
            logger.warning("Primary health check failed: %s", e)

        if self._fallback is None:
            return False
        if self._fallback_health is None:
            return True
        try:
            return await self._fallback_health()
        except Exception as e:
            logger.error("Fallback health check failed: %s", e)
            return False

    async def close(self) -> None:
        await self._primary.close()
        if self._fallback is not None:
            await self._fallback.close()
