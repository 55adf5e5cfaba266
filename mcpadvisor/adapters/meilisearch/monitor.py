"""
Backend Monitor - Periodic health reporting for search backends.

Features:
- Health and index statistics per backend
- System report with a routing recommendation
- Background polling task (observability only, never changes routing)
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from mcpadvisor.config.errors import BackendUnavailableError

from .client import MeilisearchBackend

logger = logging.getLogger(__name__)

__all__ = ["BackendHealth", "SystemHealthReport", "BackendMonitor"]


class BackendHealth(BaseModel):
    """Health snapshot of one backend."""

    kind: str
    host: str
    healthy: bool
    latency_ms: float | None = None
    document_count: int | None = None
    is_indexing: bool | None = None
    error: str | None = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SystemHealthReport(BaseModel):
    """Health of primary and fallback plus a recommendation."""

    primary: BackendHealth
    fallback: BackendHealth | None = None
    recommendation: str


class BackendMonitor:
    """
    Polls backend health on an interval.

    Example:
        >>> monitor = BackendMonitor(local_backend, cloud_backend, interval=30)
        >>> monitor.start()
        >>> report = await monitor.report()
        >>> await monitor.stop()
    """

    def __init__(
        self,
        primary: MeilisearchBackend,
        fallback: MeilisearchBackend | None = None,
        interval: float = 30.0,
    ) -> None:
        """
        Initialize monitor.

        Args:
            primary: Primary backend
            fallback: Optional fallback backend
            interval: Seconds between polls
        """
        self._primary = primary
        self._fallback = fallback
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._last_report: SystemHealthReport | None = None

    @property
    def last_report(self) -> SystemHealthReport | None:
        return self._last_report

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self, backend: MeilisearchBackend) -> BackendHealth:
        """Check one backend's health and index statistics."""
        start = time.perf_counter()
        healthy = await backend.health_check()
        latency_ms = (time.perf_counter() - start) * 1000

        health = BackendHealth(
            kind=backend.kind.value,
            host=backend.base_url,
            healthy=healthy,
            latency_ms=round(latency_ms, 2),
        )
        if not healthy:
            return health.model_copy(update={"error": "health endpoint unavailable"})

        try:
            stats = await backend.get_index_stats()
        except BackendUnavailableError as e:
            return health.model_copy(update={"error": e.message})
        return health.model_copy(
            update={
                "document_count": stats.number_of_documents,
                "is_indexing": stats.is_indexing,
            }
        )

    async def report(self) -> SystemHealthReport:
        """Check every backend and build a report."""
        primary = await self.check(self._primary)
        fallback = await self.check(self._fallback) if self._fallback else None

        report = SystemHealthReport(
            primary=primary,
            fallback=fallback,
            recommendation=_recommend(primary, fallback),
        )
        self._last_report = report
        return report

    def start(self) -> None:
        """Start background polling on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._poll())
        logger.info("Backend monitor started (interval: %.0fs)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Backend monitor stopped")

    async def _poll(self) -> None:
        while True:
            try:
                report = await self.report()
                if not report.primary.healthy:
                    logger.warning("Primary backend unhealthy: %s", report.recommendation)
                else:
                    logger.debug("Backend health: %s", report.recommendation)
            except Exception as e:
                logger.error("Backend health poll failed: %s", e)
            await asyncio.sleep(self._interval)


def _recommend(primary: BackendHealth, fallback: BackendHealth | None) -> str:
    if primary.healthy:
        return "Primary backend healthy"
    if fallback is None:
        return "Primary backend unavailable and no fallback configured"
    if fallback.healthy:
        return "Primary backend unavailable, requests are served by the fallback"
    return "Primary and fallback backends unavailable"
