"""
Health Routes - System health and status endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from mcpadvisor import __version__
from mcpadvisor.adapters.meilisearch import BackendMonitor, SystemHealthReport

from ..deps import get_monitor

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "mcpadvisor"}


@router.get("/health/backends", response_model=SystemHealthReport | None)
async def backend_health(
    monitor: BackendMonitor | None = Depends(get_monitor),
) -> SystemHealthReport | None:
    """Latest health report of the full-text backends (checked now if none yet)."""
    if monitor is None:
        return None
    return monitor.last_report or await monitor.report()


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "MCP Advisor API",
        "version": __version__,
        "description": "Recommend MCP servers across search providers",
        "docs": "/docs",
    }
