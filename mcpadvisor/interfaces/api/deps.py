"""
API Dependencies - Dependency injection for FastAPI routes.

Services are built once by the lifespan handler and kept on ``app.state``.
"""

from __future__ import annotations

from fastapi import Request

from mcpadvisor.adapters.meilisearch import BackendMonitor, ResilientClient
from mcpadvisor.config.errors import ConfigurationError
from mcpadvisor.domains.search import SearchOrchestrator
from mcpadvisor.interfaces.services import SearchServices


def get_services(request: Request) -> SearchServices:
    return request.app.state.services


def get_orchestrator(request: Request) -> SearchOrchestrator:
    return get_services(request).orchestrator


def get_backend_client(request: Request) -> ResilientClient:
    """Resilient full-text backend client; errors when it is not configured."""
    client = get_services(request).backend_client
    if client is None:
        raise ConfigurationError("Full-text search backend is not configured")
    return client


def get_monitor(request: Request) -> BackendMonitor | None:
    return get_services(request).monitor
