"""
Tests for the primary/fallback search client.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from mcpadvisor.config.backends import BackendConfig, BackendKind
from mcpadvisor.config.errors import BackendUnavailableError

from .client import LocalMeilisearchBackend, MeilisearchBackend
from .models import BackendHit, BackendSearchResponse
from .resilient import ResilientClient


def make_response(*titles: str) -> BackendSearchResponse:
    return BackendSearchResponse(hits=[BackendHit(id=t, title=t) for t in titles])


class FakeBackend:
    """Search backend without a health check."""

    def __init__(
        self,
        response: BackendSearchResponse | None = None,
        error: Exception | None = None,
    ) -> None:
        self.response = response or make_response()
        self.error = error
        self.calls: list[tuple[str, int]] = []
        self.closed = False

    async def search(self, query: str, limit: int = 10) -> BackendSearchResponse:
        self.calls.append((query, limit))
        if self.error:
            raise self.error
        return self.response

    async def close(self) -> None:
        self.closed = True


class CheckedFakeBackend(FakeBackend):
    """Search backend with a health check."""

    def __init__(
        self,
        healthy: bool = True,
        health_error: Exception | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.healthy = healthy
        self.health_error = health_error
        self.health_calls = 0

    async def health_check(self) -> bool:
        self.health_calls += 1
        if self.health_error:
            raise self.health_error
        return self.healthy


# --- Search Tests ---


async def test_search_uses_primary() -> None:
    primary = FakeBackend(response=make_response("local"))
    fallback = FakeBackend(response=make_response("cloud"))
    client = ResilientClient(primary, fallback)

    response = await client.search("files", limit=3)

    assert [h.title for h in response.hits] == ["local"]
    assert primary.calls == [("files", 3)]
    assert fallback.calls == []


async def test_search_falls_back_with_same_arguments() -> None:
    primary = AsyncMock()
    primary.search.side_effect = Exception("Primary failed")
    fallback = AsyncMock()
    fallback.search.return_value = make_response("Fallback Result")
    client = ResilientClient(primary, fallback)

    response = await client.search("test query", limit=5)

    assert [h.title for h in response.hits] == ["Fallback Result"]
    primary.search.assert_awaited_once_with("test query", limit=5)
    fallback.search.assert_awaited_once_with("test query", limit=5)


async def test_search_fallback_error_propagates() -> None:
    primary = FakeBackend(error=BackendUnavailableError("local down"))
    fallback = FakeBackend(error=RuntimeError("cloud down"))
    client = ResilientClient(primary, fallback)

    with pytest.raises(RuntimeError, match="cloud down"):
        await client.search("files")


async def test_search_without_fallback_reraises_primary_error() -> None:
    client = ResilientClient(FakeBackend(error=BackendUnavailableError("local down")))

    with pytest.raises(BackendUnavailableError, match="local down"):
        await client.search("files")


async def test_close_closes_both() -> None:
    primary, fallback = FakeBackend(), FakeBackend()
    await ResilientClient(primary, fallback).close()
    assert primary.closed and fallback.closed


# --- Health Tests ---


async def test_health_without_check_is_healthy() -> None:
    assert await ResilientClient(FakeBackend()).health_check() is True


async def test_health_healthy_primary_skips_fallback() -> None:
    fallback = CheckedFakeBackend(healthy=False)
    client = ResilientClient(CheckedFakeBackend(healthy=True), fallback)

    assert await client.health_check() is True
    assert fallback.health_calls == 0


async def test_health_unhealthy_primary_consults_fallback() -> None:
    client = ResilientClient(
        CheckedFakeBackend(healthy=False),
        CheckedFakeBackend(healthy=True),
    )
    assert await client.health_check() is True


async def test_health_check_error_consults_fallback() -> None:
    client = ResilientClient(
        CheckedFakeBackend(health_error=RuntimeError("boom")),
        CheckedFakeBackend(healthy=False),
    )
    assert await client.health_check() is False


async def test_health_unhealthy_primary_without_fallback() -> None:
    client = ResilientClient(CheckedFakeBackend(healthy=False))
    assert await client.health_check() is False


async def test_health_fallback_without_check_is_healthy() -> None:
    client = ResilientClient(CheckedFakeBackend(healthy=False), FakeBackend())
    assert await client.health_check() is True


async def test_health_fallback_check_error_is_unhealthy() -> None:
    client = ResilientClient(
        CheckedFakeBackend(healthy=False),
        CheckedFakeBackend(health_error=RuntimeError("boom")),
    )
    assert await client.health_check() is False


# --- Construction Tests ---


def test_from_configs_local_pairs_fallback() -> None:
    local = BackendConfig(kind=BackendKind.LOCAL, host="http://localhost:7700", index_name="mcp")
    cloud = BackendConfig(kind=BackendKind.CLOUD, host="https://cloud.test", index_name="mcp")

    client = ResilientClient.from_configs(local, cloud)

    assert isinstance(client.primary, LocalMeilisearchBackend)
    assert isinstance(client.fallback, MeilisearchBackend)
    assert client.fallback.kind == BackendKind.CLOUD


def test_from_configs_cloud_runs_alone() -> None:
    cloud = BackendConfig(kind=BackendKind.CLOUD, host="https://cloud.test", index_name="mcp")
    other = BackendConfig(kind=BackendKind.CLOUD, host="https://other.test", index_name="mcp")

    client = ResilientClient.from_configs(cloud, other)

    assert client.fallback is None
    assert not isinstance(client.primary, LocalMeilisearchBackend)
