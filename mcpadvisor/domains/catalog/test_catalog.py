"""
Tests for the TTL cache, catalog fetching and loading.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from mcpadvisor.config.errors import MalformedDataError, ProviderError

from .cache import TTLCache
from .fetcher import CatalogFetcher, parse_catalog
from .loader import OfflineDataLoader, embedding_text, load_sources, normalize_record
from .models import CatalogEntry
from .refresh import BackgroundIndex

CATALOG = {
    "filesystem": {
        "display_name": "Filesystem",
        "description": "Read and write local files",
        "repository": {"type": "git", "url": "https://github.com/mcp/filesystem"},
        "categories": ["storage"],
        "tags": ["files"],
        "installations": {"npm": {"command": "npx"}},
    },
    "weather": {
        "name": "weather",
        "description": "Forecasts",
        "homepage": "https://weather.example",
    },
}


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


# --- TTLCache Tests ---


def test_cache_returns_fresh_value() -> None:
    cache: TTLCache[str] = TTLCache(ttl_seconds=0.1)
    cache.set("x")
    assert cache.get() == "x"
    assert cache.is_valid() is True


async def test_cache_expires_after_ttl() -> None:
    cache: TTLCache[str] = TTLCache(ttl_seconds=0.1)
    cache.set("x")
    assert cache.get() == "x"

    await asyncio.sleep(0.15)

    assert cache.get() is None
    assert cache.is_valid() is False


def test_cache_valid_exactly_at_ttl() -> None:
    clock = FakeClock()
    cache: TTLCache[int] = TTLCache(ttl_seconds=10, clock=clock)
    cache.set(1)

    clock.now += 10
    assert cache.get() == 1

    clock.now += 0.001
    assert cache.get() is None


def test_cache_get_clears_expired_slot() -> None:
    clock = FakeClock()
    cache: TTLCache[int] = TTLCache(ttl_seconds=1, clock=clock)
    cache.set(1)
    clock.now += 5

    assert cache.get() is None
    clock.now -= 5
    assert cache.get() is None


def test_cache_set_overwrites_and_clear() -> None:
    cache: TTLCache[int] = TTLCache()
    assert cache.ttl_seconds == 3600
    assert cache.get() is None
    cache.set(1)
    cache.set(2)
    assert cache.get() == 2
    cache.clear()
    assert cache.get() is None


# --- Catalog Tests ---


def test_catalog_entry_fields() -> None:
    entry = CatalogEntry.model_validate(CATALOG["filesystem"])

    assert entry.title == "Filesystem"
    assert entry.source_url == "https://github.com/mcp/filesystem"
    assert entry.searchable_text() == "Filesystem. Read and write local files. storage. files"

    candidate = entry.to_candidate("filesystem", "getmcp")
    assert candidate.id == "filesystem"
    assert candidate.provider_name == "getmcp"
    assert candidate.installations == {"npm": {"command": "npx"}}


def test_catalog_entry_homepage_fallback() -> None:
    entry = CatalogEntry.model_validate(CATALOG["weather"])
    assert entry.title == "weather"
    assert entry.source_url == "https://weather.example"


def test_parse_catalog_skips_malformed_entries() -> None:
    entries = parse_catalog({**CATALOG, "broken": {"categories": 42}})
    assert set(entries) == {"filesystem", "weather"}


def test_parse_catalog_rejects_non_object() -> None:
    with pytest.raises(MalformedDataError):
        parse_catalog(["not", "a", "map"])


async def test_fetcher_parses_catalog() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=CATALOG))
    fetcher = CatalogFetcher("https://catalog.test/servers.json", transport=transport)

    entries = await fetcher.fetch()
    await fetcher.close()

    assert set(entries) == {"filesystem", "weather"}


async def test_fetcher_http_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    fetcher = CatalogFetcher("https://catalog.test/servers.json", transport=transport)

    with pytest.raises(ProviderError):
        await fetcher.fetch()


async def test_fetcher_invalid_json() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    fetcher = CatalogFetcher("https://catalog.test/servers.json", transport=transport)

    with pytest.raises(MalformedDataError):
        await fetcher.fetch()


async def test_fetcher_transport_error_after_retries() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("refused", request=request)

    fetcher = CatalogFetcher(
        "https://catalog.test/servers.json",
        max_attempts=1,
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ProviderError):
        await fetcher.fetch()
    assert calls == 1


# --- Loader Tests ---


def test_normalize_record_aliases() -> None:
    candidate = normalize_record(CATALOG["filesystem"])

    assert candidate is not None
    assert candidate.title == "Filesystem"
    assert candidate.source_url == "https://github.com/mcp/filesystem"
    assert candidate.id == "https://github.com/mcp/filesystem"
    assert candidate.categories == ["storage"]


def test_normalize_record_fallback_id() -> None:
    candidate = normalize_record({"title": "Local Tool", "description": "x"})
    assert candidate is not None
    assert candidate.id == "fallback-Local Tool"


def test_normalize_record_without_title() -> None:
    assert normalize_record({"description": "nameless"}) is None


def test_embedding_text() -> None:
    candidate = normalize_record(CATALOG["filesystem"])
    assert embedding_text(candidate) == "Filesystem. Read and write local files. storage. files"


async def test_offline_loader_reads_list(tmp_path: Path) -> None:
    path = tmp_path / "servers.json"
    path.write_text(json.dumps(list(CATALOG.values())), encoding="utf-8")

    entries = await OfflineDataLoader(path).load()

    assert [e.title for e in entries] == ["Filesystem", "weather"]


async def test_offline_loader_missing_file(tmp_path: Path) -> None:
    assert await OfflineDataLoader(tmp_path / "missing.json").load() == []


async def test_offline_loader_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    assert await OfflineDataLoader(path).load() == []


async def test_load_sources_isolates_failures(tmp_path: Path) -> None:
    good_file = tmp_path / "good.json"
    good_file.write_text(
        json.dumps([{"title": "Local", "github_url": "https://github.com/x/local"}]),
        encoding="utf-8",
    )
    bad_file = tmp_path / "bad.json"
    bad_file.write_text("[[[", encoding="utf-8")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/good.json":
            return httpx.Response(200, json=CATALOG)
        return httpx.Response(503)

    entries = await load_sources(
        remote_urls=["https://src.test/good.json", "https://src.test/down.json"],
        local_files=[good_file, bad_file, tmp_path / "missing.json"],
        transport=httpx.MockTransport(handler),
    )

    assert {e.title for e in entries} == {"Filesystem", "weather", "Local"}


async def test_load_sources_deduplicates(tmp_path: Path) -> None:
    path = tmp_path / "dup.json"
    path.write_text(json.dumps([CATALOG["filesystem"]]), encoding="utf-8")

    entries = await load_sources(
        remote_urls=["https://src.test/all.json"],
        local_files=[path],
        transport=httpx.MockTransport(lambda r: httpx.Response(200, json=CATALOG)),
    )

    assert len(entries) == 2


# --- BackgroundIndex Tests ---


class GatedBuild:
    """Build function that finishes only when released."""

    def __init__(self, *results: object) -> None:
        self.results = list(results)
        self.calls = 0
        self.release = asyncio.Event()

    async def __call__(self) -> object:
        self.calls += 1
        await self.release.wait()
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


async def test_first_build_survives_caller_timeout() -> None:
    build = GatedBuild("v1")
    index = BackgroundIndex(build, name="test")

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(index.get(), timeout=0.01)
    assert index.building is True

    build.release.set()
    await index.wait()

    assert index.current == "v1"
    assert await index.get() == "v1"
    assert build.calls == 1


async def test_stale_index_served_while_rebuilding() -> None:
    build = GatedBuild("v1", "v2")
    build.release.set()
    index = BackgroundIndex(build, name="test")
    assert await index.get() == "v1"

    build.release.clear()
    assert await index.get(stale=True) == "v1"
    assert index.building is True

    build.release.set()
    await index.wait()
    assert index.current == "v2"


async def test_failed_build_is_throttled() -> None:
    clock = FakeClock()
    build = GatedBuild(ProviderError("down"), "v1")
    build.release.set()
    index = BackgroundIndex(build, name="test", retry_after=30, clock=clock)

    with pytest.raises(ProviderError):
        await index.get()
    assert index.refresh() is None
    assert await index.get() is None
    assert build.calls == 1

    clock.now += 31
    assert await index.get() == "v1"
    assert build.calls == 2


async def test_close_cancels_running_build() -> None:
    build = GatedBuild("v1")
    index = BackgroundIndex(build, name="test")

    task = index.refresh()
    await asyncio.sleep(0)
    await index.close()

    assert task is not None and task.cancelled()
    assert index.current is None
    assert index.building is False
