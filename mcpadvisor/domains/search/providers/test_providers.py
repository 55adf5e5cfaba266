"""
Tests for the search providers.
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import numpy as np
import pytest

from mcpadvisor.adapters.meilisearch.models import BackendHit, BackendSearchResponse
from mcpadvisor.adapters.nacos.client import NacosClient
from mcpadvisor.adapters.nacos.models import NacosMcpServer
from mcpadvisor.config.errors import MalformedDataError, ProviderError
from mcpadvisor.domains.catalog.cache import TTLCache
from mcpadvisor.domains.catalog.fetcher import CatalogFetcher
from mcpadvisor.domains.catalog.loader import OfflineDataLoader
from mcpadvisor.domains.catalog.models import CatalogEntry
from mcpadvisor.domains.vector.engine import InMemoryVectorEngine
from mcpadvisor.domains.vector.store import VectorStore

from ..contracts import SearchProvider
from ..models import SearchQuery
from ..orchestrator import SearchOrchestrator
from .compass import CompassSearchProvider
from .getmcp import GetMcpSearchProvider
from .meilisearch import MeilisearchSearchProvider, to_index_documents
from .nacos import KEYWORD_MATCH_SCORE, NacosSearchProvider, extract_keywords
from .offline import OfflineSearchProvider


class KeywordEmbedder:
    """One dimension per known keyword; unknown text embeds to zero."""

    keywords = ("file", "weather", "git")
    dimension = len(keywords)

    def embed(self, text: str) -> np.ndarray:
        lowered = text.lower()
        return np.array([1.0 if k in lowered else 0.0 for k in self.keywords])


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


CATALOG = {
    "fs": CatalogEntry(
        display_name="Filesystem",
        description="Read and write files",
        repository={"url": "https://github.com/mcp/fs"},
        categories=["storage"],
    ),
    "wx": CatalogEntry(name="weather", description="Forecasts", homepage="https://wx.test"),
}


def query(text: str, **kwargs) -> SearchQuery:
    return SearchQuery(task_description=text, **kwargs)


# --- Compass Tests ---


async def test_compass_maps_results() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {
                    "id": 3,
                    "title": "Slack",
                    "description": None,
                    "github_url": "https://github.com/x/slack",
                    "score": 0.92,
                },
                "junk",
            ],
        )

    provider = CompassSearchProvider("https://compass.test/", transport=httpx.MockTransport(handler))
    results = await provider.search(query("post to slack"))
    await provider.close()

    assert isinstance(provider, SearchProvider)
    assert seen[0].url.path == "/recommend"
    assert seen[0].url.params["description"] == "post to slack"
    assert len(results) == 1
    assert results[0].id == "3"
    assert results[0].score == pytest.approx(0.92)
    assert results[0].similarity == pytest.approx(0.92)
    assert results[0].provider_name == "compass"


async def test_compass_rejects_non_list() -> None:
    provider = CompassSearchProvider(
        "https://compass.test",
        transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"error": "x"})),
    )
    with pytest.raises(MalformedDataError):
        await provider.search(query("slack"))


async def test_compass_http_error() -> None:
    provider = CompassSearchProvider(
        "https://compass.test",
        transport=httpx.MockTransport(lambda r: httpx.Response(502)),
    )
    with pytest.raises(ProviderError):
        await provider.search(query("slack"))


# --- Meilisearch Provider Tests ---


@pytest.fixture
def backend() -> AsyncMock:
    backend = AsyncMock()
    backend.search.return_value = BackendSearchResponse(
        hits=[
            BackendHit(id=1, title="Postgres", github_url="https://github.com/x/pg", ranking_score=0.8),
            BackendHit(id="other", title="Other", categories="db, sql"),
        ]
    )
    return backend


class HungFetcher:
    """Catalog source that never answers in time."""

    def __init__(self) -> None:
        self.calls = 0

    async def fetch(self) -> dict[str, CatalogEntry]:
        self.calls += 1
        await asyncio.sleep(5)
        return CATALOG


async def test_meilisearch_maps_hits(backend: AsyncMock) -> None:
    provider = MeilisearchSearchProvider(backend, limit=7)

    results = await provider.search(query("postgres", keywords=["sql"]))

    backend.search.assert_awaited_once_with("postgres sql", limit=7)
    assert [r.id for r in results] == ["1", "other"]
    assert results[0].similarity == pytest.approx(0.8)
    assert results[0].source_url == "https://github.com/x/pg"
    assert results[1].similarity == pytest.approx(0.5)
    assert results[1].categories == ["db", "sql"]
    assert all(r.provider_name == "meilisearch" for r in results)


async def test_meilisearch_indexes_catalog_once(backend: AsyncMock) -> None:
    indexer = AsyncMock()
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.return_value = CATALOG
    provider = MeilisearchSearchProvider(backend, indexer=indexer, fetcher=fetcher)

    await provider.search(query("postgres"))
    await provider.search(query("postgres"))
    await provider.wait_indexed()
    await provider.search(query("postgres"))

    fetcher.fetch.assert_awaited_once()
    indexer.create_index.assert_awaited_once()
    indexer.configure_search_attributes.assert_awaited_once()
    indexer.add_documents.assert_awaited_once_with(to_index_documents(CATALOG))


async def test_meilisearch_indexing_failure_still_searches(backend: AsyncMock) -> None:
    indexer = AsyncMock()
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.side_effect = ProviderError("catalog down")
    provider = MeilisearchSearchProvider(backend, indexer=indexer, fetcher=fetcher)

    results = await provider.search(query("postgres"))
    await provider.wait_indexed()

    assert len(results) == 2
    indexer.add_documents.assert_not_awaited()


async def test_meilisearch_hung_indexing_does_not_block_queries(backend: AsyncMock) -> None:
    indexer = AsyncMock()
    fetcher = HungFetcher()
    provider = MeilisearchSearchProvider(backend, indexer=indexer, fetcher=fetcher)
    orchestrator = SearchOrchestrator([provider], provider_timeout=0.3)

    results = await orchestrator.search(query("postgres"))
    await orchestrator.search(query("postgres"))
    await provider.close()

    assert [r.title for r in results] == ["Postgres", "Other"]
    assert backend.search.await_count == 2
    assert fetcher.calls == 1
    indexer.add_documents.assert_not_awaited()


async def test_meilisearch_failed_indexing_is_throttled(backend: AsyncMock) -> None:
    indexer = AsyncMock()
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.side_effect = ProviderError("catalog down")
    provider = MeilisearchSearchProvider(backend, indexer=indexer, fetcher=fetcher)

    await provider.search(query("postgres"))
    await provider.wait_indexed()
    await provider.search(query("postgres"))
    await provider.wait_indexed()

    fetcher.fetch.assert_awaited_once()


async def test_meilisearch_retries_indexing_after_delay(backend: AsyncMock) -> None:
    indexer = AsyncMock()
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.side_effect = [ProviderError("catalog down"), CATALOG]
    provider = MeilisearchSearchProvider(
        backend, indexer=indexer, fetcher=fetcher, retry_after=0
    )

    await provider.search(query("postgres"))
    await provider.wait_indexed()
    await provider.search(query("postgres"))
    await provider.wait_indexed()

    assert fetcher.fetch.await_count == 2
    indexer.add_documents.assert_awaited_once()


async def test_meilisearch_start_without_indexer_is_noop(backend: AsyncMock) -> None:
    provider = MeilisearchSearchProvider(backend)

    provider.start()
    await provider.wait_indexed()

    assert provider.indexing is False


def test_to_index_documents() -> None:
    documents = to_index_documents(CATALOG)
    assert documents[0]["id"] == "fs"
    assert documents[0]["github_url"] == "https://github.com/mcp/fs"
    assert documents[1]["title"] == "weather"


# --- GetMCP Tests ---


class SlowEmbedder(KeywordEmbedder):
    """KeywordEmbedder that takes a while per text, like a real model."""

    def embed(self, text: str) -> np.ndarray:
        time.sleep(0.02)
        return super().embed(text)


WEATHER_CATALOG = {
    f"wx{i}": CatalogEntry(name=f"weather-{i}", description="weather forecasts")
    for i in range(20)
}


async def test_getmcp_embeds_directory_and_searches() -> None:
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.return_value = CATALOG
    provider = GetMcpSearchProvider(fetcher, KeywordEmbedder(), min_similarity=0.5)

    results = await provider.search(query("weather for tomorrow"))
    await provider.search(query("file search"))

    fetcher.fetch.assert_awaited_once()
    assert [r.id for r in results] == ["wx"]
    assert results[0].similarity == pytest.approx(1.0)
    assert results[0].provider_name == "getmcp"


async def test_getmcp_refreshes_after_cache_expiry() -> None:
    clock = FakeClock()
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.return_value = CATALOG
    engines: list[InMemoryVectorEngine] = []

    def engine_factory() -> InMemoryVectorEngine:
        engines.append(InMemoryVectorEngine())
        return engines[-1]

    provider = GetMcpSearchProvider(
        fetcher,
        KeywordEmbedder(),
        engine_factory=engine_factory,
        cache=TTLCache(ttl_seconds=60, clock=clock),
    )

    await provider.search(query("weather"))
    clock.now += 61
    stale = await provider.search(query("weather"))
    await provider.wait_ready()

    assert [r.id for r in stale] == ["wx", "fs"]
    assert fetcher.fetch.await_count == 2
    assert [engine.size for engine in engines] == [2, 2]


async def test_getmcp_fetch_error_propagates() -> None:
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.side_effect = ProviderError("directory down")
    provider = GetMcpSearchProvider(fetcher, KeywordEmbedder())

    with pytest.raises(ProviderError):
        await provider.search(query("weather"))


async def test_getmcp_build_survives_search_timeout() -> None:
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.return_value = WEATHER_CATALOG
    provider = GetMcpSearchProvider(fetcher, SlowEmbedder())
    orchestrator = SearchOrchestrator([provider], provider_timeout=0.1)

    assert await orchestrator.search(query("weather")) == []
    await provider.wait_ready()
    results = await orchestrator.search(query("weather"))

    assert len(results) == 5
    fetcher.fetch.assert_awaited_once()


async def test_getmcp_start_builds_in_background() -> None:
    fetcher = AsyncMock(spec=CatalogFetcher)
    fetcher.fetch.return_value = CATALOG
    provider = GetMcpSearchProvider(fetcher, KeywordEmbedder())

    provider.start()
    await provider.wait_ready()
    await provider.search(query("weather"))
    await provider.close()

    fetcher.fetch.assert_awaited_once()


# --- Offline Tests ---


@pytest.fixture
def offline_file(tmp_path: Path) -> Path:
    path = tmp_path / "mcp_server_list.json"
    path.write_text(
        json.dumps(
            [
                {
                    "title": "Filesystem",
                    "description": "Read and write files",
                    "github_url": "https://github.com/mcp/fs",
                },
                {
                    "title": "Weather",
                    "description": "weather forecasts",
                    "github_url": "https://github.com/mcp/wx",
                },
            ]
        ),
        encoding="utf-8",
    )
    return path


async def test_offline_hybrid_score(offline_file: Path) -> None:
    provider = OfflineSearchProvider(OfflineDataLoader(offline_file), KeywordEmbedder())

    results = await provider.search(query("weather"))

    assert [r.title for r in results] == ["Weather"]
    # text: title 0.5 + description 0.3, weighted 0.7; vector 1.0 weighted 0.3
    assert results[0].similarity == pytest.approx(0.8 * 0.7 + 1.0 * 0.3)
    assert results[0].provider_name == "offline"


async def test_offline_min_similarity(offline_file: Path) -> None:
    provider = OfflineSearchProvider(
        OfflineDataLoader(offline_file),
        KeywordEmbedder(),
        min_similarity=0.9,
    )
    assert await provider.search(query("weather")) == []


async def test_offline_missing_file(tmp_path: Path) -> None:
    provider = OfflineSearchProvider(
        OfflineDataLoader(tmp_path / "missing.json"), KeywordEmbedder()
    )
    assert await provider.search(query("weather")) == []


def test_offline_rejects_bad_weight(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        OfflineSearchProvider(
            OfflineDataLoader(tmp_path / "x.json"),
            KeywordEmbedder(),
            text_match_weight=1.5,
        )


async def test_offline_load_survives_search_timeout(tmp_path: Path) -> None:
    path = tmp_path / "mcp_server_list.json"
    path.write_text(
        json.dumps(
            [
                {
                    "title": f"Weather {i}",
                    "description": "weather forecasts",
                    "github_url": f"https://github.com/mcp/wx{i}",
                }
                for i in range(20)
            ]
        ),
        encoding="utf-8",
    )
    provider = OfflineSearchProvider(OfflineDataLoader(path), SlowEmbedder())
    orchestrator = SearchOrchestrator([provider], provider_timeout=0.1)

    assert await orchestrator.search(query("weather")) == []
    await provider.wait_ready()
    results = await orchestrator.search(query("weather"))

    assert len(results) == 10
    await provider.close()


# --- Nacos Tests ---


NACOS_SERVERS = [
    NacosMcpServer(name="weather-server", description="weather forecasts"),
    NacosMcpServer(
        name="git-helper",
        description="git operations",
        agent_config={"repository": {"url": "https://github.com/x/git"}},
    ),
]


@pytest.fixture
def nacos_client() -> AsyncMock:
    client = AsyncMock(spec=NacosClient)
    client.get_mcp_servers.return_value = NACOS_SERVERS
    client.search_mcp_by_keyword.return_value = [NACOS_SERVERS[1]]
    return client


def test_extract_keywords() -> None:
    text = "Hello, world! An API for the web-scraping; hello again"
    assert extract_keywords(text) == ["hello", "world", "api", "for", "the"]
    assert extract_keywords("a an of") == []


async def test_nacos_vector_search(nacos_client: AsyncMock) -> None:
    provider = NacosSearchProvider(nacos_client, KeywordEmbedder())

    results = await provider.search(query("weather"))

    assert [r.id for r in results] == ["weather-server"]
    assert results[0].source_url == "nacos://weather-server"
    assert results[0].similarity == pytest.approx(1.0)
    assert results[0].score is None
    nacos_client.search_mcp_by_keyword.assert_not_awaited()


async def test_nacos_keyword_fallback(nacos_client: AsyncMock) -> None:
    provider = NacosSearchProvider(nacos_client, KeywordEmbedder())

    results = await provider.search(query("find something cool"))

    nacos_client.search_mcp_by_keyword.assert_awaited_once_with("find")
    assert [r.id for r in results] == ["git-helper"]
    assert results[0].score == KEYWORD_MATCH_SCORE
    assert results[0].source_url == "https://github.com/x/git"


async def test_nacos_keyword_fallback_prefers_query_keywords(nacos_client: AsyncMock) -> None:
    provider = NacosSearchProvider(nacos_client, KeywordEmbedder())

    await provider.search(query("find something", keywords=["deploy"]))

    nacos_client.search_mcp_by_keyword.assert_awaited_once_with("deploy")


async def test_nacos_vector_error_uses_keywords(nacos_client: AsyncMock) -> None:
    provider = NacosSearchProvider(nacos_client, KeywordEmbedder())

    with patch.object(VectorStore, "search", AsyncMock(side_effect=RuntimeError("boom"))):
        results = await provider.search(query("weather"))

    assert [r.id for r in results] == ["git-helper"]


async def test_nacos_start_and_close(nacos_client: AsyncMock) -> None:
    provider = NacosSearchProvider(nacos_client, KeywordEmbedder(), sync_interval=60)

    await provider.start()
    await provider.start()
    assert provider.store.size == 2
    nacos_client.get_mcp_servers.assert_awaited_once()

    await provider.close()
    nacos_client.close.assert_awaited_once()


async def test_nacos_search_during_sync_sees_full_store(nacos_client: AsyncMock) -> None:
    nacos_client.get_mcp_servers.return_value = [
        NacosMcpServer(name=f"weather-{i}", description="weather forecasts") for i in range(10)
    ]
    provider = NacosSearchProvider(nacos_client, SlowEmbedder())
    await provider.sync()
    previous = provider.store

    resync = asyncio.create_task(provider.sync())
    await asyncio.sleep(0.05)
    results = await provider.search(query("weather"))
    await resync

    assert len(results) == 10
    nacos_client.search_mcp_by_keyword.assert_not_awaited()
    assert provider.store is not previous
    assert provider.store.size == 10
