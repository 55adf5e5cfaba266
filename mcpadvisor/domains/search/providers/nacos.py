"""
Nacos Provider - MCP servers from a Nacos registry.

Features:
- Registry entries synced into a fresh VectorStore on an interval
- Vector search with keyword lookup as fallback
- Source URL from agent config, repository, or ``nacos://<name>``
"""

from __future__ import annotations

import asyncio
import logging
import string
from typing import TYPE_CHECKING

from mcpadvisor.domains.vector.embeddings import EmbeddingProvider
from mcpadvisor.domains.vector.store import VectorStore

from ..models import CandidateResult, SearchQuery

if TYPE_CHECKING:
    from mcpadvisor.adapters.nacos.client import NacosClient
    from mcpadvisor.adapters.nacos.models import NacosMcpServer

logger = logging.getLogger(__name__)

__all__ = ["NacosSearchProvider", "extract_keywords"]

KEYWORD_MATCH_SCORE = 0.8
_PUNCTUATION = str.maketrans("", "", string.punctuation)


def extract_keywords(text: str, max_keywords: int = 5) -> list[str]:
    """Lower-cased words longer than two characters, punctuation stripped, deduplicated."""
    words = (w.translate(_PUNCTUATION).lower() for w in text.split())
    unique = dict.fromkeys(w for w in words if len(w) > 2)
    return list(unique)[:max_keywords]


class NacosSearchProvider:
    """
    Searches MCP servers registered in Nacos.

    Call ``start()`` to begin background syncing and ``close()`` to stop it;
    ``search`` performs an initial sync on first use. Each sync embeds into a
    new store, which replaces the old one together with the server map, so
    searches never see a half-filled store.

    Example:
        >>> provider = NacosSearchProvider(NacosClient(addr, user, pw), embedder)
        >>> await provider.start()
        >>> results = await provider.search(SearchQuery(task_description="weather"))
    """

    name = "nacos"

    def __init__(
        self,
        client: NacosClient,
        embedder: EmbeddingProvider,
        sync_interval: float = 5.0,
        min_similarity: float = 0.3,
        limit: int = 10,
    ) -> None:
        self._client = client
        self._embedder = embedder
        self._sync_interval = sync_interval
        self._min_similarity = min_similarity
        self._limit = limit
        self._store = VectorStore(embedder)
        self._servers: dict[str, NacosMcpServer] = {}
        self._synced = False
        self._sync_lock = asyncio.Lock()
        self._sync_task: asyncio.Task[None] | None = None

    @property
    def store(self) -> VectorStore:
        """Store backing the current snapshot."""
        return self._store

    async def sync(self) -> int:
        """Rebuild the vector store from the registry; returns the count."""
        async with self._sync_lock:
            servers = await self._client.get_mcp_servers()
            store = VectorStore(self._embedder)
            for server in servers:
                await store.add(
                    f"{server.name}. {server.description}",
                    {"id": server.name, "name": server.name},
                )
            self._store, self._servers = store, {server.name: server for server in servers}
            self._synced = True
            logger.debug("Synced %d Nacos MCP servers", len(servers))
            return len(servers)

    async def start(self) -> None:
        """Sync once and keep syncing in the background."""
        if self._sync_task is not None:
            return
        await self.sync()
        self._sync_task = asyncio.create_task(self._sync_loop())
        logger.info("Nacos sync started (interval: %.1fs)", self._sync_interval)

    async def _sync_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sync_interval)
            try:
                await self.sync()
            except Exception as e:
                logger.warning("Nacos sync failed: %s", e)

    async def close(self) -> None:
        if self._sync_task is not None:
            self._sync_task.cancel()
            try:
                await self._sync_task
            except asyncio.CancelledError:
                pass
            self._sync_task = None
        await self._client.close()

    async def search(self, query: SearchQuery) -> list[CandidateResult]:
        if not self._synced:
            await self.sync()

        try:
            results = await self._vector_search(query)
        except Exception as e:
            logger.warning("Nacos vector search failed, using keyword search: %s", e)
            results = []

        if results:
            return results
        return await self._keyword_search(query)

    async def _vector_search(self, query: SearchQuery) -> list[CandidateResult]:
        store, servers = self._store, self._servers
        matches = await store.search(query.to_text(), k=self._limit)
        results = []
        for name, similarity in zip(matches.ids, matches.similarities):
            server = servers.get(name)
            if server is None or similarity < self._min_similarity:
                continue
            results.append(self._to_candidate(server, similarity))
        return results

    async def _keyword_search(self, query: SearchQuery) -> list[CandidateResult]:
        keywords = list(query.keywords) or extract_keywords(query.task_description)
        if not keywords:
            return []
        servers = await self._client.search_mcp_by_keyword(keywords[0])
        return [
            self._to_candidate(server, KEYWORD_MATCH_SCORE, score=KEYWORD_MATCH_SCORE)
            for server in servers
        ]

    def _to_candidate(
        self,
        server: NacosMcpServer,
        similarity: float,
        score: float | None = None,
    ) -> CandidateResult:
        return CandidateResult(
            id=server.name,
            title=server.name,
            description=server.description,
            source_url=server.source_url,
            similarity=similarity,
            score=score,
            categories=server.categories,
            tags=server.tags,
            installations=server.agent_config.get("mcpServers", {}),
            provider_name=self.name,
        )
