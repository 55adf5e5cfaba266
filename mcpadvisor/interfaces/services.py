"""
Service Wiring - Build the search stack from settings.

Used by both the CLI and the API so they share one composition root.
Providers with incomplete configuration are skipped with a warning;
having no provider at all is fatal.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from mcpadvisor.adapters.meilisearch import (
    BackendMonitor,
    LocalMeilisearchBackend,
    ResilientClient,
    create_backend,
)
from mcpadvisor.adapters.nacos import NacosClient
from mcpadvisor.adapters.oceanbase import OceanBaseClient, OceanBaseVectorEngine
from mcpadvisor.config import (
    BackendKind,
    ConfigurationError,
    Settings,
    StorageError,
    resolve_backend_configs,
)
from mcpadvisor.domains.catalog import CatalogFetcher, OfflineDataLoader, TTLCache
from mcpadvisor.domains.search import (
    Reranker,
    RerankOptions,
    SearchOrchestrator,
    SearchProvider,
)
from mcpadvisor.domains.search.providers import (
    CompassSearchProvider,
    GetMcpSearchProvider,
    MeilisearchSearchProvider,
    NacosSearchProvider,
    OfflineSearchProvider,
)
from mcpadvisor.domains.vector import (
    EmbeddingProvider,
    InMemoryVectorEngine,
    WritableVectorSearchEngine,
    create_embedding_provider,
)

logger = logging.getLogger(__name__)

__all__ = ["SearchServices", "build_services", "create_vector_engine"]


@dataclass
class SearchServices:
    """Everything a search entry point needs, plus lifecycle hooks."""

    orchestrator: SearchOrchestrator
    backend_client: ResilientClient | None = None
    monitor: BackendMonitor | None = None
    startups: list[Callable[[], Awaitable[None]]] = field(default_factory=list)
    shutdowns: list[Callable[[], Awaitable[None]]] = field(default_factory=list)

    async def start(self, monitor: bool = False) -> None:
        """Initialize providers that need it; optionally start health polling."""
        for startup in self.startups:
            await startup()
        if monitor and self.monitor is not None:
            self.monitor.start()

    async def close(self) -> None:
        if self.monitor is not None:
            await self.monitor.stop()
        for shutdown in reversed(self.shutdowns):
            try:
                await shutdown()
            except Exception as e:
                logger.warning("Error during shutdown: %s", e)


def create_vector_engine(settings: Settings) -> WritableVectorSearchEngine:
    """Vector engine selected by ``vector_engine_type``."""
    if settings.vector_engine_type == "oceanbase":
        client = None
        if settings.oceanbase_url:
            client = OceanBaseClient(
                settings.oceanbase_url,
                table_name=settings.oceanbase_table_name,
                dimension=settings.embedding_dimension,
                max_connections=settings.oceanbase_max_connections,
            )
        return OceanBaseVectorEngine(client)
    return InMemoryVectorEngine()


def _startup_for(engine: WritableVectorSearchEngine) -> Callable[[], Awaitable[None]] | None:
    if not isinstance(engine, OceanBaseVectorEngine):
        return None

    async def initialize() -> None:
        try:
            await engine.initialize()
        except StorageError as e:
            logger.error("Vector database unavailable, vector search disabled: %s", e)

    return initialize


def _add_index_hooks(
    provider: GetMcpSearchProvider | OfflineSearchProvider | MeilisearchSearchProvider,
    services: SearchServices,
) -> None:
    """Start the provider's index build at startup and cancel it at shutdown."""

    async def start_index() -> None:
        provider.start()

    services.startups.append(start_index)
    services.shutdowns.append(provider.close)


def build_services(settings: Settings) -> SearchServices:
    """
    Construct providers, orchestrator and backend monitor.

    Raises:
        ConfigurationError: If no provider could be constructed
    """
    embedder = create_embedding_provider(settings)
    providers: list[SearchProvider] = []
    services = SearchServices(orchestrator=SearchOrchestrator([]))

    for name in settings.enabled_providers:
        builder = _BUILDERS.get(name)
        if builder is None:
            logger.warning("Unknown search provider '%s', skipping", name)
            continue
        try:
            provider = builder(settings, embedder, services)
        except ConfigurationError as e:
            logger.warning("Skipping search provider '%s': %s", name, e.message)
            continue
        providers.append(provider)

    if not providers:
        raise ConfigurationError(
            "No search providers could be constructed",
            {"enabled_providers": settings.enabled_providers},
        )

    services.orchestrator = SearchOrchestrator(
        providers,
        ranker=Reranker(settings.provider_priorities),
        default_options=RerankOptions(
            limit=settings.search_default_limit,
            min_similarity=settings.search_min_similarity,
        ),
        provider_timeout=settings.provider_timeout_seconds,
    )
    logger.info("Search providers: %s", ", ".join(p.name for p in providers))
    return services


def _build_meilisearch(
    settings: Settings,
    embedder: EmbeddingProvider,
    services: SearchServices,
) -> SearchProvider:
    active, fallback = resolve_backend_configs(settings)
    if active.kind == BackendKind.CLOUD and not active.api_key:
        raise ConfigurationError("MEILISEARCH_CLOUD_API_KEY is not set")
    if fallback is not None and not fallback.api_key:
        logger.warning("Cloud fallback has no API key; failover requests may be rejected")

    primary = create_backend(active)
    secondary = create_backend(fallback) if fallback is not None else None
    client = ResilientClient(primary, secondary)

    indexer = primary if isinstance(primary, LocalMeilisearchBackend) else None
    fetcher = None
    if indexer is not None:
        fetcher = CatalogFetcher(settings.getmcp_api_url, timeout=settings.http_timeout_seconds)
        services.shutdowns.append(fetcher.close)

    services.backend_client = client
    services.monitor = BackendMonitor(
        primary,
        secondary,
        interval=settings.meilisearch_monitor_interval_seconds,
    )
    services.shutdowns.append(client.close)
    provider = MeilisearchSearchProvider(
        client,
        indexer=indexer,
        fetcher=fetcher,
        cache=TTLCache(settings.catalog_cache_ttl_seconds),
    )
    if provider.indexing:
        _add_index_hooks(provider, services)
    return provider


def _build_compass(
    settings: Settings,
    embedder: EmbeddingProvider,
    services: SearchServices,
) -> SearchProvider:
    provider = CompassSearchProvider(
        settings.compass_api_base, timeout=settings.http_timeout_seconds
    )
    services.shutdowns.append(provider.close)
    return provider


def _build_getmcp(
    settings: Settings,
    embedder: EmbeddingProvider,
    services: SearchServices,
) -> SearchProvider:
    fetcher = CatalogFetcher(settings.getmcp_api_url, timeout=settings.http_timeout_seconds)
    services.shutdowns.append(fetcher.close)

    engine = create_vector_engine(settings)
    startup = _startup_for(engine)
    if startup is not None:
        services.startups.append(startup)
        services.shutdowns.append(engine.close)

    engine_factory: Callable[[], WritableVectorSearchEngine] = InMemoryVectorEngine
    if not isinstance(engine, InMemoryVectorEngine):
        # A persisted table is shared, so rebuilds clear and refill it
        engine_factory = lambda: engine

    provider = GetMcpSearchProvider(
        fetcher,
        embedder,
        engine_factory=engine_factory,
        cache=TTLCache(settings.catalog_cache_ttl_seconds),
    )
    _add_index_hooks(provider, services)
    return provider


def _build_offline(
    settings: Settings,
    embedder: EmbeddingProvider,
    services: SearchServices,
) -> SearchProvider:
    provider = OfflineSearchProvider(
        OfflineDataLoader(settings.offline_data_path),
        embedder,
        text_match_weight=settings.offline_text_match_weight,
        min_similarity=settings.offline_min_similarity,
    )
    _add_index_hooks(provider, services)
    return provider


def _build_nacos(
    settings: Settings,
    embedder: EmbeddingProvider,
    services: SearchServices,
) -> SearchProvider:
    if not (settings.nacos_server_addr and settings.nacos_username and settings.nacos_password):
        raise ConfigurationError("NACOS_SERVER_ADDR, NACOS_USERNAME and NACOS_PASSWORD are required")

    provider = NacosSearchProvider(
        NacosClient(
            settings.nacos_server_addr,
            settings.nacos_username,
            settings.nacos_password,
            timeout=settings.http_timeout_seconds,
        ),
        embedder,
        sync_interval=settings.nacos_sync_interval_seconds,
        min_similarity=settings.nacos_min_similarity,
        limit=settings.nacos_limit,
    )

    async def start_sync() -> None:
        try:
            await provider.start()
        except Exception as e:
            logger.warning("Initial Nacos sync failed, will retry on search: %s", e)

    services.startups.append(start_sync)
    services.shutdowns.append(provider.close)
    return provider


_BUILDERS: dict[
    str, Callable[[Settings, EmbeddingProvider, SearchServices], SearchProvider]
] = {
    "meilisearch": _build_meilisearch,
    "compass": _build_compass,
    "getmcp": _build_getmcp,
    "offline": _build_offline,
    "nacos": _build_nacos,
}
