"""
Nacos Client - HTTP client for the Nacos MCP registry admin API.

Features:
- Async HTTP client (httpx) with username/password headers
- MCP server listing and detail lookup
- Keyword lookup over registered servers
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mcpadvisor.config.errors import ConfigurationError, ProviderError

from .models import NacosMcpServer, endpoint_url

logger = logging.getLogger(__name__)

__all__ = ["NacosClient"]

MCP_LIST_PATH = "/nacos/v3/admin/ai/mcp/list"
MCP_DETAIL_PATH = "/nacos/v3/admin/ai/mcp"
SERVICE_PATH = "/nacos/v1/ns/service"


class NacosClient:
    """
    Nacos registry client.

    Example:
        >>> client = NacosClient("localhost:8848", "nacos", "secret")
        >>> servers = await client.get_mcp_servers()
    """

    def __init__(
        self,
        server_addr: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Nacos client.

        Args:
            server_addr: Nacos address (host:port, scheme optional)
            username: Registry user
            password: Registry password
            timeout: Request timeout in seconds
            page_size: Page size for server listing
            transport: Optional httpx transport (tests)

        Raises:
            ConfigurationError: If an argument is empty
        """
        if not server_addr or not username or not password:
            raise ConfigurationError(
                "Nacos requires server address, username and password",
                {"server_addr": server_addr or None},
            )
        if "://" not in server_addr:
            server_addr = f"http://{server_addr}"
        self.base_url = server_addr.rstrip("/")
        self.username = username
        self._password = password
        self.timeout = timeout
        self.page_size = page_size
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "charset": "utf-8",
                    "userName": self.username,
                    "password": self._password,
                },
                transport=self._transport,
            )
        return self._client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"Nacos request failed: {e}", {"path": path}) from e

    async def is_ready(self) -> bool:
        try:
            await self._get(MCP_LIST_PATH, {"pageNo": 1, "pageSize": 1})
            return True
        except ProviderError as e:
            logger.warning("Nacos health check failed: %s", e)
            return False

    async def get_mcp_server_by_name(self, name: str) -> NacosMcpServer:
        """
        Fetch one server's registry detail.

        Returns a bare entry (empty description) when the lookup fails.
        """
        try:
            payload = await self._get(MCP_DETAIL_PATH, {"mcpName": name})
        except ProviderError as e:
            logger.warning("Failed to get MCP server %s: %s", name, e)
            return NacosMcpServer(name=name)

        data = (payload or {}).get("data") or {}
        server_name = data.get("name") or name
        description = data.get("description") or ""
        agent_config: dict[str, Any] = {}

        url = endpoint_url(data)
        if url:
            agent_config["mcpServers"] = {
                server_name: {"name": server_name, "description": description, "url": url}
            }

        return NacosMcpServer(
            name=server_name,
            description=description,
            protocol=data.get("protocol"),
            agent_config=agent_config,
            detail=data,
        )

    async def get_mcp_servers(self) -> list[NacosMcpServer]:
        """
        List enabled servers that have a description.

        Raises:
            ProviderError: Listing request failed
        """
        payload = await self._get(MCP_LIST_PATH, {"pageNo": 1, "pageSize": self.page_size})
        items = ((payload or {}).get("data") or {}).get("pageItems") or []

        servers: list[NacosMcpServer] = []
        for item in items:
            if not item.get("enabled") or not item.get("name"):
                continue
            server = await self.get_mcp_server_by_name(item["name"])
            if server.description:
                servers.append(server)

        logger.info("Fetched %d MCP servers from Nacos", len(servers))
        return servers

    async def search_mcp_by_keyword(self, keyword: str) -> list[NacosMcpServer]:
        """Servers whose name or description contains the keyword."""
        term = keyword.lower()
        return [
            server
            for server in await self.get_mcp_servers()
            if term in server.name.lower() or term in server.description.lower()
        ]

    async def get_service_detail(
        self,
        service_name: str,
        group_name: str = "DEFAULT_GROUP",
    ) -> dict[str, Any]:
        """Plain Nacos service registration details."""
        data = await self._get(
            SERVICE_PATH,
            {
                "serviceName": service_name,
                "groupName": group_name,
                "namespaceId": "public",
            },
        )
        if not data:
            raise ProviderError(
                f"Service {service_name} not found in group {group_name}",
                {"service": service_name},
            )
        return data

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
