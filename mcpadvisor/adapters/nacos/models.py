"""
Nacos Models - MCP servers registered in the Nacos AI registry.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class BackendEndpoint(BaseModel):
    address: str
    port: int


class NacosMcpServer(BaseModel):
    """Registry entry for one MCP server."""

    name: str
    description: str = ""
    protocol: str | None = None
    agent_config: dict[str, Any] = Field(default_factory=dict)
    detail: dict[str, Any] | None = None

    @property
    def url(self) -> str | None:
        """Remote endpoint URL from the agent config, if any."""
        server = self.agent_config.get("mcpServers", {}).get(self.name, {})
        return server.get("url") or self.agent_config.get("url")

    @property
    def repository_url(self) -> str | None:
        repository = self.agent_config.get("repository")
        if isinstance(repository, dict):
            return repository.get("url")
        return repository or None

    @property
    def source_url(self) -> str:
        """Agent URL, else repository URL, else a ``nacos://`` URI."""
        return self.url or self.repository_url or f"nacos://{self.name}"

    @property
    def categories(self) -> list[str]:
        return list(self.agent_config.get("categories") or [])

    @property
    def tags(self) -> list[str]:
        return list(self.agent_config.get("tags") or [])


def endpoint_url(config: dict[str, Any]) -> str | None:
    """
    Build the remote URL of a non-stdio server from its first backend endpoint.

    Port 443 implies https; the export path is appended when present.
    """
    if config.get("protocol") == "stdio":
        return None
    endpoints = config.get("backendEndpoints") or []
    if not endpoints:
        return None

    endpoint = BackendEndpoint.model_validate(endpoints[0])
    scheme = "https" if endpoint.port == 443 else "http"
    url = f"{scheme}://{endpoint.address}:{endpoint.port}"

    export_path = (config.get("remoteServerConfig") or {}).get("exportPath")
    if export_path:
        url += export_path if export_path.startswith("/") else f"/{export_path}"
    return url
