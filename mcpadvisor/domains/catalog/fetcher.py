"""
Catalog Fetcher - Download the MCP server directory.

Features:
- Async HTTP client with retry on transient failures
- Per-entry validation (malformed entries are skipped)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from mcpadvisor.config.errors import MalformedDataError, ProviderError

from .models import CatalogEntry

logger = logging.getLogger(__name__)

__all__ = ["CatalogFetcher", "parse_catalog"]


def parse_catalog(payload: Any) -> dict[str, CatalogEntry]:
    """
    Validate a directory payload mapping id to entry.

    Raises:
        MalformedDataError: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise MalformedDataError(
            "Catalog payload is not an object",
            {"type": type(payload).__name__},
        )

    entries: dict[str, CatalogEntry] = {}
    for entry_id, raw in payload.items():
        try:
            entries[str(entry_id)] = CatalogEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed catalog entry %s: %s", entry_id, e)
    return entries


class CatalogFetcher:
    """
    Fetches the MCP server directory over HTTP.

    Example:
        >>> fetcher = CatalogFetcher("https://getmcp.io/api/servers.json")
        >>> entries = await fetcher.fetch()
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        max_attempts: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize fetcher.

        Args:
            url: Directory URL returning ``{id: entry}`` JSON
            timeout: Request timeout in seconds
            max_attempts: Attempts for transient network errors
            transport: Optional httpx transport (tests)
        """
        self.url = url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def fetch(self) -> dict[str, CatalogEntry]:
        """
        Download and validate the directory.

        Raises:
            ProviderError: Network failure or non-2xx status
            MalformedDataError: Response is not a JSON object
        """
        try:
            payload = await self._fetch_json()
        except httpx.HTTPError as e:
            raise ProviderError(f"Catalog fetch failed: {e}", {"url": self.url}) from e
        except ValueError as e:
            raise MalformedDataError(f"Catalog is not valid JSON: {e}", {"url": self.url}) from e

        entries = parse_catalog(payload)
        logger.info("Fetched %d catalog entries from %s", len(entries), self.url)
        return entries

    async def _fetch_json(self) -> Any:
        client = await self._get_client()
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        ):
            with attempt:
                response = await client.get(self.url)
                response.raise_for_status()
                return response.json()
        return None

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
