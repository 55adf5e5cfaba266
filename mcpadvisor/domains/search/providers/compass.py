"""
Compass Provider - Remote MCP recommendation API.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mcpadvisor.config.errors import MalformedDataError, ProviderError

from ..models import CandidateResult, SearchQuery

logger = logging.getLogger(__name__)

__all__ = ["CompassSearchProvider"]


class CompassSearchProvider:
    """
    Queries ``GET {base}/recommend?description=...``.

    The API's relevance score is kept as the explicit result score.

    Example:
        >>> provider = CompassSearchProvider("https://registry.mcphub.io")
        >>> results = await provider.search(SearchQuery(task_description="slack bot"))
    """

    name = "compass"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def search(self, query: SearchQuery) -> list[CandidateResult]:
        """
        Ask the recommendation API for matching servers.

        Raises:
            ProviderError: Network failure or non-2xx status
            MalformedDataError: Response is not a JSON array
        """
        client = await self._get_client()
        try:
            response = await client.get(
                "/recommend", params={"description": query.task_description}
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"Compass request failed: {e}", {"base_url": self.base_url}) from e
        except ValueError as e:
            raise MalformedDataError(f"Compass returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise MalformedDataError(
                "Compass response is not a list",
                {"type": type(payload).__name__},
            )

        results = [self._to_candidate(item) for item in payload if isinstance(item, dict)]
        logger.debug("Compass returned %d results", len(results))
        return results

    def _to_candidate(self, item: dict[str, Any]) -> CandidateResult:
        score = item.get("score")
        entry_id = item.get("id") or item.get("github_url")
        return CandidateResult(
            id=str(entry_id) if entry_id else None,
            title=item.get("title") or "",
            description=item.get("description") or "",
            source_url=item.get("github_url") or "",
            similarity=score if score is not None else 0.0,
            score=score,
            provider_name=self.name,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
