"""
Catalog Loaders - Offline and multi-source MCP server data.

Features:
- Bundled JSON catalog for offline search
- Multi-source loading (remote URLs and local files)
- Field-alias normalization across source formats
- Malformed sources are logged and contribute nothing
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import httpx

from mcpadvisor.domains.search.models import CandidateResult

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_FIELD_MAP",
    "OfflineDataLoader",
    "embedding_text",
    "load_sources",
    "normalize_record",
]

# Canonical field -> accepted source field names, first match wins
DEFAULT_FIELD_MAP: dict[str, tuple[str, ...]] = {
    "title": ("display_name", "title", "name"),
    "description": ("description", "summary"),
    "github_url": ("github_url", "repository.url", "repository", "homepage", "url"),
    "categories": ("categories", "category"),
    "tags": ("tags", "keywords"),
    "installations": ("installations",),
}


def _lookup(record: Mapping[str, Any], path: str) -> Any:
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _usable(field: str, value: Any) -> bool:
    if value in (None, "", [], {}):
        return False
    if field == "installations":
        return isinstance(value, Mapping)
    # a nested object (e.g. "repository") only counts through a dotted alias
    return not isinstance(value, Mapping)


def _labels(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return []


def normalize_record(
    record: Mapping[str, Any],
    field_map: Mapping[str, Sequence[str]] = DEFAULT_FIELD_MAP,
) -> CandidateResult | None:
    """
    Map a raw source record onto a CandidateResult.

    Returns None when the record has no usable title.
    """
    values: dict[str, Any] = {}
    for field, aliases in field_map.items():
        for alias in aliases:
            value = _lookup(record, alias)
            if _usable(field, value):
                values[field] = value
                break

    title = str(values.get("title") or "").strip()
    if not title:
        return None

    source_url = str(values.get("github_url") or "")
    return CandidateResult(
        id=source_url or f"fallback-{title}",
        title=title,
        description=str(values.get("description") or ""),
        source_url=source_url,
        categories=_labels(values.get("categories")),
        tags=_labels(values.get("tags")),
        installations=values.get("installations") or {},
    )


def embedding_text(entry: CandidateResult) -> str:
    """Text embedded for an entry: title, description, categories, tags."""
    return ". ".join(
        [
            entry.title,
            entry.description,
            ", ".join(entry.categories),
            ", ".join(entry.tags),
        ]
    )


def _records_from_payload(payload: Any) -> list[Mapping[str, Any]]:
    """Accept a list of records or an ``{id: record}`` object."""
    if isinstance(payload, list):
        return [r for r in payload if isinstance(r, Mapping)]
    if isinstance(payload, Mapping):
        return [r for r in payload.values() if isinstance(r, Mapping)]
    raise ValueError(f"Unsupported catalog payload type: {type(payload).__name__}")


def _normalize_all(
    records: Sequence[Mapping[str, Any]],
    field_map: Mapping[str, Sequence[str]],
    source: str,
) -> list[CandidateResult]:
    results: list[CandidateResult] = []
    skipped = 0
    for record in records:
        candidate = normalize_record(record, field_map)
        if candidate is None:
            skipped += 1
            continue
        results.append(candidate)
    if skipped:
        logger.warning("Skipped %d records without a title from %s", skipped, source)
    return results


class OfflineDataLoader:
    """
    Loads the bundled MCP server list used for offline search.

    Example:
        >>> loader = OfflineDataLoader(Path("data/mcp_server_list.json"))
        >>> entries = await loader.load()
    """

    def __init__(
        self,
        path: Path,
        field_map: Mapping[str, Sequence[str]] = DEFAULT_FIELD_MAP,
    ) -> None:
        self.path = Path(path)
        self._field_map = field_map

    async def load(self) -> list[CandidateResult]:
        """Read the file; missing or malformed files yield an empty list."""
        if not self.path.exists():
            logger.warning("Offline data file not found: %s", self.path)
            return []

        try:
            text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            records = _records_from_payload(json.loads(text))
        except (OSError, ValueError) as e:
            logger.error("Failed to load offline data from %s: %s", self.path, e)
            return []

        entries = _normalize_all(records, self._field_map, str(self.path))
        logger.info("Loaded %d offline entries from %s", len(entries), self.path)
        return entries


async def _load_remote(
    client: httpx.AsyncClient,
    url: str,
    field_map: Mapping[str, Sequence[str]],
) -> list[CandidateResult]:
    try:
        response = await client.get(url)
        response.raise_for_status()
        records = _records_from_payload(response.json())
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Failed to load source %s: %s", url, e)
        return []
    return _normalize_all(records, field_map, url)


async def _load_local(
    path: Path,
    field_map: Mapping[str, Sequence[str]],
) -> list[CandidateResult]:
    try:
        text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        records = _records_from_payload(json.loads(text))
    except (OSError, ValueError) as e:
        logger.error("Failed to load source %s: %s", path, e)
        return []
    return _normalize_all(records, field_map, str(path))


async def load_sources(
    remote_urls: Sequence[str] = (),
    local_files: Sequence[Path] = (),
    field_map: Mapping[str, Sequence[str]] = DEFAULT_FIELD_MAP,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = 30.0,
) -> list[CandidateResult]:
    """
    Load and normalize MCP server records from several sources.

    Each failing source contributes nothing; the others still load.
    Duplicates across sources are collapsed by id, first source wins.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        batches = await asyncio.gather(
            *(_load_remote(client, url, field_map) for url in remote_urls),
            *(_load_local(Path(path), field_map) for path in local_files),
        )

    merged: dict[str, CandidateResult] = {}
    for batch in batches:
        for entry in batch:
            merged.setdefault(entry.dedup_key, entry)

    logger.info(
        "Loaded %d entries from %d sources",
        len(merged),
        len(remote_urls) + len(local_files),
    )
    return list(merged.values())
