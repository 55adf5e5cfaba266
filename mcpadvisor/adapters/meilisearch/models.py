"""
Meilisearch Models - Wire types for the full-text backend.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class BackendHit(BaseModel):
    """One search hit."""

    id: str | int | None = None
    title: str = ""
    description: str | None = None
    github_url: str | None = None
    categories: list[str] | str | None = None
    tags: list[str] | str | None = None
    installations: dict[str, Any] | None = None
    score: float | None = None
    ranking_score: float | None = Field(default=None, alias="_rankingScore")

    model_config = {"extra": "allow", "populate_by_name": True}


class BackendSearchResponse(BaseModel):
    """Search response body."""

    hits: list[BackendHit] = Field(default_factory=list)
    query: str = ""
    processing_time_ms: int | None = Field(default=None, alias="processingTimeMs")
    estimated_total_hits: int | None = Field(default=None, alias="estimatedTotalHits")

    model_config = {"extra": "allow", "populate_by_name": True}


class IndexStats(BaseModel):
    """Index statistics."""

    number_of_documents: int = Field(default=0, alias="numberOfDocuments")
    is_indexing: bool = Field(default=False, alias="isIndexing")

    model_config = {"extra": "allow", "populate_by_name": True}
