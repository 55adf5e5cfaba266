"""
Catalog Models - MCP server directory entries.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from mcpadvisor.domains.search.models import CandidateResult


class RepositoryInfo(BaseModel):
    """Source repository of an MCP server."""

    type: str | None = None
    url: str | None = None

    model_config = {"extra": "allow"}


class CatalogEntry(BaseModel):
    """One MCP server as published by the directory API."""

    name: str | None = None
    display_name: str | None = None
    description: str = ""
    repository: RepositoryInfo | None = None
    homepage: str | None = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    installations: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "allow"}

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def _labels(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("installations", mode="before")
    @classmethod
    def _installations(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def title(self) -> str:
        return self.display_name or self.name or ""

    @property
    def source_url(self) -> str:
        if self.repository and self.repository.url:
            return self.repository.url
        return self.homepage or ""

    def searchable_text(self) -> str:
        """Text used to embed the entry."""
        return ". ".join(
            part
            for part in (
                self.title,
                self.description,
                ", ".join(self.categories),
                ", ".join(self.tags),
            )
            if part
        )

    def to_candidate(self, entry_id: str, provider_name: str = "") -> CandidateResult:
        return CandidateResult(
            id=entry_id,
            title=self.title or entry_id,
            description=self.description,
            source_url=self.source_url,
            categories=self.categories,
            tags=self.tags,
            installations=self.installations,
            provider_name=provider_name,
        )
