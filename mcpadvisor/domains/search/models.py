"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator


def _split_labels(value: Any) -> Any:
    """Accept comma-separated strings for list-of-label fields."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class SearchQuery(BaseModel):
    """Search request describing the task an MCP server should help with."""

    task_description: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("task_description", "taskDescription"),
    )
    keywords: tuple[str, ...] = ()
    capabilities: tuple[str, ...] = ()

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("task_description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("task_description must not be blank")
        return value

    @field_validator("keywords", "capabilities", mode="before")
    @classmethod
    def _split(cls, value: Any) -> Any:
        return _split_labels(value)

    def to_text(self) -> str:
        """Combine description, keywords and capabilities into one query string."""
        parts = [self.task_description, *self.keywords, *self.capabilities]
        return " ".join(p.strip() for p in parts if p and p.strip())


class CandidateResult(BaseModel):
    """Single MCP server recommendation produced by one provider."""

    id: str | None = None
    title: str = ""
    description: str = ""
    source_url: str = Field(
        default="",
        validation_alias=AliasChoices("source_url", "sourceUrl", "github_url"),
    )
    similarity: float = 0.0
    score: float | None = None
    provider_name: str = Field(
        default="",
        validation_alias=AliasChoices("provider_name", "providerName"),
    )
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    installations: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("similarity", mode="before")
    @classmethod
    def _missing_similarity(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def _split(cls, value: Any) -> Any:
        return _split_labels(value)

    @field_validator("installations", "metadata", mode="before")
    @classmethod
    def _missing_mapping(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def dedup_key(self) -> str:
        """Identity used to merge duplicates across providers."""
        if self.source_url:
            return self.source_url
        if self.id:
            return self.id
        return f"title:{self.title}"


class ProviderResult(BaseModel):
    """Results returned by one provider for one query."""

    provider_name: str
    results: list[CandidateResult] = Field(default_factory=list)

    model_config = {"frozen": True}


class RerankOptions(BaseModel):
    """Ranking controls. ``min_similarity`` is a legacy alias of ``min_score``."""

    limit: int | None = Field(default=10, ge=1)
    min_score: float | None = None
    min_similarity: float | None = None

    model_config = {"frozen": True}

    @property
    def threshold(self) -> float | None:
        if self.min_score is not None:
            return self.min_score
        return self.min_similarity
