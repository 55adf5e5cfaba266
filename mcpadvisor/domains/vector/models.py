"""
Vector Models - Data types for the vector domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from pydantic import BaseModel, Field


@dataclass(frozen=True)
class VectorRecord:
    """Stored entry: unit-normalized vector plus its source text and metadata."""

    id: str
    vector: np.ndarray
    document: str
    metadata: dict[str, Any] = field(default_factory=dict)


class VectorQueryResult(BaseModel):
    """Parallel arrays describing the matches of one query, best first."""

    ids: list[str] = Field(default_factory=list)
    documents: list[str] = Field(default_factory=list)
    metadatas: list[dict[str, Any]] = Field(default_factory=list)
    distances: list[float] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ids)

    @property
    def similarities(self) -> list[float]:
        return [1.0 - d for d in self.distances]


class VectorGetResult(BaseModel):
    """Parallel arrays for a lookup by id."""

    ids: list[str] = Field(default_factory=list)
    documents: list[str] = Field(default_factory=list)
    metadatas: list[dict[str, Any]] = Field(default_factory=list)


class VectorSearchOptions(BaseModel):
    """Filters applied by vector search engines."""

    categories: list[str] | None = None
    tags: list[str] | None = None
    min_similarity: float | None = None
    text_query: str | None = None

    model_config = {"frozen": True}
