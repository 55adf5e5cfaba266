"""
Search Routes - MCP server recommendation endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from mcpadvisor.adapters.meilisearch import BackendSearchResponse, ResilientClient
from mcpadvisor.domains.search import (
    CandidateResult,
    RerankOptions,
    SearchOrchestrator,
    SearchQuery,
)

from ..deps import get_backend_client, get_orchestrator

router = APIRouter()


class SearchRequest(BaseModel):
    """Search request body."""

    task_description: str = Field(..., min_length=1, description="Task to find a server for")
    keywords: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=1, le=100)
    min_score: float | None = None


class SearchResponse(BaseModel):
    """Search response."""

    query: str
    results: list[CandidateResult]
    total: int


class BackendSearchRequest(BaseModel):
    """Direct full-text backend query."""

    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=100)


@router.post("", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchResponse:
    """
    Recommend MCP servers from every configured provider.

    Provider failures never fail the request; the result list may be empty.
    """
    query = SearchQuery(
        task_description=request.task_description,
        keywords=request.keywords,
        capabilities=request.capabilities,
    )
    overrides = request.model_dump(include={"limit", "min_score"}, exclude_none=True)
    options = RerankOptions(**overrides) if overrides else None

    results = await orchestrator.search(query, options)
    return SearchResponse(query=request.task_description, results=results, total=len(results))


@router.post("/backend", response_model=BackendSearchResponse)
async def search_backend(
    request: BackendSearchRequest,
    client: ResilientClient = Depends(get_backend_client),
) -> BackendSearchResponse:
    """
    Query the full-text backend directly (primary, then fallback).

    Returns 503 when both backends fail.
    """
    return await client.search(request.query, limit=request.limit)
