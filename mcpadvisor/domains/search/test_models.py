"""
Tests for search domain models.
"""

from __future__ import annotations

import pytest

from .models import CandidateResult, RerankOptions, SearchQuery


# --- SearchQuery Tests ---


def test_search_query_basic() -> None:
    """Test SearchQuery with minimal required fields."""
    query = SearchQuery(task_description="summarize PDF files")
    assert query.task_description == "summarize PDF files"
    assert query.keywords == ()
    assert query.capabilities == ()


def test_search_query_requires_description() -> None:
    """Test SearchQuery rejects empty and blank descriptions."""
    with pytest.raises(ValueError):
        SearchQuery(task_description="")
    with pytest.raises(ValueError):
        SearchQuery(task_description="   ")


def test_search_query_accepts_camel_case() -> None:
    """Test SearchQuery accepts taskDescription from JSON clients."""
    query = SearchQuery.model_validate({"taskDescription": "git", "keywords": ["repo"]})
    assert query.task_description == "git"
    assert query.keywords == ("repo",)


def test_search_query_splits_comma_keywords() -> None:
    """Test comma-separated keywords become a tuple."""
    query = SearchQuery(task_description="db", keywords="postgres, sql")
    assert query.keywords == ("postgres", "sql")


def test_search_query_to_text() -> None:
    """Test combined query text."""
    query = SearchQuery(
        task_description="query a database",
        keywords=["postgres"],
        capabilities=["sql"],
    )
    assert query.to_text() == "query a database postgres sql"


def test_search_query_is_immutable() -> None:
    """Test SearchQuery is frozen/immutable."""
    query = SearchQuery(task_description="test")
    with pytest.raises(Exception):
        query.task_description = "changed"  # type: ignore


# --- CandidateResult Tests ---


def test_dedup_key_prefers_source_url() -> None:
    result = CandidateResult(id="abc", source_url="https://github.com/a/b")
    assert result.dedup_key == "https://github.com/a/b"


def test_dedup_key_falls_back_to_id() -> None:
    assert CandidateResult(id="abc").dedup_key == "abc"
    assert CandidateResult(title="Files").dedup_key == "title:Files"


def test_candidate_accepts_wire_aliases() -> None:
    """Test github_url and providerName aliases."""
    result = CandidateResult.model_validate(
        {"github_url": "https://x", "providerName": "compass", "similarity": None}
    )
    assert result.source_url == "https://x"
    assert result.provider_name == "compass"
    assert result.similarity == 0.0


def test_candidate_splits_label_strings() -> None:
    result = CandidateResult(categories="files, storage", tags=None)
    assert result.categories == ["files", "storage"]
    assert result.tags == []


# --- RerankOptions Tests ---


def test_rerank_options_threshold() -> None:
    """Test min_score takes precedence over the min_similarity alias."""
    assert RerankOptions().threshold is None
    assert RerankOptions(min_similarity=0.4).threshold == 0.4
    assert RerankOptions(min_score=0.6, min_similarity=0.4).threshold == 0.6


def test_rerank_options_limit_validation() -> None:
    assert RerankOptions().limit == 10
    with pytest.raises(ValueError):
        RerankOptions(limit=0)
