"""
Text Matching - Keyword relevance scores used alongside vector similarity.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

__all__ = ["tokenize", "term_match_score", "keyword_match_score"]

_TERM_RE = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str) -> list[str]:
    """Lower-cased word terms of a text, duplicates removed, order kept."""
    return list(dict.fromkeys(_TERM_RE.findall(text.lower())))


def _fraction_found(terms: list[str], text: str) -> float:
    if not terms:
        return 0.0
    haystack = text.lower()
    return sum(1 for term in terms if term in haystack) / len(terms)


def term_match_score(
    query: str,
    title: str,
    description: str,
    categories: Iterable[str] = (),
    tags: Iterable[str] = (),
) -> float:
    """
    Fraction of query terms found, weighted by field.

    Title counts 0.5, description 0.3, and the better of categories or
    tags 0.2. The result is in [0, 1].
    """
    terms = tokenize(query)
    if not terms:
        return 0.0

    title_score = _fraction_found(terms, title)
    description_score = _fraction_found(terms, description)
    label_score = max(
        _fraction_found(terms, " ".join(categories)),
        _fraction_found(terms, " ".join(tags)),
    )
    return title_score * 0.5 + description_score * 0.3 + label_score * 0.2


def keyword_match_score(
    query: str,
    name: str,
    description: str,
    categories: Iterable[str] = (),
    tags: Iterable[str] = (),
) -> float:
    """
    Per-keyword field bonus capped at 1.

    Each keyword adds 0.5 for a name hit, 0.3 for description, 0.2 for
    categories and 0.2 for tags; the total is divided by the keyword count.
    """
    keywords = [k for k in query.lower().split() if k]
    if not keywords:
        return 0.0

    name_l = name.lower()
    description_l = description.lower()
    categories_l = [c.lower() for c in categories]
    tags_l = [t.lower() for t in tags]

    score = 0.0
    for keyword in keywords:
        if keyword in name_l:
            score += 0.5
        if keyword in description_l:
            score += 0.3
        if any(keyword in c for c in categories_l):
            score += 0.2
        if any(keyword in t for t in tags_l):
            score += 0.2
    return min(score / len(keywords), 1.0)
