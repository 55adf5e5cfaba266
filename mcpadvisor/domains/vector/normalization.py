"""
Vector Normalization - L2 normalization and cosine scoring helpers.

Features:
- Unit-length normalization (zero vectors pass through unchanged)
- Cosine similarity and batch scoring against a matrix
- Distance/similarity conversion
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

__all__ = [
    "as_vector",
    "magnitude",
    "normalize",
    "cosine_similarity",
    "cosine_scores",
    "similarity_to_distance",
    "distance_to_similarity",
]

VectorLike = Sequence[float] | np.ndarray


def as_vector(vector: VectorLike) -> np.ndarray:
    """Convert to a 1-D float64 array."""
    arr = np.asarray(vector, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {arr.shape}")
    return arr


def magnitude(vector: VectorLike) -> float:
    """L2 norm of a vector."""
    return float(np.linalg.norm(as_vector(vector)))


def normalize(vector: VectorLike) -> np.ndarray:
    """
    Scale a vector to unit length.

    The zero vector is returned unchanged.
    """
    arr = as_vector(vector)
    norm = np.linalg.norm(arr)
    if norm == 0:
        return arr.copy()
    return arr / norm


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when either vector is zero.

    Raises:
        ValueError: If the vectors differ in dimension
    """
    va, vb = as_vector(a), as_vector(b)
    if va.shape != vb.shape:
        raise ValueError(f"Vector dimensions differ: {va.shape[0]} != {vb.shape[0]}")
    return float(np.dot(normalize(va), normalize(vb)))


def cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Dot product of a unit query against rows of unit vectors."""
    if matrix.size == 0:
        return np.empty(0, dtype=np.float64)
    if matrix.shape[1] != query.shape[0]:
        raise ValueError(
            f"Vector dimensions differ: {matrix.shape[1]} != {query.shape[0]}"
        )
    return matrix @ query


def similarity_to_distance(similarity: float) -> float:
    return 1.0 - similarity


def distance_to_similarity(distance: float) -> float:
    return 1.0 - distance
