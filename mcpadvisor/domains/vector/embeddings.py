"""
Embedding Providers - Swappable text-to-vector functions.

Features:
- Deterministic feature-hashing provider (no network or model files)
- Sentence-transformers provider for semantic embeddings
- Factory selecting the provider from settings
"""

from __future__ import annotations

import hashlib
import logging
import re
from typing import Protocol, runtime_checkable

import numpy as np
from sentence_transformers import SentenceTransformer

from mcpadvisor.config.settings import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "EmbeddingProvider",
    "HashingEmbeddingProvider",
    "SentenceTransformerEmbeddingProvider",
    "create_embedding_provider",
]

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Contract for text embedding implementations."""

    @property
    def dimension(self) -> int:
        """Length of every produced vector."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Embed text into a fixed-dimension vector."""
        ...


class HashingEmbeddingProvider:
    """
    Deterministic embeddings via signed feature hashing.

    Each lower-cased token (and each token bigram) is hashed into a bucket
    of a fixed-size vector. Texts sharing vocabulary get similar vectors,
    and the same text always yields the same vector.

    Example:
        >>> provider = HashingEmbeddingProvider(dimension=64)
        >>> provider.embed("read pdf files").shape
        (64,)
    """

    def __init__(self, dimension: int = 384) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> np.ndarray:
        vector = np.zeros(self._dimension, dtype=np.float64)
        tokens = _TOKEN_RE.findall(text.lower())
        features = tokens + [f"{a} {b}" for a, b in zip(tokens, tokens[1:])]

        for feature in features:
            digest = hashlib.blake2b(feature.encode("utf-8"), digest_size=8).digest()
            value = int.from_bytes(digest, "little")
            index = value % self._dimension
            sign = 1.0 if (value >> 63) & 1 == 0 else -1.0
            vector[index] += sign

        return vector


class SentenceTransformerEmbeddingProvider:
    """
    Semantic embeddings from a sentence-transformers model.

    Example:
        >>> provider = SentenceTransformerEmbeddingProvider("all-MiniLM-L6-v2")
        >>> provider.dimension
        384
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2") -> None:
        """
        Load embedding model.

        Args:
            model_name: Sentence transformer model name
        """
        logger.info("Loading embedding model: %s", model_name)
        self._model = SentenceTransformer(model_name)
        self._dimension = int(self._model.get_sentence_embedding_dimension())

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> np.ndarray:
        embedding = self._model.encode(text, convert_to_numpy=True)
        return np.asarray(embedding, dtype=np.float64)


def create_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Build the embedding provider selected in settings."""
    if settings.embedding_provider == "sentence-transformers":
        return SentenceTransformerEmbeddingProvider(settings.embedding_model)
    return HashingEmbeddingProvider(settings.embedding_dimension)
