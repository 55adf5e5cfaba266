"""
Vector Domain - Local embedding and similarity search.

This domain handles:
- Vector normalization and cosine scoring
- Swappable embedding providers
- In-memory VectorStore and vector search engine
"""

from .contracts import VectorSearchEngine, WritableVectorSearchEngine
from .embeddings import (
    EmbeddingProvider,
    HashingEmbeddingProvider,
    SentenceTransformerEmbeddingProvider,
    create_embedding_provider,
)
from .engine import InMemoryVectorEngine
from .models import VectorGetResult, VectorQueryResult, VectorRecord, VectorSearchOptions
from .normalization import (
    cosine_similarity,
    distance_to_similarity,
    magnitude,
    normalize,
    similarity_to_distance,
)
from .store import VectorStore

__all__ = [
    "VectorSearchEngine",
    "WritableVectorSearchEngine",
    "EmbeddingProvider",
    "HashingEmbeddingProvider",
    "SentenceTransformerEmbeddingProvider",
    "create_embedding_provider",
    "InMemoryVectorEngine",
    "VectorRecord",
    "VectorQueryResult",
    "VectorGetResult",
    "VectorSearchOptions",
    "VectorStore",
    "normalize",
    "magnitude",
    "cosine_similarity",
    "similarity_to_distance",
    "distance_to_similarity",
]
