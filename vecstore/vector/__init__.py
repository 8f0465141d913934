"""
Vector-side helpers: embedding generators and search value types.
"""

from .types import Embedding, VectorSearchResult
from .embeddings import IEmbeddingGenerator, DeterministicHashEmbedding, SentenceTransformerEmbedding

__all__ = [
    'Embedding',
    'VectorSearchResult',
    'IEmbeddingGenerator',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding'
]
