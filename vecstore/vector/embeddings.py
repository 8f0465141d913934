"""
Embedding generators used for text-valued vector fields and text search values.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import List


class IEmbeddingGenerator(ABC):
    """Abstract interface for embedding generators."""

    @abstractmethod
    def generate(self, texts: List[str]) -> List[List[float]]:
        """Generate one embedding per input text, in input order."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingGenerator):
    """Deterministic hash-based embedding generator for testing purposes.

    Uses a consistent hashing approach to generate reproducible embeddings
    from text, which is useful for testing without requiring external
    model dependencies.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = []
        counter = 0
        # Chain digests until there are enough 32-bit words to fill the vector
        while len(vector) < self.dimension:
            hex_dig = hashlib.sha256(f"{counter}:{text}".encode()).hexdigest()
            for i in range(0, len(hex_dig), 8):
                if len(vector) >= self.dimension:
                    break
                value = int(hex_dig[i:i + 8], 16)
                # Map to [-1, 1]
                vector.append((value / (2**32)) * 2 - 1)
            counter += 1

        return vector

    def generate(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_text(text) for text in texts]

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingGenerator):
    """Sentence transformers embedding generator using pre-trained models.

    The model is loaded on first use.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError:
                raise ImportError("sentence-transformers not installed. Please install the 'embeddings' extra.")
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def generate(self, texts: List[str]) -> List[List[float]]:
        """Generate embedding vectors using sentence transformers."""
        if not texts:
            return []
        embeddings = self.model.encode(list(texts), convert_to_tensor=False)
        return [embedding.tolist() for embedding in embeddings]

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension
