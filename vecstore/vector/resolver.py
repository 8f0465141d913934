"""
Turns record vector fields and search values into float32 query vectors.
"""

from typing import Any, List, Optional, Sequence

import numpy as np

from ..core.codec import coerce_vector
from ..core.errors import ConfigurationError, UnsupportedInputTypeError
from ..core.mapper import RecordMapper
from .embeddings import IEmbeddingGenerator
from .types import Embedding


class EmbeddingResolver:
    """Resolves vectors for upsert and search, embedding text when needed."""

    def __init__(self, mapper: RecordMapper, generator: Optional[IEmbeddingGenerator] = None):
        self.mapper = mapper
        self.generator = generator

    def resolve(self, record) -> Optional[np.ndarray]:
        """
        Resolve the vector to store for a record.

        Returns:
            The record's float vector, the embedding of its text vector field,
            or None when the record type has no vector field or the value is unset.

        Raises:
            ConfigurationError: If the field is textual and no generator was supplied
        """
        return self.resolve_many([record])[0]

    def resolve_many(self, records: Sequence[Any]) -> List[Optional[np.ndarray]]:
        """Resolve vectors for several records, embedding all texts in one generator call."""
        vectors: List[Optional[np.ndarray]] = [None] * len(records)
        if self.mapper.vector_column is None:
            return vectors

        if not self.mapper.vector_column.is_string_vector:
            return [self.mapper.get_vector_value(record) for record in records]

        pending = []
        for i, record in enumerate(records):
            text = self.mapper.get_string_vector_value(record)
            if text is not None:
                pending.append((i, text))

        if pending:
            embedded = self._embed([text for _, text in pending], "string vector properties")
            for (i, _), vector in zip(pending, embedded):
                vectors[i] = vector

        return vectors

    def resolve_search_input(self, value: Any) -> np.ndarray:
        """
        Resolve a search value to a query vector.

        Supported values are Embedding, numpy arrays, lists/tuples of numbers and str.

        Raises:
            UnsupportedInputTypeError: For any other value type
            ConfigurationError: For text when no generator was supplied
        """
        if isinstance(value, str):
            return self._embed([value], "string-based search")[0]
        if isinstance(value, (Embedding, np.ndarray, list, tuple)):
            try:
                return coerce_vector(value)
            except TypeError as e:
                raise UnsupportedInputTypeError(str(e)) from e
        raise UnsupportedInputTypeError(
            f"Search value type '{type(value).__name__}' is not supported. "
            "Supported types are str, Embedding, numpy.ndarray, and sequences of floats."
        )

    def _embed(self, texts: List[str], purpose: str) -> List[np.ndarray]:
        if self.generator is None:
            raise ConfigurationError(
                f"An embedding generator is required for {purpose}. Provide one when creating the collection."
            )
        embeddings = self.generator.generate(texts)
        if len(embeddings) != len(texts):
            raise ConfigurationError(
                f"Embedding generator returned {len(embeddings)} vectors for {len(texts)} texts."
            )
        return [np.asarray(getattr(e, "vector", e), dtype=np.float32) for e in embeddings]
