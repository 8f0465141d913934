"""
Value types shared by the search path.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

import numpy as np

TRecord = TypeVar("TRecord")


@dataclass(eq=False)
class Embedding:
    """A generated embedding, usable directly as a search value."""

    vector: np.ndarray
    """Float32 vector"""

    def __post_init__(self):
        self.vector = np.asarray(self.vector, dtype=np.float32)

    def __len__(self) -> int:
        return len(self.vector)


@dataclass
class VectorSearchResult(Generic[TRecord]):
    """Represents a search result from a collection."""

    record: TRecord
    """The matching record, read from the main table"""

    score: float
    """Similarity score 1 / (1 + distance), in (0, 1]"""

    distance: float = 0.0
    """Raw distance reported by sqlite-vec"""


__all__ = ['Embedding', 'VectorSearchResult']
