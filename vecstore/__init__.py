"""
SQLite + sqlite-vec backed record collections with nearest-neighbour search.
"""

from .core.config import VERSION as __version__
from .core.collection import SqliteVecCollection
from .core.errors import (
    VectorStoreError,
    ConfigurationError,
    UnsupportedInputTypeError,
    TypeCoercionError,
    OperationCancelledError,
)
from .core.schema import VectorStoreKey, VectorStoreData, VectorStoreVector, DistanceFunction
from .vector.types import Embedding, VectorSearchResult

__all__ = [
    '__version__',
    'SqliteVecCollection',
    'VectorStoreError',
    'ConfigurationError',
    'UnsupportedInputTypeError',
    'TypeCoercionError',
    'OperationCancelledError',
    'VectorStoreKey',
    'VectorStoreData',
    'VectorStoreVector',
    'DistanceFunction',
    'Embedding',
    'VectorSearchResult',
]
