"""
Record annotations and the column mappings derived from them.

Record fields are marked with typing.Annotated, e.g.

    @dataclass
    class Hotel:
        id: Annotated[str, VectorStoreKey()]
        name: Annotated[str, VectorStoreData(is_indexed=True)]
        embedding: Annotated[List[float], VectorStoreVector(384)] = None
"""

from dataclasses import dataclass
from typing import Optional


class DistanceFunction:
    """Distance function names accepted by VectorStoreVector."""

    EUCLIDEAN_DISTANCE = "EuclideanDistance"
    COSINE_DISTANCE = "CosineDistance"
    MANHATTAN_DISTANCE = "ManhattanDistance"

    # vec0 distance_metric option per function; None keeps the extension default (L2)
    VEC0_METRICS = {
        EUCLIDEAN_DISTANCE: None,
        COSINE_DISTANCE: "cosine",
        MANHATTAN_DISTANCE: "L1",
    }


@dataclass(frozen=True)
class VectorStoreKey:
    """Marks the record's key field."""

    storage_name: Optional[str] = None


@dataclass(frozen=True)
class VectorStoreData:
    """Marks a scalar data field stored in the main table."""

    storage_name: Optional[str] = None
    is_indexed: bool = False


@dataclass(frozen=True)
class VectorStoreVector:
    """Marks the record's vector field, stored only in the vec0 virtual table."""

    dimensions: int
    distance_function: Optional[str] = None
    storage_name: Optional[str] = None


@dataclass(frozen=True)
class ColumnMapping:
    """Describes how one record field is stored."""

    field_name: str
    """Attribute name on the record"""

    field_type: type
    """Declared field type with Optional unwrapped"""

    column_name: str
    """Storage column name (field name unless storage_name overrides it)"""

    sqlite_type: str
    """TEXT, INTEGER, REAL or BLOB"""

    is_key: bool = False
    is_indexed: bool = False
    is_vector: bool = False
    vector_dimensions: int = 0
    distance_function: Optional[str] = None
    is_string_vector: bool = False
