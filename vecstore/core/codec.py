"""
Conversions between Python field values and SQLite storage values.

Vectors are stored as raw little-endian float32 blobs (4 bytes per dimension,
no header), which is the layout sqlite-vec expects for float[N] columns.
"""

import collections.abc
import types
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union, get_args, get_origin

import numpy as np

from .errors import TypeCoercionError
from ..vector.types import Embedding

VECTOR_DTYPE = np.dtype("<f4")

_UNION_TYPES = tuple(t for t in (Union, getattr(types, "UnionType", None)) if t is not None)
_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence)


def unwrap_optional(field_type):
    """Return X for Optional[X] / X | None, otherwise the type unchanged."""
    if get_origin(field_type) in _UNION_TYPES:
        args = [a for a in get_args(field_type) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return field_type


def is_float_sequence_type(field_type) -> bool:
    """True for types that hold a fixed-width float vector."""
    if field_type in (np.ndarray, Embedding, list, tuple):
        return True
    if get_origin(field_type) in _SEQUENCE_ORIGINS:
        args = [a for a in get_args(field_type) if a is not Ellipsis]
        return all(a in (float, int) for a in args)
    return False


def sqlite_type_for(field_type) -> str:
    """Infer the SQLite column type for a Python field type. Unknown types map to TEXT."""
    field_type = unwrap_optional(field_type)
    if not isinstance(field_type, type):
        return "TEXT"
    if issubclass(field_type, (bool, int)):
        return "INTEGER"
    if issubclass(field_type, (float, Decimal)):
        return "REAL"
    if issubclass(field_type, (bytes, bytearray)):
        return "BLOB"
    # str, UUID, datetime, date and everything else
    return "TEXT"


def serialize_vector(values) -> bytes:
    """Serialize a float sequence to a float32 little-endian blob."""
    if isinstance(values, Embedding):
        values = values.vector
    array = np.asarray(values, dtype=VECTOR_DTYPE)
    if array.ndim != 1:
        raise ValueError(f"Vector must be one-dimensional, got shape {array.shape}")
    return array.tobytes()


def deserialize_vector(blob: bytes) -> np.ndarray:
    """Inverse of serialize_vector; returns a writable float32 array."""
    return np.frombuffer(bytes(blob), dtype=VECTOR_DTYPE).astype(np.float32)


def _is_numeric_sequence(value) -> bool:
    return isinstance(value, (list, tuple)) and all(
        isinstance(v, (int, float, np.number)) and not isinstance(v, bool) for v in value
    )


def to_storage(value: Any) -> Any:
    """Convert a field value to something sqlite3 can bind."""
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Enum):
        return to_storage(value.value)
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (str, int, float, bytes)):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, (Embedding, np.ndarray)) or _is_numeric_sequence(value):
        return serialize_vector(value)
    return str(value)


def _vector_as(vector: np.ndarray, target_type):
    if target_type is np.ndarray:
        return vector
    if target_type is Embedding:
        return Embedding(vector)
    if target_type is tuple or get_origin(target_type) is tuple:
        return tuple(vector.tolist())
    return vector.tolist()


def from_storage(value: Any, target_type) -> Any:
    """
    Convert a stored column value back to the field's declared type.

    Args:
        value: Value as returned by sqlite3 (None, int, float, str or bytes)
        target_type: Declared field type, Optional allowed

    Returns:
        The converted value, or None for NULL

    Raises:
        TypeCoercionError: If the value cannot be converted
    """
    if value is None:
        return None

    target_type = unwrap_optional(target_type)

    try:
        if is_float_sequence_type(target_type) and isinstance(value, (bytes, bytearray, memoryview)):
            return _vector_as(deserialize_vector(value), target_type)
        if target_type is Any or not isinstance(target_type, type):
            return value
        if target_type is bool:
            return bool(value)
        if issubclass(target_type, Enum):
            return target_type(value)
        if target_type is int:
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"{value!r} is not integral")
            return int(value)
        if target_type is float:
            return float(value)
        if target_type is str:
            return value.decode("utf-8") if isinstance(value, bytes) else str(value)
        if target_type is uuid.UUID:
            return uuid.UUID(str(value))
        if target_type is datetime:
            return datetime.fromisoformat(value)
        if target_type is date:
            return date.fromisoformat(value)
        if target_type is Decimal:
            return Decimal(str(value))
        if target_type in (bytes, bytearray):
            return target_type(value.encode("utf-8") if isinstance(value, str) else value)
        if isinstance(value, target_type):
            return value
        return target_type(value)
    except (ValueError, TypeError, InvalidOperation) as e:
        raise TypeCoercionError(
            f"Cannot convert stored value {value!r} to {getattr(target_type, '__name__', target_type)}: {e}"
        ) from e


def coerce_vector(value: Any) -> Optional[np.ndarray]:
    """Return a float32 array for a vector-like field value, None for None."""
    if value is None:
        return None
    if isinstance(value, Embedding):
        return value.vector
    if isinstance(value, np.ndarray) or _is_numeric_sequence(value):
        return np.asarray(value, dtype=np.float32)
    raise TypeCoercionError(f"Unsupported vector value type '{type(value).__name__}'")


__all__ = [
    'VECTOR_DTYPE',
    'unwrap_optional',
    'is_float_sequence_type',
    'sqlite_type_for',
    'serialize_vector',
    'deserialize_vector',
    'to_storage',
    'from_storage',
    'coerce_vector',
]
