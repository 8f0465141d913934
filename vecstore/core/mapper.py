"""
Schema discovery: turns an annotated record class into column mappings.

A mapper is built once per record type and cached for the life of the
process. Supported record types are dataclasses, pydantic models and plain
classes with annotated attributes and a no-argument constructor.
"""

import dataclasses
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple, get_args, get_origin, get_type_hints

import numpy as np
from pydantic import BaseModel, ValidationError

from .codec import coerce_vector, from_storage, is_float_sequence_type, sqlite_type_for, to_storage, unwrap_optional
from .errors import ConfigurationError, TypeCoercionError
from .schema import ColumnMapping, DistanceFunction, VectorStoreData, VectorStoreKey, VectorStoreVector


def _type_name(record_type: type) -> str:
    return f"{record_type.__module__}.{record_type.__qualname__}"


def _split_annotation(hint) -> Tuple[Any, tuple]:
    """Split Annotated[T, *markers] into (T, markers)."""
    if get_origin(hint) is Annotated:
        return get_args(hint)[0], hint.__metadata__
    return hint, ()


def _enumerate_fields(record_type: type) -> List[Tuple[str, bool, Any, tuple]]:
    """Return (field name, has default, type, annotation markers) in declaration order."""
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        # pydantic keeps Annotated extras in FieldInfo.metadata
        return [
            (name, not info.is_required(), info.annotation, tuple(info.metadata))
            for name, info in record_type.model_fields.items()
        ]

    hints = get_type_hints(record_type, include_extras=True)
    if dataclasses.is_dataclass(record_type):
        return [
            (f.name, f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING)
            + _split_annotation(hints.get(f.name))
            for f in dataclasses.fields(record_type)
        ]
    return [(name, hasattr(record_type, name)) + _split_annotation(hint) for name, hint in hints.items()]


def _first(markers: tuple, marker_type: type):
    return next((m for m in markers if isinstance(m, marker_type)), None)


class RecordMapper:
    """Column mappings for one record type plus record <-> row conversion."""

    _cache: Dict[type, "RecordMapper"] = {}

    def __init__(self, record_type: type, columns: List[ColumnMapping],
                 vector_column: Optional[ColumnMapping], field_defaults: Dict[str, bool]):
        self.record_type = record_type
        self.columns: Tuple[ColumnMapping, ...] = tuple(columns)
        self.vector_column = vector_column
        self._field_defaults = field_defaults

    @classmethod
    def get_or_create(cls, record_type: type, key_type: Optional[type] = None) -> "RecordMapper":
        """
        Get the cached mapper for record_type, building it on first use.

        Args:
            record_type: The record class to map
            key_type: Optional type the key field must be assignable to

        Raises:
            ConfigurationError: If the record type cannot be mapped
        """
        mapper = cls._cache.get(record_type)
        if mapper is None:
            # A concurrent build of the same type yields an equal mapper; first insert wins
            mapper = cls._cache.setdefault(record_type, cls._create(record_type))
        if key_type is not None:
            mapper.validate_key_type(key_type)
        return mapper

    @classmethod
    def _create(cls, record_type: type) -> "RecordMapper":
        name = _type_name(record_type)
        try:
            fields = _enumerate_fields(record_type)
        except (NameError, TypeError) as e:
            raise ConfigurationError(f"Cannot resolve annotations of '{name}': {e}") from e

        columns: List[ColumnMapping] = []
        key_column = None
        vector_column = None

        for field_name, _, base, markers in fields:
            field_type = unwrap_optional(base)

            key_marker = _first(markers, VectorStoreKey)
            vector_marker = _first(markers, VectorStoreVector)
            data_marker = _first(markers, VectorStoreData)

            if key_marker is not None:
                if key_column is not None:
                    raise ConfigurationError(f"Record type '{name}' has multiple VectorStoreKey fields.")
                key_column = ColumnMapping(
                    field_name=field_name,
                    field_type=field_type,
                    column_name=key_marker.storage_name or field_name,
                    sqlite_type=sqlite_type_for(field_type),
                    is_key=True,
                )
                columns.append(key_column)
            elif vector_marker is not None:
                if vector_column is not None:
                    raise ConfigurationError(f"Record type '{name}' has multiple VectorStoreVector fields.")
                vector_column = cls._vector_mapping(name, field_name, field_type, vector_marker)
            elif data_marker is not None:
                columns.append(ColumnMapping(
                    field_name=field_name,
                    field_type=field_type,
                    column_name=data_marker.storage_name or field_name,
                    sqlite_type=sqlite_type_for(field_type),
                    is_indexed=data_marker.is_indexed,
                ))

        if key_column is None:
            raise ConfigurationError(f"Record type '{name}' must have a VectorStoreKey field.")

        seen = set()
        for column in columns + ([vector_column] if vector_column else []):
            if column.column_name in seen:
                raise ConfigurationError(f"Record type '{name}' maps more than one field to column '{column.column_name}'.")
            seen.add(column.column_name)

        field_defaults = {field_name: has_default for field_name, has_default, _, _ in fields}
        return cls(record_type, columns, vector_column, field_defaults)

    @staticmethod
    def _vector_mapping(type_name: str, field_name: str, field_type, marker: VectorStoreVector) -> ColumnMapping:
        if marker.dimensions < 1:
            raise ConfigurationError(f"Vector field '{field_name}' on '{type_name}' must have dimensions >= 1.")
        if marker.distance_function is not None and marker.distance_function not in DistanceFunction.VEC0_METRICS:
            raise ConfigurationError(
                f"Vector field '{field_name}' on '{type_name}' uses unsupported distance function "
                f"'{marker.distance_function}'."
            )

        is_string = field_type is str
        if not is_string and not is_float_sequence_type(field_type):
            raise ConfigurationError(
                f"Vector field '{field_name}' on '{type_name}' has unsupported type '{field_type}'. "
                "Use str or a float sequence (List[float], numpy.ndarray, Embedding)."
            )

        return ColumnMapping(
            field_name=field_name,
            field_type=field_type,
            column_name=marker.storage_name or field_name,
            sqlite_type="BLOB",
            is_vector=True,
            vector_dimensions=marker.dimensions,
            distance_function=marker.distance_function,
            is_string_vector=is_string,
        )

    @property
    def key_column(self) -> ColumnMapping:
        return next(c for c in self.columns if c.is_key)

    @property
    def data_columns(self) -> List[ColumnMapping]:
        return [c for c in self.columns if not c.is_key]

    def validate_key_type(self, key_type: type) -> None:
        key_field_type = self.key_column.field_type
        if not (isinstance(key_field_type, type) and issubclass(key_field_type, key_type)):
            raise ConfigurationError(
                f"VectorStoreKey field '{self.key_column.field_name}' must be assignable to key type "
                f"'{getattr(key_type, '__name__', key_type)}'."
            )

    def get_key(self, record) -> Any:
        key = getattr(record, self.key_column.field_name, None)
        if key is None:
            raise ValueError(f"Record key '{self.key_column.field_name}' cannot be None.")
        return key

    def get_vector_value(self, record) -> Optional[np.ndarray]:
        """Vector value as float32, or None for string vectors and unset vectors."""
        if self.vector_column is None or self.vector_column.is_string_vector:
            return None
        return coerce_vector(getattr(record, self.vector_column.field_name, None))

    def get_string_vector_value(self, record) -> Optional[str]:
        """Text to embed for a string-typed vector field."""
        if self.vector_column is None or not self.vector_column.is_string_vector:
            return None
        value = getattr(record, self.vector_column.field_name, None)
        return value if isinstance(value, str) else None

    def to_row(self, record) -> Dict[str, Any]:
        """Main-table column values for a record, key column first."""
        return {c.column_name: to_storage(getattr(record, c.field_name, None)) for c in self.columns}

    def from_row(self, row: Mapping[str, Any], vector_blob: Optional[bytes] = None):
        """
        Build a record from a column-name -> stored-value map.

        Columns without a mapping are ignored. NULL leaves a field at its
        default when it has one. vector_blob, when given, fills a float
        vector field.
        """
        values: Dict[str, Any] = {}
        for column in self.columns:
            if column.column_name not in row:
                continue
            value = from_storage(row[column.column_name], column.field_type)
            if value is None and self._field_defaults.get(column.field_name):
                continue
            values[column.field_name] = value

        if vector_blob is not None and self.vector_column is not None and not self.vector_column.is_string_vector:
            values[self.vector_column.field_name] = from_storage(vector_blob, self.vector_column.field_type)

        for field_name, has_default in self._field_defaults.items():
            if field_name not in values and not has_default:
                values[field_name] = None

        return self._construct(values)

    def _construct(self, values: Dict[str, Any]):
        record_type = self.record_type
        if dataclasses.is_dataclass(record_type) or issubclass(record_type, BaseModel):
            try:
                return record_type(**values)
            except ValidationError as e:
                raise TypeCoercionError(f"Stored row does not validate as '{_type_name(record_type)}': {e}") from e

        try:
            record = record_type()
        except TypeError as e:
            raise ConfigurationError(
                f"Record type '{_type_name(record_type)}' must be constructible without arguments."
            ) from e
        for field_name, value in values.items():
            setattr(record, field_name, value)
        return record
