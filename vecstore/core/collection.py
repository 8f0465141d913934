"""
A record collection backed by a SQLite table plus a sqlite-vec virtual table.

Main table "<name>" holds the key and data columns; "vec_<name>" holds the key
(as TEXT) and the embedding. Every operation opens its own connection.
"""

import threading
from typing import Any, Callable, Iterable, Iterator, List, Optional

import numpy as np

from . import config
from .codec import serialize_vector, to_storage
from .db import get_db, quote_identifier, table_exists
from .errors import ConfigurationError, raise_if_cancelled
from .mapper import RecordMapper
from .schema import DistanceFunction
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingGenerator
from ..vector.resolver import EmbeddingResolver
from ..vector.types import VectorSearchResult


VEC0_MAX_K = 4096


def _paginate(items: List[Any], skip: int, top: int, cancel_event: Optional[threading.Event]) -> Iterator[Any]:
    for item in items[skip:skip + top]:
        raise_if_cancelled(cancel_event)
        yield item


class SqliteVecCollection:
    """
    Collection of records of one type stored in SQLite with sqlite-vec.

    Args:
        name: Collection name, used verbatim as the table name
        record_type: Annotated record class (see vecstore.core.schema)
        db_path: SQLite database path or file: URI; defaults to DB_PATH
        embedding_generator: Needed for text vector fields and text searches
        key_type: Optional type the record key field must be assignable to
    """

    def __init__(self, name: str, record_type: type, db_path: Optional[str] = None,
                 embedding_generator: Optional[IEmbeddingGenerator] = None,
                 key_type: Optional[type] = None):
        if name is None or not str(name).strip():
            raise ValueError("Collection name cannot be None or whitespace.")
        if db_path is not None and not str(db_path).strip():
            raise ValueError("db_path cannot be empty.")

        self.name = name
        self.db_path = str(db_path) if db_path is not None else config.DB_PATH
        self.record_type = record_type
        self.embedding_generator = embedding_generator
        self.mapper = RecordMapper.get_or_create(record_type, key_type)
        self.resolver = EmbeddingResolver(self.mapper, embedding_generator)

        self._table = quote_identifier(name)
        self._vec_table = quote_identifier(f"vec_{name}")
        self._key = quote_identifier(self.mapper.key_column.column_name)

    @property
    def vec_table_name(self) -> str:
        return f"vec_{self.name}"

    # Schema

    def collection_exists(self, cancel_event: Optional[threading.Event] = None) -> bool:
        """Check whether the main table exists. Not cached."""
        raise_if_cancelled(cancel_event)
        with get_db(self.db_path) as conn:
            return table_exists(conn, self.name)

    def ensure_collection_exists(self, cancel_event: Optional[threading.Event] = None) -> None:
        """Create the main table, its indexes and the vec0 table if they are missing."""
        raise_if_cancelled(cancel_event)
        key_column = self.mapper.key_column
        column_defs = [f"{self._key} {key_column.sqlite_type} PRIMARY KEY"]
        column_defs.extend(
            f"{quote_identifier(c.column_name)} {c.sqlite_type}" for c in self.mapper.data_columns
        )

        with get_db(self.db_path) as conn:
            conn.execute(f"CREATE TABLE IF NOT EXISTS {self._table} ({', '.join(column_defs)})")

            for column in self.mapper.columns:
                if column.is_indexed:
                    index_name = quote_identifier(f"idx_{self.name}_{column.column_name}")
                    conn.execute(
                        f"CREATE INDEX IF NOT EXISTS {index_name} ON {self._table} "
                        f"({quote_identifier(column.column_name)})"
                    )

            vector_column = self.mapper.vector_column
            if vector_column is not None:
                embedding_def = f"embedding float[{vector_column.vector_dimensions}]"
                metric = DistanceFunction.VEC0_METRICS.get(vector_column.distance_function)
                if metric:
                    embedding_def += f" distance_metric={metric}"
                conn.execute(
                    f"CREATE VIRTUAL TABLE IF NOT EXISTS {self._vec_table} "
                    f"USING vec0({key_column.column_name} TEXT, {embedding_def})"
                )
            conn.commit()

        logger.log_collection_operation("create", self.name, {
            "columns": len(self.mapper.columns),
            "vector_dimensions": vector_column.vector_dimensions if vector_column else 0
        })

    def ensure_collection_deleted(self, cancel_event: Optional[threading.Event] = None) -> None:
        """Drop the vec0 table and the main table if they exist."""
        raise_if_cancelled(cancel_event)
        with get_db(self.db_path) as conn:
            if self.mapper.vector_column is not None:
                conn.execute(f"DROP TABLE IF EXISTS {self._vec_table}")
            conn.execute(f"DROP TABLE IF EXISTS {self._table}")
            conn.commit()

        logger.log_collection_operation("drop", self.name)

    # Reads

    def get(self, key: Any, include_vectors: bool = False,
            cancel_event: Optional[threading.Event] = None) -> Optional[Any]:
        """Get a record by key, or None if there is no such record."""
        if key is None:
            raise ValueError("key cannot be None.")
        raise_if_cancelled(cancel_event)
        with get_db(self.db_path) as conn:
            return self._read_by_key(conn, key, include_vectors)

    def get_where(self, predicate: Callable[[Any], bool], top: int, skip: int = 0,
                  include_vectors: bool = False,
                  cancel_event: Optional[threading.Event] = None) -> Iterator[Any]:
        """
        Get records matching an in-process predicate.

        Every row of the main table is decoded and tested; the predicate is
        arbitrary Python, so nothing is pushed down to SQL. Matches are then
        paged with skip/top.

        Raises:
            ValueError: If predicate is None, top < 1 or skip < 0
        """
        if predicate is None:
            raise ValueError("predicate cannot be None.")
        if top < 1:
            raise ValueError("top must be greater than zero.")
        if skip < 0:
            raise ValueError("skip cannot be negative.")

        results = []
        with get_db(self.db_path) as conn:
            for row in conn.execute(f"SELECT * FROM {self._table}"):
                raise_if_cancelled(cancel_event)
                record = self.mapper.from_row(dict(row))
                if predicate(record):
                    results.append(record)

            if include_vectors:
                results = [
                    self._read_by_key(conn, self.mapper.get_key(record), True) or record
                    for record in results[skip:skip + top]
                ]
                skip = 0

        return _paginate(results, skip, top, cancel_event)

    def _read_by_key(self, conn, key: Any, include_vectors: bool) -> Optional[Any]:
        row = conn.execute(
            f"SELECT * FROM {self._table} WHERE {self._key} = ?",
            (to_storage(key),)
        ).fetchone()
        if row is None:
            return None

        vector_blob = None
        vector_column = self.mapper.vector_column
        if include_vectors and vector_column is not None and not vector_column.is_string_vector:
            vec_row = conn.execute(
                f"SELECT embedding FROM {self._vec_table} WHERE {self._key} = ?",
                (str(to_storage(key)),)
            ).fetchone()
            if vec_row is not None:
                vector_blob = vec_row[0]

        return self.mapper.from_row(dict(row), vector_blob)

    # Writes

    def delete(self, key: Any, cancel_event: Optional[threading.Event] = None) -> None:
        """Delete a record by key. Deleting a missing key is not an error."""
        if key is None:
            raise ValueError("key cannot be None.")
        raise_if_cancelled(cancel_event)
        stored_key = to_storage(key)
        with get_db(self.db_path) as conn:
            with conn:
                if self.mapper.vector_column is not None:
                    conn.execute(f"DELETE FROM {self._vec_table} WHERE {self._key} = ?", (str(stored_key),))
                conn.execute(f"DELETE FROM {self._table} WHERE {self._key} = ?", (stored_key,))

        logger.log_collection_operation("delete", self.name, {"key": stored_key})

    def upsert(self, record: Any, cancel_event: Optional[threading.Event] = None) -> Any:
        """
        Insert or replace a record.

        The main row and the vector row are written in one transaction.

        Returns:
            The record's key
        """
        if record is None:
            raise ValueError("record cannot be None.")
        return self.upsert_batch([record], cancel_event)[0]

    def upsert_batch(self, records: Iterable[Any], cancel_event: Optional[threading.Event] = None) -> List[Any]:
        """
        Insert or replace several records in a single transaction.

        The whole batch commits or none of it does; cancellation rolls back.

        Returns:
            The keys of the written records, in input order
        """
        if records is None:
            raise ValueError("records cannot be None.")
        records = list(records)
        if any(record is None for record in records):
            raise ValueError("records cannot contain None.")
        if not records:
            return []

        raise_if_cancelled(cancel_event)
        vectors = self.resolver.resolve_many(records)

        keys = []
        with get_db(self.db_path) as conn:
            with conn:
                for record, vector in zip(records, vectors):
                    raise_if_cancelled(cancel_event)
                    keys.append(self._upsert_record(conn, record, vector))

        logger.log_collection_operation("upsert", self.name, {"count": len(keys)})
        return keys

    def _upsert_record(self, conn, record: Any, vector: Optional[np.ndarray]) -> Any:
        key = self.mapper.get_key(record)
        row = self.mapper.to_row(record)
        columns = ", ".join(quote_identifier(c) for c in row)
        placeholders = ", ".join("?" for _ in row)
        conn.execute(
            f"INSERT OR REPLACE INTO {self._table} ({columns}) VALUES ({placeholders})",
            tuple(row.values())
        )

        if self.mapper.vector_column is not None and vector is not None:
            self._check_dimensions(vector)
            vec_key = str(to_storage(key))
            conn.execute(f"DELETE FROM {self._vec_table} WHERE {self._key} = ?", (vec_key,))
            conn.execute(
                f"INSERT INTO {self._vec_table} ({self._key}, embedding) VALUES (?, ?)",
                (vec_key, serialize_vector(vector))
            )
            logger.log_vector_operation("upserted", vec_key, {
                "collection": self.name,
                "dimension": len(vector)
            })

        return key

    def _check_dimensions(self, vector: np.ndarray) -> None:
        expected = self.mapper.vector_column.vector_dimensions
        if len(vector) != expected:
            raise ValueError(f"Vector dimension {len(vector)} does not match expected dimension {expected}")

    # Search

    def search(self, search_value: Any, top: int, filter: Optional[Callable[[Any], bool]] = None,
               skip: int = 0, include_vectors: bool = False,
               cancel_event: Optional[threading.Event] = None) -> Iterator[VectorSearchResult]:
        """
        Nearest-neighbour search over the vector column.

        Args:
            search_value: Query vector, Embedding, or text to embed
            top: Maximum number of results
            filter: Optional predicate applied to candidate records
            skip: Number of ranked results to skip

        Returns:
            Iterator of VectorSearchResult ordered by descending score

        Raises:
            ValueError: If top < 1 or skip < 0
            ConfigurationError: If the record type has no vector field
        """
        if top < 1:
            raise ValueError("top must be greater than zero.")
        if skip < 0:
            raise ValueError("skip cannot be negative.")
        if self.mapper.vector_column is None:
            raise ConfigurationError("Record type does not have a VectorStoreVector field.")

        raise_if_cancelled(cancel_event)
        query_vector = self.resolver.resolve_search_input(search_value)
        self._check_dimensions(query_vector)

        # Over-fetch when filtering; best effort, a selective filter can still return fewer than top
        fetch_count = top + skip
        if filter is not None:
            fetch_count += top * config.SEARCH_FILTER_OVERFETCH
        # vec0 rejects k above its compile-time limit
        fetch_count = min(fetch_count, VEC0_MAX_K)

        results = []
        with get_db(self.db_path) as conn:
            matches = conn.execute(
                f"SELECT {self._key}, distance FROM {self._vec_table} "
                f"WHERE embedding MATCH ? AND k = ? ORDER BY distance",
                (serialize_vector(query_vector), fetch_count)
            ).fetchall()

            for match_key, distance in matches:
                raise_if_cancelled(cancel_event)
                record = self._read_by_key(conn, match_key, include_vectors)
                if record is None:
                    continue
                if filter is not None and not filter(record):
                    continue
                # cosine self-matches can come back as a tiny negative distance
                score = 1.0 / (1.0 + max(distance, 0.0))
                results.append(VectorSearchResult(record=record, score=score, distance=distance))

        logger.log_search(self.name, top, skip, fetch_count, len(matches),
                          len(results[skip:skip + top]), filtered=filter is not None)
        return _paginate(results, skip, top, cancel_event)
