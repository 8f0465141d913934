"""
SQLite connections with the sqlite-vec extension loaded.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator, Optional

import sqlite_vec

from . import config


def load_vec_extension(conn: sqlite3.Connection, extension_path: Optional[str] = None) -> None:
    """Load sqlite-vec on the given connection. Must run before any vec0 statement."""
    extension_path = extension_path or config.VEC_EXTENSION_PATH
    conn.enable_load_extension(True)
    try:
        if extension_path:
            conn.load_extension(extension_path)
        else:
            sqlite_vec.load(conn)
    finally:
        conn.enable_load_extension(False)


@contextmanager
def get_db(db_path: Optional[str] = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite connection with sqlite-vec loaded; closed on exit."""
    db_path = str(db_path or config.DB_PATH)
    config.ensure_db_directory(db_path)
    conn = sqlite3.connect(db_path, uri=db_path.startswith("file:"))
    try:
        conn.row_factory = sqlite3.Row
        load_vec_extension(conn)
        yield conn
    finally:
        conn.close()


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    """Check the catalog for a table (or virtual table) called name."""
    cursor = conn.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?",
        (name,)
    )
    return cursor.fetchone()[0] > 0


def quote_identifier(name: str) -> str:
    """Quote an SQL identifier, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'
