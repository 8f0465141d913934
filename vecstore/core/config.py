"""
Configuration from environment variables (a local .env file is honoured).
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/vecstore.db")

# Optional path to a vec0 loadable extension; the sqlite_vec package is used when unset
VEC_EXTENSION_PATH = os.getenv("VEC_EXTENSION_PATH") or None

# Embedding configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "none")  # none|hash|sentence-transformers
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "all-MiniLM-L6-v2")
EMBED_DIMENSION = int(os.getenv("EMBED_DIMENSION", "384"))

# Extra neighbours fetched per requested result when a search has a post-filter
SEARCH_FILTER_OVERFETCH = int(os.getenv("SEARCH_FILTER_OVERFETCH", "2"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

VERSION = "0.1.0"

VALID_EMBED_PROVIDERS = ["none", "hash", "sentence-transformers"]


def get_embedding_generator():
    """Get configured embedding generator. Returns None when EMBED_PROVIDER is 'none'."""
    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()

    if provider == "hash":
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=int(os.getenv("EMBED_DIMENSION", str(EMBED_DIMENSION))))
    elif provider == "sentence-transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME))
    return None


def get_collection(name: str, record_type: type, key_type: Optional[type] = None, db_path: Optional[str] = None):
    """Build a collection wired to the configured database and embedding generator."""
    from .collection import SqliteVecCollection
    return SqliteVecCollection(
        name,
        record_type,
        db_path=db_path or os.getenv("DB_PATH", DB_PATH),
        embedding_generator=get_embedding_generator(),
        key_type=key_type,
    )


def debug_enabled():
    """Check if debug mode is enabled. Debug mode logs at DEBUG regardless of LOG_LEVEL."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: Optional[str] = None):
    """Ensure the database directory exists."""
    path = db_path or DB_PATH
    if path == ":memory:" or path.startswith("file:"):
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def validate_config() -> List[str]:
    """Validate configuration and return any issues."""
    issues = []

    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()
    if provider not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {provider}")

    if int(os.getenv("EMBED_DIMENSION", str(EMBED_DIMENSION))) < 1:
        issues.append("EMBED_DIMENSION must be >= 1")

    if int(os.getenv("SEARCH_FILTER_OVERFETCH", str(SEARCH_FILTER_OVERFETCH))) < 0:
        issues.append("SEARCH_FILTER_OVERFETCH must be >= 0")

    extension_path = os.getenv("VEC_EXTENSION_PATH")
    # Bare names such as "vec0" are resolved by SQLite's own loader search
    if extension_path and os.sep in extension_path and not Path(extension_path).exists():
        issues.append(f"VEC_EXTENSION_PATH does not exist: {extension_path}")

    return issues
