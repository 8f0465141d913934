#!/usr/bin/env python3
"""
Sample: chunk a small document, store the chunks with text-embedded vectors,
then run vector search and filtered retrieval against the collection.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from vecstore import SqliteVecCollection, VectorStoreData, VectorStoreKey, VectorStoreVector
from vecstore.util.text_splitter import split_paragraphs
from vecstore.vector.embeddings import DeterministicHashEmbedding

DOCUMENT = [
    "Vector databases are specialized systems designed to store and query high-dimensional vector embeddings efficiently.",
    "They enable similarity search by finding the nearest neighbors in a vector space.",
    "Common use cases include recommendation systems, semantic search, and retrieval-augmented generation.",
    "sqlite-vec is a lightweight SQLite extension that adds vector search capabilities to any SQLite database.",
]

DIMENSIONS = 64


@dataclass
class DocumentChunk:
    id: Annotated[str, VectorStoreKey()]
    source: Annotated[str, VectorStoreData(is_indexed=True)]
    position: Annotated[int, VectorStoreData()]
    content: Annotated[str, VectorStoreData()]
    text: Annotated[Optional[str], VectorStoreVector(DIMENSIONS)] = None


def main():
    parser = argparse.ArgumentParser(description="vecstore sample")
    parser.add_argument("--db", default="./data/sample.db", help="SQLite database path")
    parser.add_argument("--words", type=int, default=15, help="Words per chunk")
    parser.add_argument("--query", default="vector similarity search", help="Search text")
    parser.add_argument("--keep", action="store_true", help="Keep the collection afterwards")
    args = parser.parse_args()

    chunks = split_paragraphs(DOCUMENT, args.words)
    print(f"Split document into {len(chunks)} chunks")

    collection = SqliteVecCollection(
        "documents", DocumentChunk, db_path=args.db,
        embedding_generator=DeterministicHashEmbedding(dimension=DIMENSIONS)
    )
    collection.ensure_collection_exists()

    collection.upsert_batch(
        DocumentChunk(id=f"doc-{i}", source="vector-db-intro.md", position=i, content=chunk, text=chunk)
        for i, chunk in enumerate(chunks)
    )
    print(f"Upserted {len(chunks)} chunks")

    print(f"\nSearching for '{args.query}':")
    for result in collection.search(args.query, top=3):
        print(f"  Score={result.score:.4f} | {result.record.content[:80]}")

    print("\nChunks after position 1:")
    for chunk in collection.get_where(lambda c: c.position > 1, top=10):
        print(f"  [{chunk.id}] {chunk.content[:80]}")

    if not args.keep:
        collection.ensure_collection_deleted()
        print("\nCollection deleted.")


if __name__ == "__main__":
    main()
