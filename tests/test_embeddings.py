"""
Embedding generator tests.
"""

import pytest
from vecstore.vector.embeddings import IEmbeddingGenerator, DeterministicHashEmbedding, SentenceTransformerEmbedding


def test_embedding_interface():
    """Test that the embedding generator implements the interface correctly."""
    embedder = DeterministicHashEmbedding(dimension=384)

    assert isinstance(embedder, IEmbeddingGenerator)
    assert embedder.get_dimension() == 384


def test_deterministic_embedding():
    """Test that the same input always produces the same output."""
    embedder = DeterministicHashEmbedding(dimension=384)

    text = "Hello, world!"
    vector1 = embedder.embed_text(text)
    vector2 = embedder.embed_text(text)

    assert vector1 == vector2
    assert len(vector1) == 384


def test_different_inputs_produce_different_vectors():
    """Test that different inputs produce different vectors."""
    embedder = DeterministicHashEmbedding(dimension=384)

    vector1 = embedder.embed_text("Hello, world!")
    vector2 = embedder.embed_text("Goodbye, world!")

    assert vector1 != vector2


def test_consistent_output_across_instances():
    """Test that separate instances agree on the same input."""
    embedder1 = DeterministicHashEmbedding(dimension=64)
    embedder2 = DeterministicHashEmbedding(dimension=64)

    assert embedder1.embed_text("This is a test string") == embedder2.embed_text("This is a test string")


def test_values_in_range():
    vector = DeterministicHashEmbedding(dimension=100).embed_text("range check")

    assert all(-1.0 <= v <= 1.0 for v in vector)
    # Chained digests keep filling past the first hash
    assert len(set(vector)) > 8


@pytest.mark.parametrize("dimension", [4, 64, 512])
def test_embedding_with_different_dimensions(dimension):
    """Test embedding with different dimension sizes."""
    assert len(DeterministicHashEmbedding(dimension=dimension).embed_text("test")) == dimension


def test_generate_batch_preserves_order():
    embedder = DeterministicHashEmbedding(dimension=16)
    texts = ["alpha", "beta", "gamma"]

    vectors = embedder.generate(texts)

    assert len(vectors) == 3
    assert vectors == [embedder.embed_text(t) for t in texts]
    assert embedder.generate([]) == []


def test_embedding_edge_cases():
    """Test embedding with edge cases."""
    embedder = DeterministicHashEmbedding(dimension=384)

    assert len(embedder.embed_text("")) == 384
    assert len(embedder.embed_text("A" * 1000)) == 384
    assert len(embedder.embed_text("Hello\n\t\rWorld!@#$%^&*()")) == 384


def test_sentence_transformer_loads_lazily():
    """Constructing the generator must not load a model."""
    embedder = SentenceTransformerEmbedding("some-model")

    assert isinstance(embedder, IEmbeddingGenerator)
    assert embedder.model_name == "some-model"
    assert embedder._model is None
    assert embedder.generate([]) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
