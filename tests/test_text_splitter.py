"""
Text splitter tests - word-based chunking.
"""

import pytest

from vecstore.util.text_splitter import split_paragraphs


def test_normal_splitting():
    assert split_paragraphs(["one two three four five six"], 3) == ["one two three", "four five six"]


def test_empty_input_returns_empty_list():
    assert split_paragraphs([""], 5) == []
    assert split_paragraphs(["   ", "\n\t"], 5) == []
    assert split_paragraphs([], 5) == []


def test_single_word():
    assert split_paragraphs(["hello"], 10) == ["hello"]


def test_exact_boundary():
    assert split_paragraphs(["a b c"], 3) == ["a b c"]


def test_boundary_plus_one():
    assert split_paragraphs(["a b c d"], 3) == ["a b c", "d"]


def test_multiple_inputs_combined():
    assert split_paragraphs(["hello world", "foo bar"], 2) == ["hello world", "foo bar"]


def test_whitespace_normalized():
    assert split_paragraphs(["  alpha\tbeta\n\ngamma  "], 2) == ["alpha beta", "gamma"]


def test_bare_string_is_one_text():
    assert split_paragraphs("a b c d e", 2) == ["a b", "c d", "e"]


def test_none_input_rejected():
    with pytest.raises(TypeError):
        split_paragraphs(None, 5)


@pytest.mark.parametrize("size", [0, -1])
def test_invalid_chunk_size_rejected(size):
    with pytest.raises(ValueError):
        split_paragraphs(["a b"], size)


@pytest.mark.parametrize("texts,size", [
    (["the quick brown fox jumps over the lazy dog"], 1),
    (["the quick brown fox jumps over the lazy dog"], 4),
    (["lorem ipsum", "  dolor   sit amet ", "", "consectetur"], 2),
    (["x " * 25], 7),
])
def test_chunks_rejoin_to_normalized_text(texts, size):
    """Every chunk but the last has exactly size words; rejoining restores the words."""
    chunks = split_paragraphs(texts, size)
    words = " ".join(texts).split()

    assert " ".join(chunks) == " ".join(words)
    assert all(len(c.split()) == size for c in chunks[:-1])
    assert 1 <= len(chunks[-1].split()) <= size


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
