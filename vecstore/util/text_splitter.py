"""
Word-based text chunking for feeding documents into a collection.
"""

from typing import Iterable, List, Union


def split_paragraphs(texts: Union[str, Iterable[str]], max_words_per_chunk: int) -> List[str]:
    """
    Join the inputs with spaces and split them into chunks of at most
    max_words_per_chunk words. Whitespace runs collapse to single spaces.

    Args:
        texts: Text segments to combine (a single string is one segment)
        max_words_per_chunk: Maximum number of words per chunk

    Returns:
        List of chunks; empty when the inputs hold no words

    Raises:
        TypeError: If texts is None
        ValueError: If max_words_per_chunk < 1
    """
    if texts is None:
        raise TypeError("texts cannot be None")
    if max_words_per_chunk < 1:
        raise ValueError("max_words_per_chunk must be at least 1")

    if isinstance(texts, str):
        texts = [texts]

    words = " ".join(t for t in texts if t).split()
    return [
        " ".join(words[i:i + max_words_per_chunk])
        for i in range(0, len(words), max_words_per_chunk)
    ]
