"""Unit tests for the chunker module."""

import pytest

from pdf_rag_agent.ingestion.chunker import Chunker


def _numbered_words(n: int) -> str:
    return " ".join(f"w{i:03d}" for i in range(n))


def test_short_text_is_a_single_unchanged_chunk() -> None:
    text = "  The invoice total is $450.\n"
    assert Chunker().split(text) == [text]


def test_text_exactly_at_limit_is_one_chunk() -> None:
    text = "a" * 1000
    assert Chunker(chunk_size=1000, chunk_overlap=200).split(text) == [text]


def test_long_text_respects_max_length() -> None:
    """A document longer than chunk_size should be split within the limit."""
    chunks = Chunker(chunk_size=256, chunk_overlap=32).split("word " * 500)
    assert len(chunks) > 1
    assert all(len(c) <= 256 for c in chunks)


def test_consecutive_chunks_overlap() -> None:
    chunks = Chunker(chunk_size=100, chunk_overlap=20).split(_numbered_words(600))
    assert len(chunks) > 2
    for prev, nxt in zip(chunks, chunks[1:]):
        # the next chunk opens with words re-included from the previous tail
        assert nxt.split()[0] in prev.split()[-5:], (prev, nxt)


def test_prefers_paragraph_boundaries() -> None:
    first = ("Alpha sentence number one. " * 22).strip()
    second = ("Beta sentence number two. " * 22).strip()
    chunks = Chunker(chunk_size=1000, chunk_overlap=200).split(f"{first}\n\n{second}")
    assert chunks == [first, second]


def test_falls_back_to_sentence_boundaries() -> None:
    text = " ".join(f"Sentence number {i} ends here." for i in range(80))
    chunks = Chunker(chunk_size=300, chunk_overlap=60).split(text)
    assert len(chunks) > 1
    assert all(len(c) <= 300 for c in chunks)
    assert all(c.endswith(".") for c in chunks)


def test_falls_back_to_characters_without_separators() -> None:
    chunks = Chunker(chunk_size=1000, chunk_overlap=200).split("x" * 2500)
    assert len(chunks) >= 3
    assert all(len(c) <= 1000 for c in chunks)


def test_split_is_deterministic() -> None:
    chunker = Chunker(chunk_size=120, chunk_overlap=30)
    text = _numbered_words(400)
    assert chunker.split(text) == chunker.split(text)


@pytest.mark.parametrize("text", ["", "   ", "\n\n\t"])
def test_empty_text_is_rejected(text: str) -> None:
    with pytest.raises(ValueError, match="empty"):
        Chunker().split(text)


@pytest.mark.parametrize(("size", "overlap"), [(0, 0), (100, 100), (100, -1)])
def test_invalid_configuration(size: int, overlap: int) -> None:
    with pytest.raises(ValueError):
        Chunker(chunk_size=size, chunk_overlap=overlap)
