"""Text chunking — recursive, boundary-preferring split with overlap."""

from __future__ import annotations

import logging

from langchain_text_splitters import RecursiveCharacterTextSplitter

logger = logging.getLogger(__name__)

# Split boundaries in priority order: paragraph, line, sentence, word, char.
DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", " ", "")


class Chunker:
    """Split extracted document text into overlapping segments.

    The splitter first cuts at paragraph boundaries and recursively
    re-splits any piece that is still too long at the next boundary in
    :data:`DEFAULT_SEPARATORS`.  Pieces are then merged back up to
    ``chunk_size`` characters, re-including up to ``chunk_overlap``
    trailing characters of one segment at the head of the next.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, {chunk_size}), got {chunk_overlap}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
            separators=list(DEFAULT_SEPARATORS),
            keep_separator="end",
        )

    def split(self, text: str) -> list[str]:
        """Return the ordered chunks of *text*.

        Raises
        ------
        ValueError
            If *text* is empty or whitespace-only.
        """
        if not text or not text.strip():
            raise ValueError("cannot chunk empty text")

        if len(text) <= self.chunk_size:
            return [text]

        chunks = self._splitter.split_text(text)
        logger.debug(
            "Split %d chars into %d chunks (size=%d, overlap=%d)",
            len(text),
            len(chunks),
            self.chunk_size,
            self.chunk_overlap,
        )
        return chunks
