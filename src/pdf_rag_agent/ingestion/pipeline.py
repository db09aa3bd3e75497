"""Ingestion pipeline — extracted text → chunks → embeddings → vector index."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel

from pdf_rag_agent.errors import EmptyDocumentError, FileTooLargeError, IngestionError
from pdf_rag_agent.ingestion.chunker import Chunker
from pdf_rag_agent.retrieval.models import Chunk, ChunkMetadata

if TYPE_CHECKING:
    from pdf_rag_agent.retrieval.index import VectorIndex

logger = logging.getLogger(__name__)


class IngestionSummary(BaseModel):
    """Outcome of one successful ingestion."""

    document_id: str
    chunks_created: int
    filename: str


# Store failures worth another attempt: dropped or refused connections.
TRANSIENT_STORE_ERRORS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    httpx.TransportError,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IngestionPipeline:
    """One-shot pipeline run once per uploaded document.

    Parameters
    ----------
    index:
        Destination vector index.
    chunker:
        Splitter used on the extracted text (defaults to 1000/200).
    max_file_size:
        Uploads larger than this many bytes are rejected.
    max_attempts:
        Tries per chunk batch when the store connection drops.
    retry_delay:
        Base backoff in seconds; the n-th retry waits ``n * retry_delay``.
    clock:
        Source of the upload timestamp; injectable for tests.
    sleep:
        Awaitable sleep used between retries; injectable for tests.
    """

    def __init__(
        self,
        index: VectorIndex,
        chunker: Chunker | None = None,
        *,
        max_file_size: int = 10 * 1024 * 1024,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        clock: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._index = index
        self._chunker = chunker or Chunker()
        self.max_file_size = max_file_size
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._clock = clock
        self._sleep = sleep

    def check_file_size(self, file_size: int) -> None:
        if file_size > self.max_file_size:
            raise FileTooLargeError(
                f"File too large: {file_size} bytes exceeds the {self.max_file_size} byte limit"
            )

    async def ingest(
        self,
        document_id: str,
        filename: str,
        file_size: int,
        text: str,
    ) -> IngestionSummary:
        """Chunk, embed and store *text* under *document_id*.

        Raises
        ------
        IngestionError
            On empty text, an oversized file, or any embedding / store
            failure.  Nothing is reported as success unless every chunk
            was written.
        """
        self.check_file_size(file_size)
        if not text or not text.strip():
            raise EmptyDocumentError("PDF contains no readable text")

        upload_date = self._clock().isoformat()
        chunks = [
            Chunk(
                id=Chunk.make_id(document_id, i),
                content=content,
                metadata=ChunkMetadata(
                    document_id=document_id,
                    filename=filename,
                    file_size=file_size,
                    upload_date=upload_date,
                    chunk_index=i,
                ),
            )
            for i, content in enumerate(self._chunker.split(text))
        ]

        try:
            await self._insert_with_retry(chunks)
        except Exception as exc:
            logger.exception("Failed to index document %s (%s)", document_id, filename)
            raise IngestionError(f"Failed to store document chunks: {exc}") from exc

        logger.info("Ingested %s as %s: %d chunk(s)", filename, document_id, len(chunks))
        return IngestionSummary(
            document_id=document_id,
            chunks_created=len(chunks),
            filename=filename,
        )

    async def _insert_with_retry(self, chunks: list[Chunk]) -> None:
        """Insert *chunks*, retrying dropped connections with linear backoff."""
        attempt = 1
        while True:
            try:
                await self._index.insert(chunks)
                return
            except TRANSIENT_STORE_ERRORS as exc:
                if attempt >= self.max_attempts:
                    raise
                delay = self.retry_delay * attempt
                logger.warning(
                    "Store write failed (attempt %d/%d): %s; retrying in %.1fs",
                    attempt,
                    self.max_attempts,
                    exc,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1
