"""Domain models for indexed chunks, search hits and document listings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class MetadataFilter(BaseModel):
    """Equality predicate on a chunk metadata field.

    Attributes
    ----------
    field:
        The metadata key to filter on (e.g. ``"document_id"``).
    value:
        The value the field must equal exactly.
    """

    field: str
    value: Any

    @classmethod
    def equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, value=value)

    @classmethod
    def document(cls, document_id: str) -> MetadataFilter:
        """Restrict a search to the chunks of one document."""
        return cls(field="document_id", value=document_id)

    def matches(self, metadata: dict[str, Any]) -> bool:
        return metadata.get(self.field) == self.value


class ChunkMetadata(BaseModel):
    """Metadata stored alongside every chunk.

    Attributes
    ----------
    document_id:
        Identifier of the document the chunk was cut from.
    filename:
        Original upload file name.
    file_size:
        Upload size in bytes.
    upload_date:
        ISO-8601 UTC timestamp shared by every chunk of one upload.
    file_type:
        Content type of the source document.
    chunk_index:
        Ordinal position of the chunk within its document.
    """

    document_id: str
    filename: str
    file_size: int
    upload_date: str
    file_type: str = "pdf"
    chunk_index: int = 0


class Chunk(BaseModel):
    """A bounded-length text segment of one document."""

    id: str
    content: str
    metadata: ChunkMetadata

    @classmethod
    def make_id(cls, document_id: str, chunk_index: int) -> str:
        return f"{document_id}_{chunk_index}"


class SearchHit(BaseModel):
    """A chunk returned by a similarity search with its cosine distance."""

    chunk: Chunk
    distance: float

    @property
    def score(self) -> float:
        """Cosine similarity (``1 - distance``)."""
        return 1.0 - self.distance

    @property
    def document_id(self) -> str:
        return self.chunk.metadata.document_id

    def __str__(self) -> str:  # noqa: D105
        return f"[{self.chunk.id} d={self.distance:.3f}] {self.chunk.content[:120]}…"


class DocumentInfo(BaseModel):
    """One row of the document listing."""

    document_id: str
    filename: str
    file_size: int
    upload_date: str

    @classmethod
    def from_metadata(cls, metadata: ChunkMetadata) -> DocumentInfo:
        return cls(
            document_id=metadata.document_id,
            filename=metadata.filename,
            file_size=metadata.file_size,
            upload_date=metadata.upload_date,
        )


def sort_documents(documents: list[DocumentInfo]) -> list[DocumentInfo]:
    """Order documents newest first; ``document_id`` breaks ties."""
    return sorted(documents, key=lambda d: (d.upload_date, d.document_id), reverse=True)
