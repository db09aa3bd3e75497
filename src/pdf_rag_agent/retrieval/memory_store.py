"""In-memory vector store for development and tests."""

from __future__ import annotations

import numpy as np

from pdf_rag_agent.retrieval.base import VectorStoreBase
from pdf_rag_agent.retrieval.models import (
    Chunk,
    DocumentInfo,
    MetadataFilter,
    SearchHit,
    sort_documents,
)


class InMemoryVectorStore(VectorStoreBase):
    """Implements the same contract as the Chroma backend without a server.

    Rows are kept in insertion order, which also breaks distance ties.
    """

    def __init__(self, collection_name: str = "in-memory") -> None:
        super().__init__(collection_name)
        self._chunks: list[Chunk] = []
        self._vectors: list[np.ndarray] = []

    def __len__(self) -> int:
        return len(self._chunks)

    async def add(self, chunks: list[Chunk], embeddings: list[list[float]]) -> None:
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"got {len(chunks)} chunks but {len(embeddings)} embeddings"
            )
        for chunk, embedding in zip(chunks, embeddings):
            self._chunks.append(chunk)
            self._vectors.append(np.asarray(embedding, dtype=float))

    async def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        where: MetadataFilter | None = None,
    ) -> list[SearchHit]:
        query = np.asarray(query_embedding, dtype=float)
        scored: list[tuple[float, int]] = []
        for position, chunk in enumerate(self._chunks):
            if where is not None and not where.matches(chunk.metadata.model_dump()):
                continue
            scored.append((_cosine_distance(query, self._vectors[position]), position))

        # sorted() is stable, so equal distances keep insertion order
        scored.sort(key=lambda item: item[0])
        return [
            SearchHit(chunk=self._chunks[position], distance=distance)
            for distance, position in scored[:k]
        ]

    async def list_documents(self) -> list[DocumentInfo]:
        seen: dict[str, DocumentInfo] = {}
        for chunk in self._chunks:
            doc_id = chunk.metadata.document_id
            if doc_id not in seen:
                seen[doc_id] = DocumentInfo.from_metadata(chunk.metadata)
        return sort_documents(list(seen.values()))

    async def get_first_chunk(self, document_id: str) -> Chunk | None:
        for chunk in self._chunks:
            if chunk.metadata.document_id == document_id:
                return chunk
        return None

    async def health_check(self) -> bool:
        return True


def _cosine_distance(a: np.ndarray, b: np.ndarray) -> float:
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return 1.0
    return 1.0 - float(np.dot(a, b)) / norm
