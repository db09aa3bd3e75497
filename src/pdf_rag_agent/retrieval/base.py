"""Abstract base class for vector-store backends.

Adding a new backend (pgvector, Qdrant …) only requires subclassing
:class:`VectorStoreBase` and implementing the abstract methods.  The rest
of the retrieval stack is backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pdf_rag_agent.retrieval.models import Chunk, DocumentInfo, MetadataFilter, SearchHit


class VectorStoreBase(ABC):
    """Backend-agnostic, append-only vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / table / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    @abstractmethod
    async def add(self, chunks: list[Chunk], embeddings: list[list[float]]) -> None:
        """Store *chunks* with their precomputed *embeddings* (same order)."""
        ...

    @abstractmethod
    async def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        where: MetadataFilter | None = None,
    ) -> list[SearchHit]:
        """Return the *k* nearest chunks by cosine distance, closest first.

        When *where* is given only chunks whose metadata satisfies the
        equality predicate are candidates.  No match yields ``[]``.
        """
        ...

    @abstractmethod
    async def list_documents(self) -> list[DocumentInfo]:
        """One entry per distinct ``document_id``, newest upload first."""
        ...

    @abstractmethod
    async def get_first_chunk(self, document_id: str) -> Chunk | None:
        """Return the first stored chunk of a document, or ``None``."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
