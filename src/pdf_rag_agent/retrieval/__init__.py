"""
Retrieval — vector index, storage backends, and result models.

This module wraps the vector store behind a clean interface so that
the agent layer never needs to know which DB is backing retrieval.

Public surface
--------------
- :class:`VectorIndex` — embeds, inserts and searches chunks.
- :class:`VectorStoreBase` — abstract backend (subclass for pgvector, etc.).
- :class:`InMemoryVectorStore` — numpy-backed store for development and tests.
- :class:`ChromaVectorStore` — default production backend.
- :class:`Chunk`, :class:`ChunkMetadata`, :class:`SearchHit`,
  :class:`DocumentInfo`, :class:`MetadataFilter` — data models.
"""

from pdf_rag_agent.retrieval.base import VectorStoreBase
from pdf_rag_agent.retrieval.index import VectorIndex
from pdf_rag_agent.retrieval.memory_store import InMemoryVectorStore
from pdf_rag_agent.retrieval.models import (
    Chunk,
    ChunkMetadata,
    DocumentInfo,
    MetadataFilter,
    SearchHit,
)

__all__ = [
    "Chunk",
    "ChunkMetadata",
    "ChromaVectorStore",
    "DocumentInfo",
    "InMemoryVectorStore",
    "MetadataFilter",
    "SearchHit",
    "VectorIndex",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from pdf_rag_agent.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
