"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from typing import Any

import chromadb

from pdf_rag_agent.config import settings
from pdf_rag_agent.retrieval.base import VectorStoreBase
from pdf_rag_agent.retrieval.models import (
    Chunk,
    ChunkMetadata,
    DocumentInfo,
    MetadataFilter,
    SearchHit,
    sort_documents,
)

logger = logging.getLogger(__name__)


def _build_chroma_where(where: MetadataFilter | None) -> dict[str, Any] | None:
    """Convert a :class:`MetadataFilter` to Chroma ``where`` syntax."""
    if where is None:
        return None
    return {where.field: {"$eq": where.value}}


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store using the async HTTP client.

    The collection is created with cosine space so the distances Chroma
    returns are cosine distances.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
    ) -> None:
        super().__init__(collection_name)
        self._host = host
        self._port = port
        self._client: Any = None
        self._collection: Any = None

    async def _get_collection(self) -> Any:
        if self._collection is None:
            self._client = await chromadb.AsyncHttpClient(host=self._host, port=self._port)
            self._collection = await self._client.get_or_create_collection(
                self.collection_name,
                metadata={"hnsw:space": "cosine"},
            )
            logger.info(
                "Connected to Chroma collection %r at %s:%d",
                self.collection_name,
                self._host,
                self._port,
            )
        return self._collection

    # -- VectorStoreBase overrides --------------------------------------------

    async def add(self, chunks: list[Chunk], embeddings: list[list[float]]) -> None:
        if not chunks:
            return
        collection = await self._get_collection()
        await collection.add(
            ids=[c.id for c in chunks],
            embeddings=embeddings,
            documents=[c.content for c in chunks],
            metadatas=[c.metadata.model_dump() for c in chunks],
        )

    async def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        where: MetadataFilter | None = None,
    ) -> list[SearchHit]:
        collection = await self._get_collection()
        if await collection.count() == 0:
            return []

        results = await collection.query(
            query_embeddings=[query_embedding],
            n_results=k,
            where=_build_chroma_where(where),
            include=["documents", "metadatas", "distances"],
        )

        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        return [
            SearchHit(
                chunk=Chunk(id=chunk_id, content=content or "", metadata=ChunkMetadata(**meta)),
                distance=dist,
            )
            for chunk_id, content, meta, dist in zip(ids, docs, metas, distances)
        ]

    async def list_documents(self) -> list[DocumentInfo]:
        collection = await self._get_collection()
        results = await collection.get(include=["metadatas"])
        seen: dict[str, DocumentInfo] = {}
        for meta in results.get("metadatas") or []:
            if not meta or "document_id" not in meta:
                continue
            if meta["document_id"] not in seen:
                seen[meta["document_id"]] = DocumentInfo.from_metadata(ChunkMetadata(**meta))
        return sort_documents(list(seen.values()))

    async def get_first_chunk(self, document_id: str) -> Chunk | None:
        collection = await self._get_collection()
        results = await collection.get(
            where=_build_chroma_where(MetadataFilter.document(document_id)),
            include=["documents", "metadatas"],
        )
        rows = zip(
            results.get("ids") or [],
            results.get("documents") or [],
            results.get("metadatas") or [],
        )
        chunks = [
            Chunk(id=chunk_id, content=content or "", metadata=ChunkMetadata(**meta))
            for chunk_id, content, meta in rows
        ]
        if not chunks:
            return None
        return min(chunks, key=lambda c: c.metadata.chunk_index)

    async def health_check(self) -> bool:
        try:
            await self._get_collection()
            await self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
