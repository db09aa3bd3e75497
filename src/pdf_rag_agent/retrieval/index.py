"""Vector index — embeds chunks and queries, delegates storage to a backend.

This module is the **primary public interface** for retrieval.  Callers
never talk to a :class:`VectorStoreBase` directly, so swapping Chroma for
another backend only touches :meth:`VectorIndex.__init__` call sites.

Usage::

    index = VectorIndex(ChromaVectorStore(), get_embedding_function())
    hits = await index.search("invoice total", k=3,
                              where=MetadataFilter.document("d1"))
    for hit in hits:
        print(hit.distance, hit.chunk.content[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pdf_rag_agent.errors import NotFoundError, RetrievalError
from pdf_rag_agent.retrieval.models import Chunk, DocumentInfo, MetadataFilter, SearchHit

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from pdf_rag_agent.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class VectorIndex:
    """Similarity search over stored chunks, optionally scoped by metadata.

    Parameters
    ----------
    store:
        A concrete vector-store backend.
    embeddings:
        The embedding gateway used for both chunks and queries.
    """

    def __init__(self, store: VectorStoreBase, embeddings: Embeddings) -> None:
        self._store = store
        self._embeddings = embeddings

    @property
    def store(self) -> VectorStoreBase:
        return self._store

    async def insert(self, chunks: list[Chunk]) -> None:
        """Embed and append *chunks*.

        No content-based deduplication happens here: ingesting the same
        text twice under two document ids stores two chunk sets.
        Embedding and store errors propagate unchanged.
        """
        if not chunks:
            return
        vectors = await self._embeddings.aembed_documents([c.content for c in chunks])
        await self._store.add(chunks, vectors)
        logger.info(
            "Inserted %d chunk(s) for document %s",
            len(chunks),
            chunks[0].metadata.document_id,
        )

    async def search(
        self,
        query: str,
        *,
        k: int = 5,
        where: MetadataFilter | None = None,
    ) -> list[SearchHit]:
        """Return the *k* chunks nearest to *query*, closest first.

        Raises
        ------
        RetrievalError
            If the embedding gateway fails on the query.
        """
        try:
            query_vector = await self._embeddings.aembed_query(query)
        except Exception as exc:
            raise RetrievalError(f"failed to embed query: {exc}") from exc

        hits = await self._store.similarity_search(query_vector, k=k, where=where)
        logger.debug("search(%r, k=%d, where=%s) -> %d hit(s)", query, k, where, len(hits))
        return hits

    async def list_documents(self) -> list[DocumentInfo]:
        return await self._store.list_documents()

    async def get_document(self, document_id: str) -> Chunk:
        """Return the first chunk of *document_id*.

        Raises
        ------
        NotFoundError
            If no chunk carries that document id.
        """
        chunk = await self._store.get_first_chunk(document_id)
        if chunk is None:
            raise NotFoundError(f"Document not found: {document_id}")
        return chunk

    async def health_check(self) -> bool:
        return await self._store.health_check()
