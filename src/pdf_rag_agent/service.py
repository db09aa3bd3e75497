"""Service facade — the operations the HTTP layer calls.

:class:`RagService` owns one vector index, one ingestion pipeline and one
conversation agent.  :meth:`RagService.from_settings` wires the production
stack; tests construct it from in-memory parts.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from pdf_rag_agent.agent.runner import ConversationAgent
from pdf_rag_agent.agent.tools import RetrievalTools
from pdf_rag_agent.config import Settings, settings
from pdf_rag_agent.errors import IngestionError
from pdf_rag_agent.ingestion.chunker import Chunker
from pdf_rag_agent.ingestion.loader import extract_pdf_text
from pdf_rag_agent.ingestion.pipeline import IngestionPipeline, IngestionSummary
from pdf_rag_agent.memory import ConversationMemory, create_memory
from pdf_rag_agent.retrieval.index import VectorIndex

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_core.language_models import BaseChatModel

    from pdf_rag_agent.retrieval.base import VectorStoreBase
    from pdf_rag_agent.retrieval.models import Chunk, DocumentInfo

logger = logging.getLogger(__name__)


class RagService:
    """Ingest documents, list them, and chat about them."""

    def __init__(
        self,
        store: VectorStoreBase,
        embeddings: Embeddings,
        model: BaseChatModel,
        memory: ConversationMemory,
        *,
        config: Settings = settings,
    ) -> None:
        self.index = VectorIndex(store, embeddings)
        self.pipeline = IngestionPipeline(
            self.index,
            Chunker(config.chunk_size, config.chunk_overlap),
            max_file_size=config.max_upload_bytes,
            max_attempts=config.store_max_attempts,
            retry_delay=config.store_retry_delay,
        )
        self.upload_dir = Path(config.upload_dir)
        self.tools = RetrievalTools(
            self.index,
            retrieve_k=config.retrieve_k,
            discovery_k=config.discovery_k,
            discovery_max_documents=config.discovery_max_documents,
        )
        self.agent = ConversationAgent(
            model, self.tools, memory, max_tool_rounds=config.max_tool_rounds
        )

    @classmethod
    def from_settings(cls, config: Settings = settings) -> RagService:
        """Production wiring: Chroma, HuggingFace embeddings, ChatOpenAI."""
        from pdf_rag_agent.agent.llm import get_llm
        from pdf_rag_agent.ingestion.embedder import get_embedding_function
        from pdf_rag_agent.retrieval.chroma_store import ChromaVectorStore

        store = ChromaVectorStore(
            config.chroma_collection, host=config.chroma_host, port=config.chroma_port
        )
        return cls(
            store,
            get_embedding_function(config.embedding_model),
            get_llm(),
            create_memory(config.memory_backend, config.memory_dir),
            config=config,
        )

    async def ingest(
        self, document_id: str, filename: str, file_size: int, text: str
    ) -> IngestionSummary:
        return await self.pipeline.ingest(document_id, filename, file_size, text)

    async def ingest_pdf(self, filename: str, data: bytes) -> IngestionSummary:
        """Extract text from PDF bytes, keep the raw file, and ingest it under a fresh id."""
        self.pipeline.check_file_size(len(data))
        text = extract_pdf_text(data)
        document_id = str(uuid.uuid4())
        logger.info("Processing PDF %s (%d bytes) as %s", filename, len(data), document_id)
        self.save_upload(filename, data)
        return await self.ingest(document_id, filename, len(data), text)

    def save_upload(self, filename: str, data: bytes) -> Path:
        """Write the raw upload to ``upload_dir`` as ``<epoch-ms>-<filename>``.

        Only the base name of *filename* is kept, so a client-supplied path
        cannot leave ``upload_dir``.
        """
        name = Path(filename).name or "upload.pdf"
        path = self.upload_dir / f"{time.time_ns() // 1_000_000}-{name}"
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise IngestionError(f"Failed to save upload: {exc}") from exc
        logger.debug("Saved upload %s to %s", filename, path)
        return path

    async def run_turn(self, thread_id: str, document_id: str, user_text: str) -> str:
        return await self.agent.run_turn(thread_id, document_id, user_text)

    async def list_documents(self) -> list[DocumentInfo]:
        return await self.index.list_documents()

    async def get_document(self, document_id: str) -> Chunk:
        return await self.index.get_document(document_id)

    async def health_check(self) -> bool:
        return await self.index.health_check()
