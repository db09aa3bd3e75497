"""Retrieval tools exposed to the agent.

The agent can call exactly two tools, each with a validated argument
model:

* ``retrieve`` (:class:`ScopedRetrieval`) — passages from one document.
* ``find_similar_documents`` (:class:`Discovery`) — ids of the documents
  most related to a query across the whole corpus.

Tool calls coming back from the model are parsed into one of these
variants by :meth:`RetrievalTools.parse_request` before anything runs.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Union

from langchain_core.tools import BaseTool, StructuredTool
from pydantic import BaseModel, Field, ValidationError

from pdf_rag_agent.errors import AgentError
from pdf_rag_agent.retrieval.models import MetadataFilter

if TYPE_CHECKING:
    from pdf_rag_agent.retrieval.index import VectorIndex

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    RETRIEVE = "retrieve"
    FIND_SIMILAR_DOCUMENTS = "find_similar_documents"


class ScopedRetrieval(BaseModel):
    """Arguments of the ``retrieve`` tool."""

    query: str = Field(description="The user's question or search query")
    document_id: str = Field(
        description="The document ID extracted from the user message (format: Document ID: xxx)"
    )


class Discovery(BaseModel):
    """Arguments of the ``find_similar_documents`` tool."""

    query: str = Field(description="The search query to find similar documents")


ToolRequest = Union[ScopedRetrieval, Discovery]

TOOL_ARGS: dict[ToolName, type[BaseModel]] = {
    ToolName.RETRIEVE: ScopedRetrieval,
    ToolName.FIND_SIMILAR_DOCUMENTS: Discovery,
}

RETRIEVE_DESCRIPTION = (
    "MANDATORY: Use this tool to retrieve relevant content from uploaded PDF "
    "documents. You MUST call this tool when users ask questions about document "
    "content. Extract the document_id from the user message."
)

FIND_SIMILAR_DESCRIPTION = (
    "Find the IDs of uploaded documents most similar to the query, across all "
    "documents. Returns one document ID per line."
)


class RetrievalTools:
    """Scoped retrieval and cross-document discovery over a :class:`VectorIndex`.

    Parameters
    ----------
    index:
        The vector index to search.
    retrieve_k:
        Number of chunks joined by :meth:`retrieve`.
    discovery_k:
        Number of chunks inspected by :meth:`find_similar_documents`.
    discovery_max_documents:
        Maximum number of document ids :meth:`find_similar_documents` returns.
    """

    def __init__(
        self,
        index: VectorIndex,
        *,
        retrieve_k: int = 3,
        discovery_k: int = 10,
        discovery_max_documents: int = 5,
    ) -> None:
        self._index = index
        self.retrieve_k = retrieve_k
        self.discovery_k = discovery_k
        self.discovery_max_documents = discovery_max_documents

    async def retrieve(self, query: str, document_id: str) -> str:
        """Return the top chunks of *document_id*, newline-joined in rank order.

        An empty string means the document has no indexed content matching
        the query; it is not an error.
        """
        hits = await self._index.search(
            query,
            k=self.retrieve_k,
            where=MetadataFilter.document(document_id),
        )
        logger.info("retrieve(%r, document_id=%s) found %d chunk(s)", query, document_id, len(hits))
        return "\n".join(hit.chunk.content for hit in hits)

    async def find_similar_documents(self, query: str) -> str:
        """Return up to ``discovery_max_documents`` unique document ids."""
        hits = await self._index.search(query, k=self.discovery_k)
        document_ids = list(dict.fromkeys(hit.document_id for hit in hits))
        document_ids = document_ids[: self.discovery_max_documents]
        logger.info("find_similar_documents(%r) -> %s", query, document_ids)
        return "\n".join(document_ids)

    # -- dispatch --------------------------------------------------------------

    def parse_request(self, name: str, args: dict) -> ToolRequest:
        """Validate a model tool call into a :data:`ToolRequest` variant.

        Raises
        ------
        AgentError
            For an unknown tool name or missing / ill-typed arguments.
        """
        try:
            tool_name = ToolName(name)
        except ValueError as exc:
            raise AgentError(f"Unknown tool {name!r}") from exc
        try:
            return TOOL_ARGS[tool_name].model_validate(args)
        except ValidationError as exc:
            raise AgentError(f"Invalid arguments for {name!r}: {exc}") from exc

    async def dispatch(self, request: ToolRequest) -> str:
        if isinstance(request, ScopedRetrieval):
            return await self.retrieve(request.query, request.document_id)
        if isinstance(request, Discovery):
            return await self.find_similar_documents(request.query)
        raise AgentError(f"Unsupported tool request: {type(request).__name__}")

    def as_tools(self) -> list[BaseTool]:
        """LangChain tools carrying name, description and args schema."""
        return [
            StructuredTool.from_function(
                coroutine=self.retrieve,
                name=ToolName.RETRIEVE.value,
                description=RETRIEVE_DESCRIPTION,
                args_schema=ScopedRetrieval,
            ),
            StructuredTool.from_function(
                coroutine=self.find_similar_documents,
                name=ToolName.FIND_SIMILAR_DOCUMENTS.value,
                description=FIND_SIMILAR_DESCRIPTION,
                args_schema=Discovery,
            ),
        ]
