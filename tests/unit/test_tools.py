"""Unit tests for the retrieval tools exposed to the agent."""

from __future__ import annotations

import pytest

from pdf_rag_agent.agent.tools import (
    Discovery,
    RetrievalTools,
    ScopedRetrieval,
    ToolName,
)
from pdf_rag_agent.errors import AgentError
from pdf_rag_agent.ingestion.pipeline import IngestionPipeline
from pdf_rag_agent.retrieval.index import VectorIndex
from pdf_rag_agent.retrieval.models import Chunk, ChunkMetadata


@pytest.fixture()
def tools(index: VectorIndex) -> RetrievalTools:
    return RetrievalTools(index)


async def _ingest(index: VectorIndex, document_id: str, text: str) -> None:
    await IngestionPipeline(index).ingest(document_id, f"{document_id}.pdf", len(text), text)


class TestScopedRetrieval:
    async def test_returns_text_from_the_document(self, index: VectorIndex, tools: RetrievalTools) -> None:
        await _ingest(index, "d1", "The invoice total is $450.")
        assert "$450" in await tools.retrieve("invoice total", "d1")

    async def test_unknown_document_returns_empty_string(self, tools: RetrievalTools) -> None:
        assert await tools.retrieve("invoice total", "missing") == ""

    async def test_joins_top_three_in_rank_order(self, index: VectorIndex) -> None:
        paragraphs = [f"Paragraph {i} mentions shipping terms number {i}." for i in range(6)]
        await index.insert(
            [
                Chunk(
                    id=Chunk.make_id("d1", i),
                    content=text,
                    metadata=ChunkMetadata(
                        document_id="d1",
                        filename="d1.pdf",
                        file_size=1,
                        upload_date="2024-01-01T00:00:00+00:00",
                        chunk_index=i,
                    ),
                )
                for i, text in enumerate(paragraphs)
            ]
        )
        tools = RetrievalTools(index)
        hits = await index.search("shipping terms", k=3)
        result = await tools.retrieve("shipping terms", "d1")
        assert result.split("\n") == [h.chunk.content for h in hits]
        assert len(result.split("\n")) == 3

    async def test_never_returns_other_documents(self, index: VectorIndex, tools: RetrievalTools) -> None:
        await _ingest(index, "d1", "The invoice total is $450.")
        await _ingest(index, "d2", "The invoice total is $990.")
        result = await tools.retrieve("invoice total", "d2")
        assert "$990" in result
        assert "$450" not in result


class TestDiscovery:
    async def test_unique_ids_capped_at_five(self, index: VectorIndex, tools: RetrievalTools) -> None:
        for i in range(8):
            await _ingest(index, f"doc{i}", f"Quarterly revenue report number {i}.")
        ids = (await tools.find_similar_documents("quarterly revenue")).split("\n")
        assert 0 < len(ids) <= 5
        assert len(ids) == len(set(ids))

    async def test_dedupes_preserving_first_rank(self, index: VectorIndex, tools: RetrievalTools) -> None:
        text = "\n\n".join(f"Solar panel efficiency section {i}. " * 40 for i in range(3))
        await _ingest(index, "solar", text)
        await _ingest(index, "wind", "Wind turbine maintenance schedule.")
        ids = (await tools.find_similar_documents("solar panel efficiency")).split("\n")
        assert ids[0] == "solar"
        assert ids.count("solar") == 1

    async def test_empty_corpus_returns_empty_string(self, tools: RetrievalTools) -> None:
        assert await tools.find_similar_documents("anything") == ""


class TestToolDeclarations:
    def test_as_tools_declares_both_tools(self, tools: RetrievalTools) -> None:
        declared = {t.name: t for t in tools.as_tools()}
        assert set(declared) == {ToolName.RETRIEVE.value, ToolName.FIND_SIMILAR_DOCUMENTS.value}
        assert "MANDATORY" in declared["retrieve"].description

    def test_schemas_require_every_argument(self, tools: RetrievalTools) -> None:
        declared = {t.name: t for t in tools.as_tools()}
        retrieve_schema = declared["retrieve"].args_schema.model_json_schema()
        discovery_schema = declared["find_similar_documents"].args_schema.model_json_schema()
        assert set(retrieve_schema["required"]) == {"query", "document_id"}
        assert discovery_schema["required"] == ["query"]

    async def test_structured_tool_invocation(self, index: VectorIndex, tools: RetrievalTools) -> None:
        await _ingest(index, "d1", "The invoice total is $450.")
        retrieve = next(t for t in tools.as_tools() if t.name == "retrieve")
        assert "$450" in await retrieve.ainvoke({"query": "invoice total", "document_id": "d1"})


class TestParseAndDispatch:
    def test_parses_scoped_retrieval(self, tools: RetrievalTools) -> None:
        request = tools.parse_request("retrieve", {"query": "q", "document_id": "d1"})
        assert request == ScopedRetrieval(query="q", document_id="d1")

    def test_parses_discovery(self, tools: RetrievalTools) -> None:
        assert tools.parse_request("find_similar_documents", {"query": "q"}) == Discovery(query="q")

    def test_unknown_tool_rejected(self, tools: RetrievalTools) -> None:
        with pytest.raises(AgentError, match="Unknown tool"):
            tools.parse_request("web_search", {"query": "q"})

    def test_missing_document_id_rejected(self, tools: RetrievalTools) -> None:
        with pytest.raises(AgentError, match="Invalid arguments"):
            tools.parse_request("retrieve", {"query": "q"})

    async def test_dispatch_routes_by_variant(self, index: VectorIndex, tools: RetrievalTools) -> None:
        await _ingest(index, "d1", "The invoice total is $450.")
        assert "$450" in await tools.dispatch(ScopedRetrieval(query="invoice", document_id="d1"))
        assert await tools.dispatch(Discovery(query="invoice")) == "d1"
