"""End-to-end tests of :class:`RagService` over in-memory parts."""

from __future__ import annotations

import pytest

from pdf_rag_agent.config import Settings
from pdf_rag_agent.errors import FileTooLargeError, IngestionError, NotFoundError
from pdf_rag_agent.memory import InMemoryConversationMemory
from pdf_rag_agent.retrieval.memory_store import InMemoryVectorStore
from pdf_rag_agent.service import RagService


@pytest.fixture()
def service(embeddings, make_model, make_tool_call, tmp_path) -> RagService:
    model = make_model(
        make_tool_call("retrieve", query="invoice total", document_id="d1"),
        "The invoice total is $450.",
    )
    return RagService(
        InMemoryVectorStore(),
        embeddings,
        model,
        InMemoryConversationMemory(),
        config=Settings(
            _env_file=None,
            retrieve_k=2,
            max_upload_bytes=1024,
            store_retry_delay=0.25,
            upload_dir=str(tmp_path / "uploads"),
        ),
    )


async def test_ingest_then_ask(service: RagService) -> None:
    summary = await service.ingest("d1", "invoice.pdf", 120, "The invoice total is $450.")
    assert summary.chunks_created == 1

    assert "$450" in await service.tools.retrieve("invoice total", "d1")
    assert await service.run_turn("t1", "d1", "What is the invoice total?") == "The invoice total is $450."


async def test_settings_flow_into_components(service: RagService) -> None:
    assert service.tools.retrieve_k == 2
    assert service.pipeline.max_file_size == 1024
    assert service.agent.max_tool_rounds == 5
    assert (service.pipeline.max_attempts, service.pipeline.retry_delay) == (3, 0.25)


async def test_ingest_pdf_checks_size_before_parsing(service: RagService) -> None:
    with pytest.raises(FileTooLargeError):
        await service.ingest_pdf("big.pdf", b"x" * 2048)


async def test_ingest_pdf_assigns_fresh_ids(service: RagService, monkeypatch) -> None:
    monkeypatch.setattr("pdf_rag_agent.service.extract_pdf_text", lambda data: "Some page text.")
    first = await service.ingest_pdf("a.pdf", b"%PDF")
    second = await service.ingest_pdf("a.pdf", b"%PDF")
    assert first.document_id != second.document_id
    assert len(await service.list_documents()) == 2


async def test_ingest_pdf_keeps_the_raw_upload(service: RagService, monkeypatch) -> None:
    monkeypatch.setattr("pdf_rag_agent.service.extract_pdf_text", lambda data: "Some page text.")
    await service.ingest_pdf("report.pdf", b"%PDF raw bytes")

    [saved] = list(service.upload_dir.iterdir())
    timestamp, _, name = saved.name.partition("-")
    assert name == "report.pdf"
    assert timestamp.isdigit()
    assert saved.read_bytes() == b"%PDF raw bytes"


def test_saved_upload_stays_inside_upload_dir(service: RagService) -> None:
    path = service.save_upload("../../etc/evil.pdf", b"x")
    assert path.parent == service.upload_dir
    assert path.name.endswith("-evil.pdf")


def test_unwritable_upload_dir_is_an_ingestion_error(service: RagService, tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    service.upload_dir = blocker
    with pytest.raises(IngestionError, match="Failed to save upload"):
        service.save_upload("a.pdf", b"x")


async def test_get_document_unknown(service: RagService) -> None:
    with pytest.raises(NotFoundError, match="Document not found: nope"):
        await service.get_document("nope")


def test_default_settings() -> None:
    config = Settings(_env_file=None)
    assert (config.chunk_size, config.chunk_overlap) == (1000, 200)
    assert (config.retrieve_k, config.discovery_k, config.discovery_max_documents) == (3, 10, 5)
    assert config.max_tool_rounds == 5
    assert config.max_upload_bytes == 10 * 1024 * 1024
    assert (config.store_max_attempts, config.store_retry_delay) == (3, 1.0)
    assert config.upload_dir == "uploads"


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("CHUNK_SIZE", "500")
    monkeypatch.setenv("MEMORY_BACKEND", "file")
    config = Settings(_env_file=None)
    assert config.chunk_size == 500
    assert config.memory_backend == "file"
