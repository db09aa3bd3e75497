"""FastAPI application exposing ingestion and chat as a REST API."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from pdf_rag_agent.config import settings
from pdf_rag_agent.errors import (
    EmptyDocumentError,
    FileTooLargeError,
    IngestionError,
    NotFoundError,
)
from pdf_rag_agent.retrieval.models import DocumentInfo
from pdf_rag_agent.service import RagService

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PDF RAG Agent API",
    version="0.1.0",
    description="Upload PDFs and chat with an agent that retrieves from them.",
)


@lru_cache(maxsize=1)
def get_service() -> RagService:
    """Process-wide service, built on first request."""
    return RagService.from_settings()


# ── Request / Response schemas ────────────────────────────────────────
class GenerateRequest(BaseModel):
    """A user question about one document."""

    # Blank or missing values are answered with a 400, not a 422.
    query: str = Field(default="", description="The user's question")
    document_id: str = Field(default="", description="Document the question is about")
    thread_id: str = "default"


class GenerateResponse(BaseModel):
    """Answer returned by the agent."""

    response: str
    document_id: str


class UploadResponse(BaseModel):
    message: str = "PDF processed successfully"
    document_id: str
    chunks_created: int
    filename: str


class DocumentsResponse(BaseModel):
    documents: list[DocumentInfo]


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health(service: RagService = Depends(get_service)) -> JSONResponse:
    """Liveness probe including vector-store reachability."""
    if await service.health_check():
        return JSONResponse({"status": "ok", "vector_store": "connected"})
    return JSONResponse({"status": "error", "vector_store": "unreachable"}, status_code=503)


@app.post("/upload-pdf", response_model=UploadResponse)
async def upload_pdf(
    pdf: UploadFile | None = File(default=None),
    service: RagService = Depends(get_service),
) -> UploadResponse:
    """Extract, chunk and index an uploaded PDF under a new document id."""
    if pdf is None:
        raise HTTPException(status_code=400, detail="No PDF file uploaded")

    data = await pdf.read()
    try:
        summary = await service.ingest_pdf(pdf.filename or "upload.pdf", data)
    except FileTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except EmptyDocumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IngestionError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to process PDF: {exc}") from exc

    logger.info("PDF processed: %s -> %d chunk(s)", summary.filename, summary.chunks_created)
    return UploadResponse(**summary.model_dump())


@app.post("/generate", response_model=GenerateResponse)
async def generate(
    request: GenerateRequest,
    service: RagService = Depends(get_service),
) -> GenerateResponse | JSONResponse:
    """Run one conversation turn and return the assistant's reply."""
    if not request.query.strip() or not request.document_id.strip():
        return JSONResponse({"error": "Query and document_id are required"}, status_code=400)
    answer = await service.run_turn(request.thread_id, request.document_id, request.query)
    return GenerateResponse(response=answer, document_id=request.document_id)


@app.get("/documents", response_model=DocumentsResponse)
async def list_documents(service: RagService = Depends(get_service)) -> DocumentsResponse:
    """List uploaded documents, newest first."""
    return DocumentsResponse(documents=await service.list_documents())


@app.get("/document/{document_id}")
async def get_document(
    document_id: str,
    service: RagService = Depends(get_service),
) -> dict[str, Any]:
    """Return the first chunk of a document with its metadata."""
    try:
        chunk = await service.get_document(document_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail="Document not found") from exc
    return {"content": chunk.content, "metadata": chunk.metadata.model_dump()}


def main() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
