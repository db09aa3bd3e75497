"""PDF text extraction."""

from __future__ import annotations

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from pdf_rag_agent.errors import EmptyDocumentError

logger = logging.getLogger(__name__)


def extract_pdf_text(data: bytes) -> str:
    """Extract plain text from raw PDF bytes.

    Pages are joined with a blank line so the chunker sees page breaks as
    paragraph boundaries.

    Raises
    ------
    EmptyDocumentError
        If the bytes are not a readable PDF or the PDF contains no text.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError) as exc:
        logger.warning("Unreadable PDF (%d bytes): %s", len(data), exc)
        raise EmptyDocumentError("PDF contains no readable text") from exc

    text = "\n\n".join(pages)
    if not text.strip():
        raise EmptyDocumentError("PDF contains no readable text")
    logger.info("Extracted %d chars from %d page(s)", len(text), len(pages))
    return text
