"""Embedding gateway — text → fixed-length vectors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdf_rag_agent.config import settings

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings


def get_embedding_function(model_name: str | None = None) -> Embeddings:
    """Return the configured sentence-transformer embedding function.

    Imported lazily so that tests and the in-memory stack never load
    ``sentence-transformers``.
    """
    from langchain_huggingface import HuggingFaceEmbeddings

    return HuggingFaceEmbeddings(model_name=model_name or settings.embedding_model)
