"""
Ingestion — text extraction, chunking, and embedding into the vector index.

This module is responsible for the one-shot pipeline that converts an
uploaded PDF into embedded chunks stored in the vector index.
"""

from pdf_rag_agent.ingestion.chunker import Chunker
from pdf_rag_agent.ingestion.pipeline import IngestionPipeline, IngestionSummary

__all__ = ["Chunker", "IngestionPipeline", "IngestionSummary"]
