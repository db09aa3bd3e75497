"""
Serving — FastAPI application for uploads and chat.

This module exposes the ingestion pipeline and the conversational agent
over HTTP, e.g. ``uvicorn pdf_rag_agent.serving.app:app``.
"""
