"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local vLLM)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="LLM model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible chat API. Leave empty to use "
            "OpenAI cloud."
        ),
    )

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "documents"

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Chunking
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)

    # Retrieval tools
    retrieve_k: int = 3
    discovery_k: int = 10
    discovery_max_documents: int = 5

    # Agent loop
    max_tool_rounds: int = Field(default=5, ge=1, description="Cap on tool-call rounds per turn")

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024
    upload_dir: str = Field(default="uploads", description="Where raw uploaded PDFs are kept")

    # Store writes
    store_max_attempts: int = Field(default=3, ge=1, description="Attempts per chunk batch on connection errors")
    store_retry_delay: float = Field(default=1.0, ge=0, description="Seconds; the n-th retry waits n times this")

    # Conversation memory
    memory_backend: str = Field(default="memory", description="'memory' or 'file'")
    memory_dir: str = ".conversations"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Process-wide settings; import `settings` wherever needed.
settings = Settings()
