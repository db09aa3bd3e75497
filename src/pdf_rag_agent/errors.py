"""Exception taxonomy shared by ingestion, retrieval and the agent."""

from __future__ import annotations


class RagError(Exception):
    """Base class for every error raised by this package."""


class IngestionError(RagError):
    """A document could not be turned into indexed chunks.

    Raised for empty or unreadable text, oversized uploads, embedding
    failures and vector-store write failures.  The message is safe to show
    to the uploader.
    """


class EmptyDocumentError(IngestionError):
    """The extracted text is empty or whitespace-only."""


class FileTooLargeError(IngestionError):
    """The upload exceeds the configured size limit."""


class RetrievalError(RagError):
    """The embedding gateway failed while computing a query vector."""


class AgentError(RagError):
    """A model call or a tool invocation failed during a conversation turn."""


class NotFoundError(RagError):
    """No document exists for the requested identifier."""
