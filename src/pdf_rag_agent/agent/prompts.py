"""Prompt templates and fixed messages for the conversational agent.

Keeping every model-facing string in one place makes them easy to audit
and version.
"""

from __future__ import annotations

import re

SYSTEM_PROMPT = """\
You are a helpful assistant that answers questions about PDF documents.

CRITICAL INSTRUCTIONS:
1. When a user asks about document content, you MUST use the retrieve tool.
2. Extract the document_id from the user message (format: "Document ID: xxx").
3. Pass both the user's query and the document_id to the retrieve tool.
4. Always use the retrieve tool before answering questions about documents.
5. If you cannot find the document_id in the message, ask the user to specify
   which document they're asking about. Never guess a document_id.
6. If the retrieve tool reports that no relevant content was found, tell the
   user the document does not appear to contain that information.

Remember: You CANNOT answer questions about document content without using
the retrieve tool first.
"""

ROUND_LIMIT_DIRECTIVE = """\
The tool-call budget for this question is exhausted. Do not request any more
tools. Answer now using only the tool results already in this conversation,
and say so if they are not sufficient.
"""

NO_CONTENT_FOUND = "No relevant content found in the document for this query."

FALLBACK_MESSAGE = "Sorry, there was an error processing your request. Please try again."

_DOCUMENT_ID_RE = re.compile(r"^Document ID:\s*(\S+)\s*$", re.MULTILINE)


def build_user_turn(document_id: str, query: str) -> str:
    """Embed the document marker in the user's message."""
    return f"Document ID: {document_id}\nUser Query: {query}"


def extract_document_id(content: str) -> str | None:
    """Return the id in a ``Document ID: <id>`` marker, if present."""
    match = _DOCUMENT_ID_RE.search(content)
    return match.group(1) if match else None
