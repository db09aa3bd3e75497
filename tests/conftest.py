"""Shared pytest configuration and fixtures.

No test talks to Chroma, HuggingFace or OpenAI: embeddings are a
deterministic bag-of-words hash, the chat model replays a script, and the
vector store and conversation memory live in process.
"""

from __future__ import annotations

import re
import zlib
from collections.abc import Callable
from typing import Any

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field

from pdf_rag_agent.memory import InMemoryConversationMemory
from pdf_rag_agent.retrieval.index import VectorIndex
from pdf_rag_agent.retrieval.memory_store import InMemoryVectorStore


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ──────────────────────────────────────────────────────────────


class KeywordEmbeddings(Embeddings):
    """Hashes lower-cased tokens into a fixed-size count vector.

    Texts sharing words end up close in cosine distance, which is enough
    to make ranking assertions meaningful.
    """

    dim = 256

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dim
        for token in re.findall(r"[a-z0-9$]+", text.lower()):
            vector[zlib.crc32(token.encode("utf-8")) % self.dim] += 1.0
        return vector

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._embed(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed(text)


class FailingEmbeddings(Embeddings):
    """Embedding gateway that is always down."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise RuntimeError("embedding service unavailable")

    def embed_query(self, text: str) -> list[float]:
        raise RuntimeError("embedding service unavailable")


class ScriptedChatModel(BaseChatModel):
    """Chat model that replays ``script`` one step per call.

    A step is a reply string, an :class:`AIMessage` (e.g. with tool calls)
    or an exception to raise.  Every prompt received is kept in ``calls``.
    """

    script: list[Any]
    calls: list[list[BaseMessage]] = Field(default_factory=list)
    bound_tool_names: list[str] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def bind_tools(self, tools: Any, **kwargs: Any) -> ScriptedChatModel:  # type: ignore[override]
        self.bound_tool_names.extend(t.name for t in tools)
        return self

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        self.calls.append(list(messages))
        if len(self.calls) > len(self.script):
            raise RuntimeError("script exhausted")
        step = self.script[len(self.calls) - 1]
        if isinstance(step, Exception):
            raise step
        message = AIMessage(content=step) if isinstance(step, str) else step
        return ChatResult(generations=[ChatGeneration(message=message)])


def tool_call(name: str, call_id: str = "call_1", **args: Any) -> AIMessage:
    """An assistant message requesting a single tool call."""
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": call_id}])


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def index(store: InMemoryVectorStore, embeddings: KeywordEmbeddings) -> VectorIndex:
    return VectorIndex(store, embeddings)


@pytest.fixture()
def memory() -> InMemoryConversationMemory:
    return InMemoryConversationMemory()


@pytest.fixture()
def make_model() -> Callable[..., ScriptedChatModel]:
    """Factory: ``make_model("answer")`` or ``make_model(tool_call(...), "answer")``."""
    return lambda *script: ScriptedChatModel(script=list(script))


@pytest.fixture()
def make_tool_call() -> Callable[..., AIMessage]:
    return tool_call


@pytest.fixture()
def failing_embeddings() -> FailingEmbeddings:
    return FailingEmbeddings()
