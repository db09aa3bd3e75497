"""Conversation memory — per-thread, append-only message history.

Histories are keyed by a caller-chosen thread id and created on first
use.  Nothing is ever evicted: a caller that "resets" a conversation by
minting a new thread id leaves the old history in place.
"""

from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from langchain_community.chat_message_histories import FileChatMessageHistory
from langchain_core.chat_history import BaseChatMessageHistory, InMemoryChatMessageHistory
from langchain_core.messages import BaseMessage

logger = logging.getLogger(__name__)


class ConversationMemory(ABC):
    """Durable-or-not store of message histories, one per thread id."""

    @abstractmethod
    def _history(self, thread_id: str) -> BaseChatMessageHistory:
        """Return (creating if needed) the backing history for *thread_id*."""
        ...

    async def get_history(self, thread_id: str) -> list[BaseMessage]:
        """Return a copy of the thread's messages in append order."""
        messages = await self._history(thread_id).aget_messages()
        return [m.model_copy(deep=True) for m in messages]

    async def append(self, thread_id: str, message: BaseMessage) -> None:
        """Append one message to the end of the thread."""
        await self._history(thread_id).aadd_messages([message])


class InMemoryConversationMemory(ConversationMemory):
    """Process-lifetime memory, the default for tests and local runs."""

    def __init__(self) -> None:
        self._threads: dict[str, InMemoryChatMessageHistory] = {}

    def _history(self, thread_id: str) -> BaseChatMessageHistory:
        if thread_id not in self._threads:
            self._threads[thread_id] = InMemoryChatMessageHistory()
        return self._threads[thread_id]

    @property
    def thread_ids(self) -> list[str]:
        return list(self._threads)


class FileConversationMemory(ConversationMemory):
    """One JSON file per thread under *directory*; survives restarts.

    File names are the SHA-256 of the thread id so arbitrary caller ids
    are safe on disk.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        self._threads: dict[str, FileChatMessageHistory] = {}

    def path_for(self, thread_id: str) -> Path:
        digest = hashlib.sha256(thread_id.encode("utf-8")).hexdigest()
        return self._directory / f"{digest}.json"

    def _history(self, thread_id: str) -> BaseChatMessageHistory:
        if thread_id not in self._threads:
            path = self.path_for(thread_id)
            logger.debug("Opening history for thread %r at %s", thread_id, path)
            self._threads[thread_id] = FileChatMessageHistory(str(path))
        return self._threads[thread_id]


def create_memory(backend: str, directory: str | Path = ".conversations") -> ConversationMemory:
    """Build the memory backend named by ``settings.memory_backend``."""
    if backend == "memory":
        return InMemoryConversationMemory()
    if backend == "file":
        return FileConversationMemory(directory)
    raise ValueError(f"Unknown memory backend: {backend!r}")
