"""Turn runner — the public entry point of the conversational agent.

One call to :meth:`ConversationAgent.run_turn` is one user turn:

1. load the thread history from :class:`ConversationMemory`;
2. run the compiled graph over history + the new user message;
3. append the user message and every message the turn produced;
4. return the final assistant text.

Turns on the same thread are serialized with a per-thread lock, so two
concurrent requests for one thread never interleave their appends.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import defaultdict
from typing import TYPE_CHECKING, Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from pdf_rag_agent.agent.graph import build_graph, create_initial_state, recursion_limit
from pdf_rag_agent.agent.prompts import FALLBACK_MESSAGE, build_user_turn
from pdf_rag_agent.errors import AgentError

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from pdf_rag_agent.agent.tools import RetrievalTools
    from pdf_rag_agent.memory import ConversationMemory

logger = logging.getLogger(__name__)


class ConversationAgent:
    """Runs conversation turns against a document-scoped retrieval agent.

    Parameters
    ----------
    model:
        Chat model that supports tool binding.
    tools:
        The retrieval tools the model may call.
    memory:
        Where thread histories live.
    max_tool_rounds:
        Cap on tool rounds per turn; past it the model must answer.
    """

    def __init__(
        self,
        model: BaseChatModel,
        tools: RetrievalTools,
        memory: ConversationMemory,
        *,
        max_tool_rounds: int = 5,
    ) -> None:
        self._graph = build_graph(model, tools)
        self._memory = memory
        self.max_tool_rounds = max_tool_rounds
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def memory(self) -> ConversationMemory:
        return self._memory

    async def run_turn(self, thread_id: str, document_id: str, user_text: str) -> str:
        """Answer *user_text* about *document_id* within thread *thread_id*.

        Model and tool failures never escape: the turn is recorded with
        :data:`FALLBACK_MESSAGE` as the assistant reply, which is returned.
        """
        async with self._locks[thread_id]:
            history = await self._memory.get_history(thread_id)
            user_message = HumanMessage(
                content=build_user_turn(document_id, user_text),
                id=str(uuid.uuid4()),
            )

            try:
                produced = await self._run_graph(history, user_message)
            except AgentError:
                logger.exception("Turn failed on thread %r (document %s)", thread_id, document_id)
                produced = [AIMessage(content=FALLBACK_MESSAGE)]

            for message in [user_message, *produced]:
                await self._memory.append(thread_id, message)

            return message_text(produced[-1])

    async def _run_graph(
        self, history: list[BaseMessage], user_message: HumanMessage
    ) -> list[BaseMessage]:
        state = create_initial_state(
            [*history, user_message], max_tool_rounds=self.max_tool_rounds
        )
        result: dict[str, Any] = await self._graph.ainvoke(
            state, config={"recursion_limit": recursion_limit(self.max_tool_rounds)}
        )
        messages: list[BaseMessage] = result["messages"]
        position = next(i for i, m in enumerate(messages) if m.id == user_message.id)
        produced = messages[position + 1 :]
        if not produced:
            raise AgentError("Model produced no reply")
        logger.info(
            "Turn finished after %d tool round(s), %d new message(s)",
            result.get("tool_rounds", 0),
            len(produced),
        )
        return produced


def message_text(message: BaseMessage) -> str:
    """Plain text of a message whose content may be a list of parts."""
    content = message.content
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)
