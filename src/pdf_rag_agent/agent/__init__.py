"""
Agent — document-scoped conversational agent built with LangGraph.

This module wires the retrieval tools into a LangGraph state machine
that decides, turn by turn, whether to retrieve or to answer, and keeps
each thread's history in a :class:`~pdf_rag_agent.memory.ConversationMemory`.
Everything can be exercised locally with fake models and the in-memory
vector store.

Public API
----------
- :class:`ConversationAgent` — run one user turn on a thread.
- :func:`build_graph` — compile the tool-calling workflow.
- :class:`RetrievalTools` — the ``retrieve`` / ``find_similar_documents`` tools.
- :class:`AgentState` — the TypedDict flowing through every node.
"""

from pdf_rag_agent.agent.graph import build_graph, create_initial_state
from pdf_rag_agent.agent.runner import ConversationAgent
from pdf_rag_agent.agent.state import AgentState, ToolCall, TurnPhase
from pdf_rag_agent.agent.tools import Discovery, RetrievalTools, ScopedRetrieval, ToolName

__all__ = [
    "AgentState",
    "ConversationAgent",
    "Discovery",
    "RetrievalTools",
    "ScopedRetrieval",
    "ToolCall",
    "ToolName",
    "TurnPhase",
    "build_graph",
    "create_initial_state",
]
