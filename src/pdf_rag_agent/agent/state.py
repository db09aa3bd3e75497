"""Agent state definition — shared across all graph nodes.

The state is the *single source of truth* that flows through every node
in the LangGraph agent.  Each field is documented so that new nodes can
be added without guessing what data is available.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, TypedDict

from langchain_core.messages import BaseMessage
from langgraph.graph.message import add_messages


class TurnPhase(str, Enum):
    """Where a turn currently is in the tool-calling loop."""

    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"


@dataclass
class ToolCall:
    """Record of a single tool invocation.

    Attributes
    ----------
    tool_name:
        Which tool was called (e.g. ``"retrieve"``).
    tool_input:
        The validated arguments passed to the tool.
    round:
        The 1-based tool round the call belonged to.
    empty:
        ``True`` when the tool returned no content.
    """

    tool_name: str
    tool_input: dict[str, Any] = field(default_factory=dict)
    round: int = 0
    empty: bool = False


def _append_list(existing: list[Any], new: list[Any]) -> list[Any]:
    """Reducer that appends *new* items to the *existing* list."""
    return existing + new


class AgentState(TypedDict):
    """Typed state that flows through the LangGraph agent.

    Attributes
    ----------
    messages:
        Prior thread history plus this turn's messages, managed by
        LangGraph's ``add_messages`` reducer.
    phase:
        Current :class:`TurnPhase` value.
    tool_rounds:
        Number of tool rounds executed so far in this turn.
    max_tool_rounds:
        Safety cap on tool rounds; reaching it forces a final answer.
    tool_calls_made:
        Chronological log of every tool invocation in this turn.
    """

    messages: Annotated[list[BaseMessage], add_messages]
    phase: str
    tool_rounds: int
    max_tool_rounds: int
    tool_calls_made: Annotated[list[ToolCall], _append_list]
