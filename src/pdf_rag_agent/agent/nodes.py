"""Graph nodes — each function is one step of the tool-calling loop.

Node contract
-------------
* Accepts the full :class:`AgentState` dict.
* Returns a *partial* dict with **only the keys that changed**.
* Model and tool failures are raised as :class:`AgentError`; the turn
  boundary in :mod:`pdf_rag_agent.agent.runner` decides what the user sees.

Nodes close over their collaborators (chat model, tools) so that the
graph can be built with fakes in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    RemoveMessage,
    SystemMessage,
    ToolMessage,
)
from langgraph.graph import END

from pdf_rag_agent.agent.prompts import NO_CONTENT_FOUND, ROUND_LIMIT_DIRECTIVE, SYSTEM_PROMPT
from pdf_rag_agent.agent.state import AgentState, ToolCall, TurnPhase
from pdf_rag_agent.errors import AgentError

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel
    from langchain_core.runnables import Runnable

    from pdf_rag_agent.agent.tools import RetrievalTools

logger = logging.getLogger(__name__)

Node = Callable[[AgentState], Awaitable[dict[str, Any]]]


# ── 1. CALL MODEL ─────────────────────────────────────────────────────


def make_call_model(bound_model: Runnable) -> Node:
    """Build the ``call_model`` node around a tool-bound chat model."""

    async def call_model(state: AgentState) -> dict[str, Any]:
        prompt = [SystemMessage(content=SYSTEM_PROMPT), *state["messages"]]
        try:
            response = await bound_model.ainvoke(prompt)
        except Exception as exc:
            raise AgentError(f"Model call failed: {exc}") from exc

        tool_calls = getattr(response, "tool_calls", None) or []
        logger.debug("Model returned %d tool call(s)", len(tool_calls))
        phase = TurnPhase.EXECUTING_TOOLS if tool_calls else TurnPhase.DONE
        return {"messages": [response], "phase": phase.value}

    return call_model


# ── 2. EXECUTE TOOLS ──────────────────────────────────────────────────


def make_execute_tools(tools: RetrievalTools) -> Node:
    """Build the ``execute_tools`` node.

    Every tool call of the last model message is validated and run in
    order.  Empty tool output is folded in as :data:`NO_CONTENT_FOUND`.
    Calls the model sent without an id get a generated one, written back
    into the request message so each result pairs with its call.
    """

    async def execute_tools(state: AgentState) -> dict[str, Any]:
        last = state["messages"][-1]
        round_no = state.get("tool_rounds", 0) + 1

        requested = list(getattr(last, "tool_calls", None) or [])
        calls = [
            {**call, "id": call.get("id") or f"call_{round_no}_{i}"}
            for i, call in enumerate(requested)
        ]

        results: list[BaseMessage] = []
        if calls != requested:
            # same message id, so add_messages replaces the request in place
            results.append(last.model_copy(update={"tool_calls": calls}))

        log: list[ToolCall] = []
        for call in calls:
            request = tools.parse_request(call["name"], call.get("args") or {})
            try:
                output = await tools.dispatch(request)
            except Exception as exc:
                raise AgentError(f"Tool {call['name']!r} failed: {exc}") from exc

            results.append(
                ToolMessage(
                    content=output or NO_CONTENT_FOUND,
                    tool_call_id=call["id"],
                    name=call["name"],
                )
            )
            log.append(
                ToolCall(
                    tool_name=call["name"],
                    tool_input=request.model_dump(),
                    round=round_no,
                    empty=not output,
                )
            )

        logger.info("Tool round %d ran %s", round_no, [c.tool_name for c in log])
        return {
            "messages": results,
            "tool_calls_made": log,
            "tool_rounds": round_no,
            "phase": TurnPhase.AWAITING_MODEL.value,
        }

    return execute_tools


# ── 3. FORCE ANSWER ───────────────────────────────────────────────────


def make_force_answer(model: BaseChatModel) -> Node:
    """Build the node that ends a turn once the tool-round cap is reached.

    The pending tool-call message is dropped from state so the history
    never holds a tool call without its result, and the model, without
    tools bound, answers from the evidence already gathered.
    """

    async def force_answer(state: AgentState) -> dict[str, Any]:
        pending = state["messages"][-1]
        prompt = [
            SystemMessage(content=SYSTEM_PROMPT),
            *state["messages"][:-1],
            SystemMessage(content=ROUND_LIMIT_DIRECTIVE),
        ]
        logger.warning(
            "Tool-round cap (%d) reached; forcing a final answer",
            state.get("max_tool_rounds", 0),
        )
        try:
            response = await model.ainvoke(prompt)
        except Exception as exc:
            raise AgentError(f"Model call failed: {exc}") from exc

        if getattr(response, "tool_calls", None):
            response = AIMessage(content=response.content)
        return {
            "messages": [RemoveMessage(id=pending.id), response],
            "phase": TurnPhase.DONE.value,
        }

    return force_answer


# ── 4. ROUTING (conditional edge) ─────────────────────────────────────


def route_after_model(state: AgentState) -> str:
    """Conditional edge after ``call_model``.

    Returns
    -------
    str
        ``"execute_tools"`` when the model asked for tools and rounds
        remain, ``"force_answer"`` when it asked for tools past the cap,
        and ``END`` when it produced a final answer.
    """
    last = state["messages"][-1]
    if not getattr(last, "tool_calls", None):
        return END
    if state.get("tool_rounds", 0) >= state.get("max_tool_rounds", 0):
        return "force_answer"
    return "execute_tools"
