"""LangGraph graph definition — the tool-calling conversation loop.

This module wires the node factories in :mod:`pdf_rag_agent.agent.nodes`
into a compiled :class:`StateGraph`:

1. **Call the model** with the thread history and the tools bound.
2. **Execute tools** if it asked for any, then call the model again.
3. **Stop** when the model answers without tool calls, or force an
   answer once ``max_tool_rounds`` rounds have run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from langgraph.graph import END, StateGraph

from pdf_rag_agent.agent.nodes import (
    make_call_model,
    make_execute_tools,
    make_force_answer,
    route_after_model,
)
from pdf_rag_agent.agent.state import AgentState, TurnPhase

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel
    from langchain_core.messages import BaseMessage

    from pdf_rag_agent.agent.tools import RetrievalTools


def build_graph(model: BaseChatModel, tools: RetrievalTools) -> Any:
    """Construct and return the compiled LangGraph agent.

    Graph topology::

        ┌─────────┐
        │  START  │
        └────┬────┘
             ▼
      ┌──────────────┐
      │  call_model  │◄──────────────────┐
      └──────┬───────┘                   │
             │ tool calls, rounds left   │
             ├──────────────►┌───────────┴───┐
             │               │ execute_tools │
             │               └───────────────┘
             │ tool calls, cap reached
             ├──────────────►┌──────────────┐
             │               │ force_answer ├──► [ END ]
             │ final answer  └──────────────┘
             ▼
          [ END ]

    Returns
    -------
    CompiledGraph
        A compiled LangGraph workflow ready for ``.ainvoke()``.
    """
    workflow = StateGraph(AgentState)

    # -- Nodes ---------------------------------------------------------------
    workflow.add_node("call_model", make_call_model(model.bind_tools(tools.as_tools())))
    workflow.add_node("execute_tools", make_execute_tools(tools))
    workflow.add_node("force_answer", make_force_answer(model))

    # -- Edges ---------------------------------------------------------------
    workflow.set_entry_point("call_model")
    workflow.add_conditional_edges(
        "call_model",
        route_after_model,
        {
            "execute_tools": "execute_tools",
            "force_answer": "force_answer",
            END: END,
        },
    )
    workflow.add_edge("execute_tools", "call_model")
    workflow.add_edge("force_answer", END)

    return workflow.compile()


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------


def create_initial_state(
    messages: list[BaseMessage], *, max_tool_rounds: int = 5
) -> dict[str, Any]:
    """Build the initial state dict for ``graph.ainvoke()``.

    Usage::

        graph = build_graph(get_llm(), RetrievalTools(index))
        state = create_initial_state([*history, HumanMessage(content=...)])
        result = await graph.ainvoke(state, config={"recursion_limit": recursion_limit(5)})
        print(result["messages"][-1].content)
    """
    return {
        "messages": list(messages),
        "phase": TurnPhase.AWAITING_MODEL.value,
        "tool_rounds": 0,
        "max_tool_rounds": max_tool_rounds,
        "tool_calls_made": [],
    }


def recursion_limit(max_tool_rounds: int) -> int:
    """LangGraph step budget that always admits ``max_tool_rounds`` rounds."""
    # one model step + one tool step per round, plus the first and last model steps
    return 2 * max_tool_rounds + 4
