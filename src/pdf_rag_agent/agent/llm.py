"""Chat-model initialisation — single place to swap providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible endpoint** — set ``LLM_BASE_URL`` to a vLLM, Ollama
   or gateway URL exposing ``/v1/chat/completions`` with tool calling.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from pdf_rag_agent.config import settings

logger = logging.getLogger(__name__)


def get_llm(temperature: float = 0.0) -> ChatOpenAI:
    """Return the configured chat model.

    Temperature defaults to 0 so that tool selection is as repeatable as
    the provider allows.
    """
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": temperature,
    }

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # Self-hosted endpoints often need no key; LangChain requires a non-empty value.
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)
