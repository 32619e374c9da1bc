"""LLM initialisation — single place to swap providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible server** — set ``LLM_BASE_URL`` (vLLM, LiteLLM,
   Azure proxy …).  ``ChatOpenAI`` works unchanged against any
   ``/v1/chat/completions`` endpoint.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from langchain_openai import ChatOpenAI

if TYPE_CHECKING:
    from ticket_rag.config import Settings

logger = logging.getLogger(__name__)

# Low temperature: answers should stick to the retrieved tickets.
ANSWER_TEMPERATURE = 0.2


def get_llm(settings: Settings, temperature: float = ANSWER_TEMPERATURE) -> ChatOpenAI:
    """Return the configured chat model."""
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": temperature,
    }

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # Self-hosted servers often need no key; LangChain requires a non-empty value.
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)
