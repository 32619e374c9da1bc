"""Retrieval-augmented answer pipeline.

Strictly sequential::

    validate → clamp top-k → embed question → query store
             → build + truncate context → chat model → AnswerResult

Any upstream failure aborts the whole call with
:class:`~ticket_rag.errors.UpstreamServiceError`; there is no partial
answer and no retry.
"""

from __future__ import annotations

import logging
from typing import Any

from ticket_rag.errors import UpstreamServiceError, ValidationError
from ticket_rag.generation.prompts import (
    DEFAULT_MAX_CONTEXT_CHARS,
    build_answer_prompt,
    build_context,
)
from ticket_rag.retrieval.models import AnswerResult
from ticket_rag.retrieval.retriever import DEFAULT_TOP_K, TicketRetriever, clamp_top_k

logger = logging.getLogger(__name__)


def _message_text(response: Any) -> str:
    """Extract the completion text, ``""`` when the model returned nothing."""
    content = getattr(response, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # Content-block form: keep the text parts.
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return ""


class AnswerPipeline:
    """Answer a question from the most similar stored tickets.

    Parameters
    ----------
    retriever:
        Question embedding + nearest-neighbour lookup.
    llm:
        A LangChain chat model (anything with ``invoke(messages)``);
        temperature is fixed when the model is built, see
        :func:`ticket_rag.generation.llm.get_llm`.
    max_context_chars:
        Hard cap on the assembled context.
    default_top_k:
        Used when the caller passes no ``top_k``.
    """

    def __init__(
        self,
        retriever: TicketRetriever,
        llm: Any,
        *,
        max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
        default_top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self._retriever = retriever
        self._llm = llm
        self.max_context_chars = max_context_chars
        self.default_top_k = default_top_k

    def answer(self, question: Any, top_k: Any = None) -> AnswerResult:
        """Return a grounded answer plus the ordered matches behind it.

        Raises
        ------
        ValidationError
            *question* is empty or *top_k* is not a number.
        UpstreamServiceError
            Embedding, retrieval or generation failed.
        """
        text = "" if question is None else str(question)
        if not text.strip():
            raise ValidationError('Field "question" is required')
        k = clamp_top_k(top_k, default=self.default_top_k)

        matches = self._retriever.retrieve(text, k=k)
        context = build_context(matches, self.max_context_chars)
        messages = build_answer_prompt(text, context)

        try:
            response = self._llm.invoke(messages)
        except Exception as exc:
            logger.error("Generation failed: %s", exc)
            raise UpstreamServiceError("generation", str(exc)) from exc

        answer = _message_text(response)
        logger.info(
            "Answered with %d match(es), context=%d chars, answer=%d chars",
            len(matches), len(context), len(answer),
        )
        return AnswerResult(answer=answer, matches=matches)
