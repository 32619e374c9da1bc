"""Prompt templates and context assembly for ticket answering.

The assistant answers support questions about the Pro-Dados Plus ERP in
Portuguese, the language of the ticket corpus.  Keeping the prompt here
makes it easy to audit and version.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

from ticket_rag.records import build_context_block

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from ticket_rag.retrieval.models import MatchResult

DEFAULT_MAX_CONTEXT_CHARS = 8000

SYSTEM_PROMPT = " ".join(
    [
        "Você é um assistente de suporte técnico de um ERP chamado Pro-Dados Plus. "
        "Responda em português de forma objetiva e prática.",
        "Use apenas as informações do CONTEXTO fornecido. "
        "Se o contexto não ajudar, admita e sugira passos de diagnóstico.",
        "Se houver passos de comando (ex.: plusinstall), descreva-os com cuidado.",
    ]
)


def format_match(rank: int, match: MatchResult) -> str:
    """Render one match as a ranked context block."""
    header = f"# Resultado {rank} (score: {float(match.score):.3f})"
    return f"{header}\n{build_context_block(match.metadata)}"


def build_context(
    matches: Sequence[MatchResult],
    max_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
) -> str:
    """Join ranked blocks with a blank line and hard-cut to *max_chars*.

    The cut is character-based and may split a line or a word.
    """
    context = "\n\n".join(format_match(i, m) for i, m in enumerate(matches, 1))
    return context[:max_chars]


def build_answer_prompt(question: str, context: str) -> list[BaseMessage]:
    """Assemble the system + user messages for one answer call."""
    user_msg = (
        f"Pergunta do usuário:\n{question}\n\n"
        f"CONTEXTO (resultados do banco vetorial):\n{context}"
    )
    return [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=user_msg),
    ]
