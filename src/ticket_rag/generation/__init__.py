"""
Generation — prompt assembly and the retrieval-augmented answer pipeline.

Public API
----------
- :class:`AnswerPipeline` — question in, grounded answer + matches out.
- :func:`get_llm` — build the configured chat model.
"""

from ticket_rag.generation.llm import ANSWER_TEMPERATURE, get_llm
from ticket_rag.generation.pipeline import AnswerPipeline

__all__ = ["ANSWER_TEMPERATURE", "AnswerPipeline", "get_llm"]
