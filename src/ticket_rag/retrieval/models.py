"""Domain models for index entries, matches and pipeline results."""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field

# Value shapes the vector index accepts as metadata.
SanitizedValue = Union[str, int, float, bool, list[str]]


class VectorIndexEntry(BaseModel):
    """A persisted ``(id, vector, metadata)`` triple.

    Attributes
    ----------
    id:
        Deterministic record id (see :func:`ticket_rag.records.deterministic_id`).
    values:
        The embedding vector.
    metadata:
        Sanitized metadata stored alongside the vector.
    """

    id: str
    values: list[float]
    metadata: dict[str, SanitizedValue] = Field(default_factory=dict)


class MatchResult(BaseModel):
    """A nearest-neighbour hit returned by the vector store.  Never persisted."""

    id: str
    score: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)


class IngestionResult(BaseModel):
    """Summary of a completed ingestion call."""

    upserted_count: int
    index_name: str
    namespace: str | None = None
    embedding_model: str


class AnswerResult(BaseModel):
    """Generated answer plus the matches it was grounded on, in rank order."""

    answer: str
    matches: list[MatchResult] = Field(default_factory=list)
