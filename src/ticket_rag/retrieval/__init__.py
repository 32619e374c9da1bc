"""
Retrieval — vector-store backends and nearest-neighbour lookup.

This module wraps the vector store behind a clean interface so that
the pipelines never need to know which DB is backing retrieval.

Public surface
--------------
- :class:`TicketRetriever` — question embedding + top-k query.
- :func:`clamp_top_k` — bound caller-supplied ``topK`` values.
- :class:`VectorStoreBase` — abstract backend.
- :class:`PineconeVectorStore` — default Pinecone backend.
- :class:`ChromaVectorStore` — self-hosted Chroma backend.
- :class:`VectorIndexEntry`, :class:`MatchResult` — data models.
"""

from ticket_rag.retrieval.base import VectorStoreBase
from ticket_rag.retrieval.models import (
    AnswerResult,
    IngestionResult,
    MatchResult,
    VectorIndexEntry,
)
from ticket_rag.retrieval.retriever import TicketRetriever, clamp_top_k

__all__ = [
    "AnswerResult",
    "ChromaVectorStore",
    "IngestionResult",
    "MatchResult",
    "PineconeVectorStore",
    "TicketRetriever",
    "VectorIndexEntry",
    "VectorStoreBase",
    "clamp_top_k",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import backends to avoid pulling in their SDKs at import time."""
    if name == "ChromaVectorStore":
        from ticket_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    if name == "PineconeVectorStore":
        from ticket_rag.retrieval.pinecone_store import PineconeVectorStore

        return PineconeVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
