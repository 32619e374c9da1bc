"""In-memory fakes for the embedding service, vector store and chat model.

Nothing here talks to OpenAI, Pinecone or Chroma; every fake records the
calls it receives so tests can assert on them.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from unittest.mock import MagicMock

from langchain_core.embeddings import Embeddings

from ticket_rag.retrieval.base import VectorStoreBase
from ticket_rag.retrieval.models import MatchResult, VectorIndexEntry


def vector_for(text: str) -> list[float]:
    """Deterministic 3-d vector derived from *text*."""
    return [float(len(text)), float(sum(map(ord, text)) % 997), 1.0]


class FakeEmbeddings(Embeddings):
    """LangChain embeddings fake that records each ``embed_documents`` call.

    Parameters
    ----------
    fail_on_call:
        1-based call number that raises ``RuntimeError``.
    drop_last:
        Return one vector fewer than requested.
    """

    def __init__(self, *, fail_on_call: int | None = None, drop_last: bool = False) -> None:
        self.calls: list[list[str]] = []
        self.fail_on_call = fail_on_call
        self.drop_last = drop_last

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail_on_call == len(self.calls):
            raise RuntimeError("embedding quota exceeded")
        vectors = [vector_for(t) for t in texts]
        return vectors[:-1] if self.drop_last else vectors

    def embed_query(self, text: str) -> list[float]:
        return vector_for(text)


class FakeVectorStore(VectorStoreBase):
    """In-memory store: keeps entries by id and returns canned matches."""

    def __init__(
        self,
        matches: list[MatchResult] | None = None,
        *,
        namespace: str | None = None,
        fail_upsert: bool = False,
    ) -> None:
        super().__init__("tickets-test", namespace)
        self.matches = matches or []
        self.fail_upsert = fail_upsert
        self.upsert_calls: list[list[VectorIndexEntry]] = []
        self.entries: dict[str, VectorIndexEntry] = {}
        self.query_calls: list[dict[str, Any]] = []
        self.healthy = True

    def upsert(self, entries: Sequence[VectorIndexEntry]) -> None:
        if self.fail_upsert:
            raise ConnectionError("index unavailable")
        self.upsert_calls.append(list(entries))
        for entry in entries:
            self.entries[entry.id] = entry

    def query(
        self,
        vector: list[float],
        *,
        k: int,
        include_metadata: bool = True,
    ) -> list[MatchResult]:
        self.query_calls.append({"vector": vector, "k": k, "include_metadata": include_metadata})
        return self.matches[:k]

    def health_check(self) -> bool:
        return self.healthy


def fake_llm(content: Any = "resposta") -> MagicMock:
    """Chat-model mock whose ``invoke`` returns a message with *content*."""
    llm = MagicMock()
    llm.invoke.return_value = MagicMock(content=content)
    return llm
