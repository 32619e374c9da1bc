"""Unit tests for the retrieval layer — top-k clamping, retriever, backends."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest

from ticket_rag.errors import UpstreamServiceError, ValidationError
from ticket_rag.ingestion.embedder import EmbeddingClient
from ticket_rag.retrieval.chroma_store import ChromaVectorStore, collection_name_for
from ticket_rag.retrieval.models import MatchResult, VectorIndexEntry
from ticket_rag.retrieval.pinecone_store import PineconeVectorStore
from ticket_rag.retrieval.retriever import TicketRetriever, clamp_top_k

from fakes import FakeEmbeddings, FakeVectorStore, vector_for

SAMPLE_MATCHES = [
    MatchResult(id="a" * 32, score=0.91, metadata={"titulo": "Plus nao puxa a loja"}),
    MatchResult(id="b" * 32, score=0.72, metadata={"titulo": "Nota fiscal"}),
    MatchResult(id="c" * 32, score=0.40, metadata={}),
]


# ── clamp_top_k ─────────────────────────────────────────────────────────


class TestClampTopK:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(0, 1), (-5, 1), (31, 30), (1000, 30), (5, 5), ("7", 7), (4.9, 4), (None, 20), ("", 20)],
    )
    def test_clamped(self, raw: Any, expected: int) -> None:
        assert clamp_top_k(raw) == expected

    def test_custom_default(self) -> None:
        assert clamp_top_k(None, default=8) == 8

    @pytest.mark.parametrize("raw", ["abc", [3], {"k": 1}, True, float("nan"), float("inf")])
    def test_invalid_rejected(self, raw: Any) -> None:
        with pytest.raises(ValidationError):
            clamp_top_k(raw)


# ── TicketRetriever ─────────────────────────────────────────────────────


class TestTicketRetriever:
    def test_embeds_question_once_and_queries(
        self, embedder: EmbeddingClient, fake_embeddings: FakeEmbeddings
    ) -> None:
        store = FakeVectorStore(matches=SAMPLE_MATCHES)
        matches = TicketRetriever(embedder, store).retrieve("loja nao abre", k=2)

        assert fake_embeddings.calls == [["loja nao abre"]]
        assert store.query_calls == [
            {"vector": vector_for("loja nao abre"), "k": 2, "include_metadata": True}
        ]
        assert [m.id for m in matches] == ["a" * 32, "b" * 32]

    def test_keeps_store_order(self, embedder: EmbeddingClient) -> None:
        reversed_matches = list(reversed(SAMPLE_MATCHES))
        store = FakeVectorStore(matches=reversed_matches)
        matches = TicketRetriever(embedder, store).retrieve("q", k=3)
        assert matches == reversed_matches

    def test_embedding_failure_wrapped(self, fake_store: FakeVectorStore) -> None:
        embedder = EmbeddingClient(FakeEmbeddings(fail_on_call=1), model="m")
        with pytest.raises(UpstreamServiceError) as excinfo:
            TicketRetriever(embedder, fake_store).retrieve("q", k=1)
        assert excinfo.value.service == "embedding"
        assert fake_store.query_calls == []

    def test_store_failure_wrapped(self, embedder: EmbeddingClient) -> None:
        store = MagicMock()
        store.index_name = "tickets"
        store.query.side_effect = TimeoutError("read timed out")
        with pytest.raises(UpstreamServiceError, match="read timed out") as excinfo:
            TicketRetriever(embedder, store).retrieve("q", k=1)
        assert excinfo.value.service == "vector_store"


# ── Pinecone backend ────────────────────────────────────────────────────


class TestPineconeVectorStore:
    def _entry(self, rid: str = "x" * 32) -> VectorIndexEntry:
        return VectorIndexEntry(id=rid, values=[0.1, 0.2], metadata={"titulo": "t", "Tags": ["a"]})

    def test_upsert_payload(self) -> None:
        index = MagicMock()
        store = PineconeVectorStore("tickets", index=index)
        store.upsert([self._entry()])

        index.upsert.assert_called_once_with(
            vectors=[{"id": "x" * 32, "values": [0.1, 0.2], "metadata": {"titulo": "t", "Tags": ["a"]}}]
        )

    def test_namespace_forwarded(self) -> None:
        index = MagicMock()
        store = PineconeVectorStore("tickets", "suporte", index=index)
        store.upsert([self._entry()])
        assert index.upsert.call_args.kwargs["namespace"] == "suporte"

    def test_empty_namespace_means_default(self) -> None:
        store = PineconeVectorStore("tickets", "", index=MagicMock())
        assert store.namespace is None

    def test_empty_upsert_skipped(self) -> None:
        index = MagicMock()
        PineconeVectorStore("tickets", index=index).upsert([])
        index.upsert.assert_not_called()

    def test_query_maps_sdk_objects(self) -> None:
        index = MagicMock()
        index.query.return_value = SimpleNamespace(
            matches=[
                SimpleNamespace(id="a", score=0.9, metadata={"titulo": "t"}),
                SimpleNamespace(id="b", score=0.5, metadata=None),
            ]
        )
        store = PineconeVectorStore("tickets", "suporte", index=index)
        matches = store.query([0.1, 0.2], k=2)

        index.query.assert_called_once_with(
            vector=[0.1, 0.2], top_k=2, include_metadata=True, namespace="suporte"
        )
        assert matches == [
            MatchResult(id="a", score=0.9, metadata={"titulo": "t"}),
            MatchResult(id="b", score=0.5, metadata={}),
        ]

    def test_query_maps_dict_response(self) -> None:
        index = MagicMock()
        index.query.return_value = {"matches": [{"id": "a", "score": 0.8, "metadata": {"x": "y"}}]}
        matches = PineconeVectorStore("tickets", index=index).query([0.0], k=1)
        assert matches[0].metadata == {"x": "y"}

    def test_query_without_matches(self) -> None:
        index = MagicMock()
        index.query.return_value = {"matches": []}
        assert PineconeVectorStore("tickets", index=index).query([0.0], k=5) == []

    def test_health_check(self) -> None:
        index = MagicMock()
        assert PineconeVectorStore("tickets", index=index).health_check() is True
        index.describe_index_stats.side_effect = ConnectionError("down")
        assert PineconeVectorStore("tickets", index=index).health_check() is False


# ── Chroma backend ──────────────────────────────────────────────────────


class TestChromaVectorStore:
    def _store(self, namespace: str | None = None) -> tuple[ChromaVectorStore, MagicMock, MagicMock]:
        client = MagicMock()
        collection = MagicMock()
        client.get_or_create_collection.return_value = collection
        return ChromaVectorStore("tickets", namespace, client=client), client, collection

    def test_collection_per_namespace(self) -> None:
        assert collection_name_for("tickets", None) == "tickets"
        assert collection_name_for("tickets", "suporte") == "tickets__suporte"
        _, client, _ = self._store("suporte")
        client.get_or_create_collection.assert_called_once_with(
            name="tickets__suporte", metadata={"hnsw:space": "cosine"}
        )

    def test_upsert_flattens_string_lists(self) -> None:
        store, _, collection = self._store()
        store.upsert([VectorIndexEntry(id="a", values=[1.0], metadata={"Tags": ["x", "y"], "n": 1})])

        kwargs = collection.upsert.call_args.kwargs
        assert kwargs["ids"] == ["a"]
        assert kwargs["embeddings"] == [[1.0]]
        assert kwargs["metadatas"] == [{"Tags": "x,y", "n": 1}]

    def test_query_converts_distance_to_score(self) -> None:
        store, _, collection = self._store()
        collection.query.return_value = {
            "ids": [["a", "b"]],
            "distances": [[0.1, 0.5]],
            "metadatas": [[{"titulo": "t"}, None]],
        }
        matches = store.query([0.3], k=2)

        assert [m.id for m in matches] == ["a", "b"]
        assert matches[0].score == pytest.approx(0.9)
        assert matches[1].metadata == {}
        assert collection.query.call_args.kwargs["include"] == ["metadatas", "distances"]

    def test_query_without_metadata(self) -> None:
        store, _, collection = self._store()
        collection.query.return_value = {"ids": [["a"]], "distances": [[0.0]], "metadatas": None}
        matches = store.query([0.3], k=1, include_metadata=False)
        assert matches == [MatchResult(id="a", score=1.0, metadata={})]
        assert collection.query.call_args.kwargs["include"] == ["distances"]

    def test_health_check(self) -> None:
        store, client, _ = self._store()
        assert store.health_check() is True
        client.heartbeat.side_effect = ConnectionError("down")
        assert store.health_check() is False
