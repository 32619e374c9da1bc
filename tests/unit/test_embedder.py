"""Unit tests for the embedding client adapter."""

from __future__ import annotations

import pytest

from ticket_rag.config import Settings
from ticket_rag.errors import UpstreamServiceError
from ticket_rag.ingestion.embedder import EmbeddingClient, get_embedding_function

from fakes import FakeEmbeddings, vector_for


class TestEmbeddingClient:
    def test_output_aligned_with_input(self, embedder: EmbeddingClient) -> None:
        texts = ["bbb", "a", "cc", ""]
        vectors = embedder.embed_batch(texts)
        assert vectors == [vector_for(t) for t in texts]

    def test_single_upstream_call_per_batch(
        self, embedder: EmbeddingClient, fake_embeddings: FakeEmbeddings
    ) -> None:
        embedder.embed_batch(["a", "b", "c"])
        assert fake_embeddings.calls == [["a", "b", "c"]]

    def test_empty_batch_skips_upstream(
        self, embedder: EmbeddingClient, fake_embeddings: FakeEmbeddings
    ) -> None:
        assert embedder.embed_batch([]) == []
        assert fake_embeddings.calls == []

    def test_length_mismatch_is_upstream_error(self) -> None:
        client = EmbeddingClient(FakeEmbeddings(drop_last=True), model="m")
        with pytest.raises(UpstreamServiceError, match="expected 2 vectors, got 1"):
            client.embed_batch(["a", "b"])

    def test_upstream_errors_propagate_unchanged(self) -> None:
        client = EmbeddingClient(FakeEmbeddings(fail_on_call=1), model="m")
        with pytest.raises(RuntimeError, match="quota"):
            client.embed_batch(["a"])

    def test_model_name_exposed(self, embedder: EmbeddingClient) -> None:
        assert embedder.model == "fake-embedding"


class TestGetEmbeddingFunction:
    def _settings(self, **overrides) -> Settings:
        values = {
            "openai_api_key": "sk-test",
            "embedding_model": "text-embedding-3-small",
            "ingest_batch_size": 100,
            "llm_base_url": "",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    def test_one_request_per_batch(self) -> None:
        emb = get_embedding_function(self._settings(), batch_size=50)
        assert emb.model == "text-embedding-3-small"
        assert emb.chunk_size == 50
        assert emb.check_embedding_ctx_length is False

    def test_defaults_to_ingest_batch_size(self) -> None:
        emb = get_embedding_function(self._settings(ingest_batch_size=25))
        assert emb.chunk_size == 25

    def test_base_url_forwarded(self) -> None:
        emb = get_embedding_function(self._settings(llm_base_url="http://vllm:8000/v1"))
        assert emb.openai_api_base == "http://vllm:8000/v1"
