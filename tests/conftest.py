"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from fakes import FakeEmbeddings, FakeVectorStore
from ticket_rag.ingestion.embedder import EmbeddingClient


@pytest.fixture()
def fake_embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()


@pytest.fixture()
def embedder(fake_embeddings: FakeEmbeddings) -> EmbeddingClient:
    return EmbeddingClient(fake_embeddings, model="fake-embedding")


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def sample_ticket() -> dict[str, Any]:
    return {
        "respAbertura": "Renata Borges",
        "titulo": "Plus nao puxa a loja",
        "problema": "Plus nao puxa a loja ao fazer login",
        "solucao": "disco c estava cheio, executei plusinstall e deu certo",
        "menuSistema": "",
        "nomeCli": "FUFU LEGAL",
        "nomeFuncionarioCliente": "Daniel Machado",
        "Comentario": None,
    }
