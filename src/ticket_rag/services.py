"""Service wiring — build every adapter once and inject it into the pipelines.

Usage::

    from ticket_rag.config import Settings
    from ticket_rag.services import build_services

    services = build_services(Settings())
    services.ingestion.ingest(records, "cli:ingest")
    print(services.answering.answer("Nota fiscal com cean inválido").answer)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ticket_rag.config import Settings
from ticket_rag.generation.llm import get_llm
from ticket_rag.generation.pipeline import AnswerPipeline
from ticket_rag.ingestion.embedder import EmbeddingClient, get_embedding_function
from ticket_rag.ingestion.pipeline import IngestionPipeline
from ticket_rag.retrieval.base import VectorStoreBase
from ticket_rag.retrieval.retriever import TicketRetriever

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Adapters and pipelines sharing one validated configuration."""

    settings: Settings
    embedder: EmbeddingClient
    store: VectorStoreBase
    llm: Any
    ingestion: IngestionPipeline
    answering: AnswerPipeline


def build_vector_store(settings: Settings) -> VectorStoreBase:
    """Instantiate the backend selected by ``settings.vector_backend``."""
    if settings.vector_backend == "chroma":
        from ticket_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore(
            settings.vector_index,
            settings.vector_namespace,
            host=settings.chroma_host,
            port=settings.chroma_port,
        )

    from ticket_rag.retrieval.pinecone_store import PineconeVectorStore

    return PineconeVectorStore(
        settings.vector_index,
        settings.vector_namespace,
        api_key=settings.pinecone_api_key,
    )


def assemble_services(
    settings: Settings,
    *,
    embedder: EmbeddingClient,
    store: VectorStoreBase,
    llm: Any,
) -> Services:
    """Wire pre-built adapters into both pipelines."""
    retriever = TicketRetriever(embedder, store)
    return Services(
        settings=settings,
        embedder=embedder,
        store=store,
        llm=llm,
        ingestion=IngestionPipeline(embedder, store, batch_size=settings.ingest_batch_size),
        answering=AnswerPipeline(
            retriever,
            llm,
            max_context_chars=settings.max_context_chars,
            default_top_k=settings.default_top_k,
        ),
    )


def build_services(settings: Settings) -> Services:
    """Validate *settings* and construct the production adapters.

    Raises
    ------
    ConfigurationError
        A required credential or index name is missing.  No client is
        created in that case.
    """
    settings.ensure_configured()
    logger.info(
        "Initialising services: backend=%s index=%s namespace=%s embedding=%s chat=%s",
        settings.vector_backend,
        settings.vector_index,
        settings.vector_namespace,
        settings.embedding_model,
        settings.llm_model_name,
    )
    embedder = EmbeddingClient(
        get_embedding_function(settings),
        model=settings.embedding_model,
    )
    return assemble_services(
        settings,
        embedder=embedder,
        store=build_vector_store(settings),
        llm=get_llm(settings),
    )
