"""Embedding client — batched, order-preserving text → vector conversion."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ticket_rag.errors import UpstreamServiceError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_openai import OpenAIEmbeddings

    from ticket_rag.config import Settings

logger = logging.getLogger(__name__)


def get_embedding_function(settings: Settings, *, batch_size: int | None = None) -> OpenAIEmbeddings:
    """Return the configured OpenAI embedding function.

    ``chunk_size`` is pinned to the ingestion batch size so each call to
    ``embed_documents`` maps to exactly one API request, and the
    token-level context check is disabled so texts are sent as-is.
    """
    from langchain_openai import OpenAIEmbeddings

    kwargs: dict = {
        "model": settings.embedding_model,
        "api_key": settings.openai_api_key,
        "chunk_size": batch_size or settings.ingest_batch_size,
        "check_embedding_ctx_length": False,
    }
    if settings.llm_base_url:
        kwargs["base_url"] = settings.llm_base_url
    return OpenAIEmbeddings(**kwargs)


class EmbeddingClient:
    """Thin adapter over a LangChain :class:`Embeddings` implementation.

    Parameters
    ----------
    embeddings:
        Any LangChain embeddings object (``OpenAIEmbeddings`` in
        production, a fake in tests).
    model:
        Model name reported back to callers.
    """

    def __init__(self, embeddings: Embeddings, *, model: str) -> None:
        self._embeddings = embeddings
        self.model = model

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts* with a single upstream call.

        Output index ``i`` is the vector for ``texts[i]``.  Upstream
        errors propagate unchanged; a response of the wrong length is
        reported as :class:`UpstreamServiceError`.
        """
        batch = list(texts)
        if not batch:
            return []
        vectors = self._embeddings.embed_documents(batch)
        if len(vectors) != len(batch):
            raise UpstreamServiceError(
                "embedding",
                f"expected {len(batch)} vectors, got {len(vectors)}",
            )
        logger.debug("Embedded %d texts with model=%s", len(batch), self.model)
        return [list(v) for v in vectors]
