"""Ticket retriever — question embedding plus nearest-neighbour lookup.

Usage::

    retriever = TicketRetriever(embedder, store)
    matches = retriever.retrieve("Plus não puxa a loja", k=5)
    for m in matches:
        print(m.id, m.score, m.metadata.get("titulo"))
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from ticket_rag.errors import UpstreamServiceError, ValidationError
from ticket_rag.retrieval.base import VectorStoreBase
from ticket_rag.retrieval.models import MatchResult

if TYPE_CHECKING:
    from ticket_rag.ingestion.embedder import EmbeddingClient

logger = logging.getLogger(__name__)

MIN_TOP_K = 1
MAX_TOP_K = 30
DEFAULT_TOP_K = 20


def clamp_top_k(
    top_k: Any,
    *,
    default: int = DEFAULT_TOP_K,
    lower: int = MIN_TOP_K,
    upper: int = MAX_TOP_K,
) -> int:
    """Coerce a caller-supplied *top_k* into ``[lower, upper]``.

    ``None`` and ``""`` select *default*.  Numeric strings are accepted
    (values usually arrive from JSON or query strings); anything that is
    not a finite number raises :class:`ValidationError`.
    """
    if top_k is None or top_k == "":
        value = default
    elif isinstance(top_k, bool):
        raise ValidationError(f"topK must be a number, got {top_k!r}")
    else:
        try:
            number = float(top_k)
        except (TypeError, ValueError):
            raise ValidationError(f"topK must be a number, got {top_k!r}") from None
        if not math.isfinite(number):
            raise ValidationError(f"topK must be finite, got {top_k!r}")
        value = int(number)
    return max(lower, min(upper, value))


class TicketRetriever:
    """Embed a question and fetch its nearest stored tickets.

    Parameters
    ----------
    embedder:
        Embedding adapter shared with ingestion, so questions and tickets
        live in the same vector space.
    store:
        A concrete vector-store backend.
    """

    def __init__(self, embedder: EmbeddingClient, store: VectorStoreBase) -> None:
        self._embedder = embedder
        self._store = store

    @property
    def store(self) -> VectorStoreBase:
        return self._store

    def retrieve(self, question: str, *, k: int) -> list[MatchResult]:
        """Return the top-*k* matches for *question*, metadata included.

        *k* must already be clamped (see :func:`clamp_top_k`).
        """
        try:
            [vector] = self._embedder.embed_batch([question])
        except UpstreamServiceError as exc:
            logger.error("Question embedding failed: %s", exc)
            raise
        except Exception as exc:
            logger.error("Question embedding failed: %s", exc)
            raise UpstreamServiceError("embedding", str(exc)) from exc

        try:
            matches = self._store.query(vector, k=k, include_metadata=True)
        except Exception as exc:
            logger.error("Vector query failed on %s: %s", self._store.index_name, exc)
            raise UpstreamServiceError("vector_store", str(exc)) from exc

        logger.info("Retrieved %d match(es) (k=%d)", len(matches), k)
        return matches
