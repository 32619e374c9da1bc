"""Pinecone implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ticket_rag.retrieval.base import VectorStoreBase
from ticket_rag.retrieval.models import MatchResult, VectorIndexEntry

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read *name* from an SDK response object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


class PineconeVectorStore(VectorStoreBase):
    """Pinecone-backed vector store.

    Parameters
    ----------
    index_name:
        Name of an existing Pinecone index.
    namespace:
        Optional namespace; ``None`` targets the default namespace.
    api_key:
        Pinecone API key.  Ignored when *index* is given.
    index:
        Pre-built index handle (tests inject a fake here).
    """

    def __init__(
        self,
        index_name: str,
        namespace: str | None = None,
        *,
        api_key: str = "",
        index: Any = None,
    ) -> None:
        super().__init__(index_name, namespace)
        if index is None:
            from pinecone import Pinecone

            index = Pinecone(api_key=api_key).Index(index_name)
        self._index = index

    def _namespace_kwargs(self) -> dict[str, str]:
        return {"namespace": self.namespace} if self.namespace else {}

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert(self, entries: Sequence[VectorIndexEntry]) -> None:
        vectors = [
            {"id": e.id, "values": e.values, "metadata": e.metadata}
            for e in entries
        ]
        if not vectors:
            return
        self._index.upsert(vectors=vectors, **self._namespace_kwargs())
        logger.debug(
            "Upserted %d vectors into %s (namespace=%s)",
            len(vectors), self.index_name, self.namespace,
        )

    def query(
        self,
        vector: list[float],
        *,
        k: int,
        include_metadata: bool = True,
    ) -> list[MatchResult]:
        response = self._index.query(
            vector=vector,
            top_k=k,
            include_metadata=include_metadata,
            **self._namespace_kwargs(),
        )
        return [
            MatchResult(
                id=_field(m, "id"),
                score=_field(m, "score") or 0.0,
                metadata=_field(m, "metadata") or {},
            )
            for m in (_field(response, "matches") or [])
        ]

    def health_check(self) -> bool:
        try:
            self._index.describe_index_stats()
            return True
        except Exception:
            logger.warning("Pinecone health-check failed", exc_info=True)
            return False
