"""Chroma implementation of the vector-store abstraction.

Useful for self-hosted / local deployments.  Chroma has no namespaces, so
a namespace selects its own collection (``<index>__<namespace>``).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ticket_rag.retrieval.base import VectorStoreBase
from ticket_rag.retrieval.models import MatchResult, VectorIndexEntry

logger = logging.getLogger(__name__)


def collection_name_for(index_name: str, namespace: str | None) -> str:
    """Return the Chroma collection backing *index_name* / *namespace*."""
    return f"{index_name}__{namespace}" if namespace else index_name


def _flatten_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Chroma metadata values must be flat str/int/float/bool."""
    return {
        key: ",".join(value) if isinstance(value, list) else value
        for key, value in metadata.items()
    }


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    index_name:
        Base collection name.
    namespace:
        Optional namespace, mapped to a separate collection.
    host / port:
        Chroma server location.  Ignored when *client* is given.
    client:
        Pre-built Chroma client (tests inject a fake here).
    """

    def __init__(
        self,
        index_name: str,
        namespace: str | None = None,
        *,
        host: str = "localhost",
        port: int = 8000,
        client: Any = None,
    ) -> None:
        super().__init__(index_name, namespace)
        if client is None:
            import chromadb

            client = chromadb.HttpClient(host=host, port=port)
        self._client = client
        self._collection = client.get_or_create_collection(
            name=collection_name_for(index_name, self.namespace),
            metadata={"hnsw:space": "cosine"},
        )

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert(self, entries: Sequence[VectorIndexEntry]) -> None:
        if not entries:
            return
        self._collection.upsert(
            ids=[e.id for e in entries],
            embeddings=[e.values for e in entries],
            metadatas=[_flatten_metadata(e.metadata) or None for e in entries],
        )

    def query(
        self,
        vector: list[float],
        *,
        k: int,
        include_metadata: bool = True,
    ) -> list[MatchResult]:
        include = ["metadatas", "distances"] if include_metadata else ["distances"]
        results = self._collection.query(
            query_embeddings=[vector],
            n_results=k,
            include=include,
        )

        ids = (results.get("ids") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0] or [None] * len(ids)

        hits: list[MatchResult] = []
        for doc_id, dist, meta in zip(ids, distances, metas):
            # Cosine distance → similarity.
            hits.append(MatchResult(id=doc_id, score=1.0 - dist, metadata=meta or {}))
        return hits

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
