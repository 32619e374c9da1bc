"""Ingestion pipeline — tickets in, vectors upserted.

Flow per batch (batches run strictly one after another)::

    canonicalize → embed (1 call) → build entries → upsert (1 call)

Ids are deterministic, so re-running an ingestion converges on the same
index state.  There is no rollback: when batch *i* fails, batches
``0 .. i-1`` stay in the index and an :class:`IngestionError` reports how
far the run got.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from ticket_rag.errors import IngestionError, UpstreamServiceError, ValidationError
from ticket_rag.ingestion.embedder import EmbeddingClient
from ticket_rag.ingestion.metadata import ticket_metadata
from ticket_rag.records import canonicalize, deterministic_id
from ticket_rag.retrieval.base import VectorStoreBase
from ticket_rag.retrieval.models import IngestionResult, VectorIndexEntry

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_records(records: Any) -> list[Mapping[str, Any]]:
    """Return *records* as a list, or raise :class:`ValidationError`.

    The payload must be an ordered list (or tuple) of mappings.
    """
    if not isinstance(records, (list, tuple)):
        raise ValidationError(
            f"records must be a list of objects, got {type(records).__name__}"
        )
    for position, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ValidationError(
                f"record {position} must be an object, got {type(record).__name__}"
            )
    return list(records)


class IngestionPipeline:
    """Batch tickets through the embedding service into the vector store.

    Parameters
    ----------
    embedder:
        Embedding adapter; called once per batch.
    store:
        Target vector store; ``upsert`` is called once per batch.
    batch_size:
        Records per batch.
    """

    def __init__(
        self,
        embedder: EmbeddingClient,
        store: VectorStoreBase,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._embedder = embedder
        self._store = store
        self.batch_size = batch_size

    def ingest(self, records: Any, source_tag: str) -> IngestionResult:
        """Embed and upsert *records*, tagging their metadata with *source_tag*.

        Raises
        ------
        ValidationError
            *records* is not a list of mappings.  Nothing is sent upstream.
        IngestionError
            An embedding or upsert call failed mid-run.
        """
        items = validate_records(records)
        batch_count = -(-len(items) // self.batch_size)
        logger.info(
            "Ingesting %d record(s) in %d batch(es) from %s",
            len(items), batch_count, source_tag,
        )

        upserted = 0
        for batch_index, start in enumerate(range(0, len(items), self.batch_size)):
            chunk = items[start : start + self.batch_size]
            stage = "embedding"
            try:
                texts = [canonicalize(record) for record in chunk]
                vectors = self._embedder.embed_batch(texts)

                created_at = _utc_timestamp()
                entries = [
                    VectorIndexEntry(
                        id=deterministic_id(record, start + offset),
                        values=vectors[offset],
                        metadata=ticket_metadata(record, created_at=created_at, source=source_tag),
                    )
                    for offset, record in enumerate(chunk)
                ]

                stage = "vector_store"
                self._store.upsert(entries)
            except Exception as exc:
                logger.exception(
                    "Batch %d/%d failed during %s (upserted so far: %d)",
                    batch_index + 1, batch_count, stage, upserted,
                )
                service = exc.service if isinstance(exc, UpstreamServiceError) else stage
                raise IngestionError(
                    service,
                    str(exc),
                    batch_index=batch_index,
                    batch_count=batch_count,
                    upserted_count=upserted,
                ) from exc

            upserted += len(entries)
            logger.info(
                "Upserted batch %d/%d: +%d (total=%d)",
                batch_index + 1, batch_count, len(entries), upserted,
            )

        return IngestionResult(
            upserted_count=upserted,
            index_name=self._store.index_name,
            namespace=self._store.namespace,
            embedding_model=self._embedder.model,
        )
