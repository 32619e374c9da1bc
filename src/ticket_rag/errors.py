"""Error taxonomy shared by both pipelines and every transport."""

from __future__ import annotations


class TicketRAGError(Exception):
    """Base class for all errors raised by ``ticket_rag``."""


class ConfigurationError(TicketRAGError):
    """One or more required settings are absent.

    Raised before any upstream call is made.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing environment variables: {', '.join(self.missing)}")


class ValidationError(TicketRAGError):
    """Malformed caller input (non-list payload, empty question, bad top-k)."""


class UpstreamServiceError(TicketRAGError):
    """The embedding, vector-store or generation service call failed.

    Attributes
    ----------
    service:
        ``"embedding"``, ``"vector_store"`` or ``"generation"``.
    """

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        super().__init__(f"{service} service failed: {message}")


class IngestionError(UpstreamServiceError):
    """An ingestion batch failed; earlier batches remain persisted.

    Attributes
    ----------
    batch_index:
        Zero-based index of the batch that failed.
    batch_count:
        Total number of batches in the ingestion call.
    upserted_count:
        Entries upserted by the batches that completed before the failure.
    """

    def __init__(
        self,
        service: str,
        message: str,
        *,
        batch_index: int,
        batch_count: int,
        upserted_count: int,
    ) -> None:
        self.batch_index = batch_index
        self.batch_count = batch_count
        self.upserted_count = upserted_count
        super().__init__(
            service,
            f"batch {batch_index + 1}/{batch_count} aborted after "
            f"{upserted_count} upserted: {message}",
        )
