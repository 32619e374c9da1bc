"""Abstract base class for vector-store backends.

Adding a new backend (Weaviate, Qdrant …) only requires subclassing
:class:`VectorStoreBase` and implementing the three abstract methods.
Both pipelines are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ticket_rag.retrieval.models import MatchResult, VectorIndexEntry


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    index_name:
        Name of the index / collection.
    namespace:
        Optional logical partition inside the index.
    """

    def __init__(self, index_name: str, namespace: str | None = None) -> None:
        self.index_name = index_name
        self.namespace = namespace or None

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def upsert(self, entries: Sequence[VectorIndexEntry]) -> None:
        """Insert or overwrite *entries* by id in a single call."""
        ...

    @abstractmethod
    def query(
        self,
        vector: list[float],
        *,
        k: int,
        include_metadata: bool = True,
    ) -> list[MatchResult]:
        """Return the *k* nearest neighbours of *vector*.

        Results are in the order the backend returns them (descending
        similarity); no client-side re-sorting.  Callers clamp *k*.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
