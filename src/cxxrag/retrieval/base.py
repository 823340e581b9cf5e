"""Abstract base class for vector-store backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing the three abstract methods.  The ingestion and query
pipelines are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cxxrag.retrieval.models import StoredRecord, StoreQueryResponse


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def upsert(self, records: list[StoredRecord]) -> None:
        """Write *records* in a single request.

        Implementations raise :class:`~cxxrag.errors.StoreError` when the
        backend cannot be reached or rejects the batch.
        """
        ...

    @abstractmethod
    def query(self, embedding: list[float], *, k: int = 5) -> StoreQueryResponse:
        """Return the top-*k* records nearest to *embedding*.

        Both documents and metadatas are requested.  The response is passed
        through unvalidated so callers decide which gaps are fatal.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
