"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from typing import Any

import chromadb
from chromadb.config import Settings as ChromaSettings
from chromadb.errors import UniqueConstraintError
from pydantic import ValidationError

from cxxrag.config import Settings
from cxxrag.errors import StoreError, StoreResponseError
from cxxrag.retrieval.base import VectorStoreBase
from cxxrag.retrieval.models import StoredRecord, StoreQueryResponse

logger = logging.getLogger(__name__)


def ensure_tenant_and_database(admin: Any, tenant: str, database: str) -> None:
    """Create *tenant* and *database* unless they already exist."""
    try:
        admin.create_tenant(tenant)
        logger.info("Created tenant %r", tenant)
    except UniqueConstraintError:
        admin.get_tenant(tenant)

    try:
        admin.create_database(database, tenant=tenant)
        logger.info("Created database %r in tenant %r", database, tenant)
    except UniqueConstraintError:
        admin.get_database(database, tenant=tenant)


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    collection:
        An already opened Chroma collection.
    client:
        The client that owns *collection*; used for heartbeats.
    """

    def __init__(self, collection: Any, *, client: Any = None) -> None:
        super().__init__(collection.name)
        self._collection = collection
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> ChromaVectorStore:
        """Connect to the configured server, provisioning tenant, database and collection."""
        logger.info("Connecting to Chroma at %s:%d", settings.chroma_host, settings.chroma_port)
        try:
            admin = chromadb.AdminClient(
                ChromaSettings(
                    chroma_api_impl="chromadb.api.fastapi.FastAPI",
                    chroma_server_host=settings.chroma_host,
                    chroma_server_http_port=settings.chroma_port,
                )
            )
            ensure_tenant_and_database(admin, settings.chroma_tenant, settings.chroma_database)

            client = chromadb.HttpClient(
                host=settings.chroma_host,
                port=settings.chroma_port,
                tenant=settings.chroma_tenant,
                database=settings.chroma_database,
            )
            # Embeddings are always computed client-side.
            collection = client.get_or_create_collection(
                settings.chroma_collection,
                metadata={"hnsw:space": settings.distance_metric},
                embedding_function=None,
            )
        except Exception as exc:
            raise StoreError(f"could not open Chroma collection {settings.chroma_collection!r}: {exc}") from exc

        return cls(collection, client=client)

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert(self, records: list[StoredRecord]) -> None:
        if not records:
            return
        try:
            self._collection.upsert(
                ids=[r.id for r in records],
                embeddings=[r.embedding for r in records],
                metadatas=[r.metadata.model_dump() for r in records],
                documents=[r.document for r in records],
            )
        except Exception as exc:
            raise StoreError(f"upsert of {len(records)} records failed: {exc}") from exc

    def query(self, embedding: list[float], *, k: int = 5) -> StoreQueryResponse:
        try:
            results = self._collection.query(
                query_embeddings=[embedding],
                n_results=k,
                include=["documents", "metadatas"],
            )
        except Exception as exc:
            raise StoreError(f"query failed: {exc}") from exc

        try:
            return StoreQueryResponse(
                documents=results.get("documents"),
                metadatas=results.get("metadatas"),
            )
        except ValidationError as exc:
            raise StoreResponseError(f"malformed query response: {exc}") from exc

    def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
