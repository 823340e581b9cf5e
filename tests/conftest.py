"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest
from langchain_core.embeddings import Embeddings

from cxxrag.errors import StoreError
from cxxrag.ingestion.embedder import EmbeddingGateway
from cxxrag.retrieval.base import VectorStoreBase
from cxxrag.retrieval.models import StoredRecord, StoreQueryResponse


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes for deterministic testing ─────────────────────────────────────


class RecordingEmbeddings(Embeddings):
    """Deterministic LangChain embeddings that remember every call."""

    def __init__(self, *, fail: bool = False) -> None:
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []
        self._fail = fail

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if self._fail:
            raise RuntimeError("connection refused")
        self.document_calls.append(list(texts))
        return [[float(len(t)), 1.0] for t in texts]

    def embed_query(self, text: str) -> list[float]:
        if self._fail:
            raise RuntimeError("connection refused")
        self.query_calls.append(text)
        return [float(len(text)), 0.5]


class FakeVectorStore(VectorStoreBase):
    """In-memory store that records upserts and returns a canned query response."""

    def __init__(
        self,
        response: StoreQueryResponse | None = None,
        *,
        fail_upsert_after: int | None = None,
        healthy: bool = True,
    ) -> None:
        super().__init__("test-collection")
        self.upserts: list[list[StoredRecord]] = []
        self.queries: list[tuple[list[float], int]] = []
        self._response = response or StoreQueryResponse(documents=[[]], metadatas=[[]])
        self._fail_upsert_after = fail_upsert_after
        self._healthy = healthy

    @property
    def records(self) -> list[StoredRecord]:
        return [r for batch in self.upserts for r in batch]

    def upsert(self, records: list[StoredRecord]) -> None:
        if self._fail_upsert_after is not None and len(self.upserts) >= self._fail_upsert_after:
            raise StoreError("store unavailable")
        self.upserts.append(list(records))

    def query(self, embedding: list[float], *, k: int = 5) -> StoreQueryResponse:
        self.queries.append((embedding, k))
        return StoreQueryResponse(
            documents=None if self._response.documents is None else [g[:k] for g in self._response.documents],
            metadatas=None if self._response.metadatas is None else [g[:k] for g in self._response.metadatas],
        )

    def health_check(self) -> bool:
        return self._healthy


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def backend() -> RecordingEmbeddings:
    return RecordingEmbeddings()


@pytest.fixture()
def embedder(backend: RecordingEmbeddings) -> EmbeddingGateway:
    return EmbeddingGateway(backend, model_name="fake")


@pytest.fixture()
def store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def make_store() -> type[FakeVectorStore]:
    """Factory for stores with a custom response or failure point."""
    return FakeVectorStore


@pytest.fixture()
def make_backend() -> type[RecordingEmbeddings]:
    return RecordingEmbeddings
