"""
Retrieval — vector-store access and query result assembly.

This module wraps the vector store behind a small interface so that the
ingestion and query pipelines never need to know which DB is backing
them.

Public surface
--------------
- :class:`CodeRetriever` — embeds a question and returns ranked code hits.
- :class:`VectorStoreBase` — abstract backend.
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`ChunkMetadata`, :class:`StoredRecord`, :class:`QueryResult` — data models.
"""

from cxxrag.retrieval.base import VectorStoreBase
from cxxrag.retrieval.models import ChunkMetadata, QueryResult, StoredRecord, StoreQueryResponse
from cxxrag.retrieval.retriever import CodeRetriever

__all__ = [
    "ChromaVectorStore",
    "ChunkMetadata",
    "CodeRetriever",
    "QueryResult",
    "StoreQueryResponse",
    "StoredRecord",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from cxxrag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
