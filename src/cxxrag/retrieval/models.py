"""Domain models for stored records and query results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class ChunkMetadata(BaseModel):
    """Location of a chunk inside its source file.

    Attributes
    ----------
    path:
        The path the chunk was read from, exactly as it was given to the
        indexer.
    line:
        1-based row of the chunk's first byte, or ``0`` for a whole-file
        chunk.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    line: NonNegativeInt


class StoredRecord(BaseModel):
    """One row handed to the vector store."""

    id: str
    embedding: list[float]
    metadata: ChunkMetadata
    document: str


class StoreQueryResponse(BaseModel):
    """Raw nearest-neighbour answer from a store backend.

    Outer lists have one entry per submitted query embedding; inner lists
    are the ranked hits and may contain ``None`` where the store had no
    value.  Either list may be missing altogether when the backend omits it.
    """

    documents: list[list[str | None]] | None = None
    metadatas: list[list[dict | None]] | None = None


class QueryResult(BaseModel):
    """A single code hit, as printed by ``cxxrag --query``."""

    path: str
    line: int
    code: str = Field(description="Document text of the matched chunk")
