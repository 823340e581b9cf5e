"""Pending chunks waiting to be embedded and stored."""

from __future__ import annotations

from collections.abc import Iterable

from cxxrag.ingestion.models import Chunk
from cxxrag.retrieval.models import ChunkMetadata


class BatchAccumulator:
    """Collects chunks across files until *threshold* is reached.

    The threshold is advisory: callers check :meth:`is_full` between
    files, so one large file can push the batch past it.
    """

    def __init__(self, threshold: int = 512) -> None:
        if threshold <= 0:
            raise ValueError(f"threshold must be positive, got {threshold}")
        self.threshold = threshold
        self._chunks: list[Chunk] = []

    def __len__(self) -> int:
        return len(self._chunks)

    def extend(self, chunks: Iterable[Chunk]) -> None:
        self._chunks.extend(chunks)

    def is_full(self) -> bool:
        return len(self._chunks) >= self.threshold

    @property
    def documents(self) -> list[str]:
        return [c.text for c in self._chunks]

    @property
    def metadatas(self) -> list[ChunkMetadata]:
        return [c.metadata for c in self._chunks]

    def clear(self) -> None:
        self._chunks.clear()
