"""Batched ingestion: read, chunk, embed, and upsert a stream of paths.

Paths are processed strictly in input order.  Record IDs are a running
integer counter, so the stored ID of a chunk is its position in the
overall chunk stream of the run::

    pipeline = IngestionPipeline(embedder, store)
    stats = pipeline.run(iter_paths(sys.stdin.buffer))
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO

from cxxrag.ingestion.batch import BatchAccumulator
from cxxrag.ingestion.chunker import ParseError, chunk_source
from cxxrag.ingestion.languages import LanguageDetector, UnsupportedPathError, printable_path
from cxxrag.ingestion.models import Chunk, SourceUnit
from cxxrag.retrieval.models import StoredRecord

if TYPE_CHECKING:
    from cxxrag.ingestion.embedder import EmbeddingGateway
    from cxxrag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


@dataclass
class IngestionStats:
    """Counters reported at the end of a run."""

    files_read: int = 0
    files_skipped: int = 0
    chunks: int = 0
    batches: int = 0
    records_stored: int = 0


def iter_paths(stream: BinaryIO) -> Iterator[str]:
    """Yield one path per non-empty line of the binary *stream*.

    Lines are decoded with :func:`os.fsdecode`, so bytes that are not valid
    in the filesystem encoding survive as surrogates and still open.
    """
    for line in stream:
        raw = line.rstrip(b"\r\n")
        if raw:
            yield os.fsdecode(raw)


def read_source(path: str) -> SourceUnit:
    """Read *path* completely; the handle is closed before returning.

    The unit carries the printable form of *path*, which is what gets stored.
    """
    with open(path, "rb") as fh:
        return SourceUnit(path=printable_path(path), raw_bytes=fh.read())


class IngestionPipeline:
    """Drives detection and chunking per path and flushes full batches.

    Parameters
    ----------
    embedder:
        Gateway called once per flush with every pending chunk text.
    store:
        Backend receiving one upsert per flush.
    detector:
        Grammar selection; defaults to the C / C++ extension table.
    batch_threshold:
        Pending chunk count that triggers a flush after a file.
    """

    def __init__(
        self,
        embedder: EmbeddingGateway,
        store: VectorStoreBase,
        *,
        detector: LanguageDetector | None = None,
        batch_threshold: int = 512,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self._detector = detector or LanguageDetector()
        self._batch = BatchAccumulator(batch_threshold)
        self._offset = 0
        self.stats = IngestionStats()

    @property
    def offset(self) -> int:
        """The next unused record ID."""
        return self._offset

    @property
    def pending(self) -> int:
        return len(self._batch)

    # -- public API -----------------------------------------------------------

    def run(self, paths: Iterable[str]) -> IngestionStats:
        """Ingest every path, then flush whatever is still pending.

        Raises
        ------
        EmbeddingError, StoreError
            A flush failed; records from earlier flushes stay in the store.
        """
        logger.info("Traversing input paths")
        for path in paths:
            self.ingest_path(path)

        if len(self._batch):
            self.flush()

        logger.info(
            "Done: %d files read, %d skipped, %d chunks stored in %d batches",
            self.stats.files_read,
            self.stats.files_skipped,
            self.stats.records_stored,
            self.stats.batches,
        )
        return self.stats

    def ingest_path(self, path: str) -> list[Chunk]:
        """Chunk one file into the pending batch and flush if it is full.

        Unreadable or unsupported files are logged and yield no chunks.
        """
        chunks = self._chunk_path(path)
        if chunks is None:
            self.stats.files_skipped += 1
            return []

        self.stats.files_read += 1
        self.stats.chunks += len(chunks)
        self._batch.extend(chunks)

        if self._batch.is_full():
            self.flush()
        return chunks

    def flush(self) -> None:
        """Embed and upsert the pending batch, assigning the next IDs."""
        size = len(self._batch)
        if not size:
            return

        logger.info("Sending batch (%d)", size)
        documents = self._batch.documents
        embeddings = self._embedder.embed(documents)

        records = [
            StoredRecord(id=str(self._offset + i), embedding=embedding, metadata=meta, document=doc)
            for i, (embedding, meta, doc) in enumerate(zip(embeddings, self._batch.metadatas, documents))
        ]
        self._store.upsert(records)

        self._offset += size
        self._batch.clear()
        self.stats.batches += 1
        self.stats.records_stored += size

    # -- internals ------------------------------------------------------------

    def _chunk_path(self, path: str) -> list[Chunk] | None:
        label = printable_path(path)
        try:
            unit = read_source(path)
        except OSError as exc:
            logger.warning("%s: %s", label, exc)
            return None

        try:
            grammar = self._detector.detect(path)
        except UnsupportedPathError as exc:
            logger.warning("%s: %s", label, exc)
            return None

        try:
            return chunk_source(unit, grammar)
        except ParseError as exc:
            logger.warning("%s: %s", label, exc)
        except UnicodeDecodeError as exc:
            logger.warning("%s: not valid utf-8 (%s)", label, exc.reason)
        return None
