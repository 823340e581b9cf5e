"""Transient ingestion records, kept as plain dataclasses."""

from __future__ import annotations

from dataclasses import dataclass

from cxxrag.retrieval.models import ChunkMetadata

#: Line value used for chunks that span a whole, unparsed file.
OPAQUE_LINE = 0


@dataclass(frozen=True)
class SourceUnit:
    """The raw content of one input path.

    Attributes
    ----------
    path:
        The path as read from the input stream.
    raw_bytes:
        The complete file content.
    """

    path: str
    raw_bytes: bytes


@dataclass(frozen=True)
class Chunk:
    """A fragment of a source file selected for independent indexing.

    Attributes
    ----------
    path:
        Source path the fragment came from.
    line:
        1-based row of the first byte, or :data:`OPAQUE_LINE`.
    text:
        The fragment's source text.
    start_byte / end_byte:
        Half-open byte range of the fragment inside the file.
    """

    path: str
    line: int
    text: str
    start_byte: int = 0
    end_byte: int = 0

    @property
    def metadata(self) -> ChunkMetadata:
        return ChunkMetadata(path=self.path, line=self.line)
