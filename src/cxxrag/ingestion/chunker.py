"""Declaration-level chunking of source files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tree_sitter import Parser

from cxxrag.ingestion.models import OPAQUE_LINE, Chunk

if TYPE_CHECKING:
    from tree_sitter import Node

    from cxxrag.ingestion.languages import Grammar
    from cxxrag.ingestion.models import SourceUnit

#: Node kinds emitted as chunks.  Matching nodes are not descended into,
#: so a method defined inside a class body stays part of the class chunk.
DECLARATION_KINDS: frozenset[str] = frozenset(
    {
        "function_definition",
        "struct_specifier",
        "class_specifier",
        "enum_specifier",
    }
)


class ParseError(ValueError):
    """The parser produced no tree for a file."""


def extract(root: Node, source: bytes, path: str) -> list[Chunk]:
    """Return the outermost declaration nodes under *root* as chunks.

    Depth-first, in source order.  The root itself is never emitted.
    """
    chunks: list[Chunk] = []
    stack = list(reversed(root.children))
    while stack:
        node = stack.pop()
        if node.type in DECLARATION_KINDS:
            chunks.append(
                Chunk(
                    path=path,
                    line=node.start_point[0] + 1,
                    text=source[node.start_byte : node.end_byte].decode("utf-8", errors="replace"),
                    start_byte=node.start_byte,
                    end_byte=node.end_byte,
                )
            )
            continue
        stack.extend(reversed(node.children))
    return chunks


def chunk_source(unit: SourceUnit, grammar: Grammar | None) -> list[Chunk]:
    """Split *unit* into chunks.

    Parameters
    ----------
    unit:
        The file to split.
    grammar:
        Structural grammar, or ``None`` to emit the whole file as one chunk.

    Returns
    -------
    list[Chunk]
        Non-overlapping chunks in source order.

    Raises
    ------
    ParseError
        The grammar could not parse the file.
    UnicodeDecodeError
        An opaque file is not valid UTF-8.
    """
    if grammar is None:
        return [
            Chunk(
                path=unit.path,
                line=OPAQUE_LINE,
                text=unit.raw_bytes.decode("utf-8"),
                start_byte=0,
                end_byte=len(unit.raw_bytes),
            )
        ]

    parser = Parser(grammar.language)
    tree = parser.parse(unit.raw_bytes)
    if tree is None:
        raise ParseError("could not parse")
    return extract(tree.root_node, unit.raw_bytes, unit.path)
