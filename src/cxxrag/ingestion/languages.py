"""Extension-based grammar selection.

Each grammar family is backed by a per-language tree-sitter package and
loaded at most once per process.  Files whose extension is not mapped are
handled in opaque (whole-file) mode.
"""

from __future__ import annotations

import importlib
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePath

from tree_sitter import Language

logger = logging.getLogger(__name__)

#: Grammar family → tree-sitter language package.
GRAMMAR_PACKAGES: dict[str, str] = {
    "c": "tree_sitter_c",
    "cpp": "tree_sitter_cpp",
}

#: Extension (without the dot, case-sensitive) → grammar family.
DEFAULT_EXTENSIONS: dict[str, str] = {
    "cpp": "cpp",
    "cxx": "cpp",
    "cc": "cpp",
    "hpp": "cpp",
    "hxx": "cpp",
    "h": "cpp",
    "c": "c",
}


class UnsupportedPathError(ValueError):
    """The path has no usable extension; the file is skipped."""


@dataclass(frozen=True)
class Grammar:
    """Handle to a loaded structural parser language."""

    name: str
    language: Language


@lru_cache(maxsize=None)
def load_grammar(name: str) -> Grammar:
    """Return the process-wide :class:`Grammar` for family *name*."""
    try:
        package = GRAMMAR_PACKAGES[name]
    except KeyError:
        raise ValueError(f"Unknown grammar family: {name!r}") from None

    mod = importlib.import_module(package)
    logger.debug("Loaded tree-sitter grammar %s from %s", name, package)
    return Grammar(name=name, language=Language(mod.language()))


def printable_path(path: str) -> str:
    """Return *path* as valid text, with undecodable bytes replaced by U+FFFD."""
    return os.fsencode(path).decode("utf-8", errors="replace")


def file_extension(path: str) -> str:
    """Return the extension of *path* without its leading dot.

    Raises
    ------
    UnsupportedPathError
        When the path has no extension or the extension is not valid text.
    """
    suffix = PurePath(path).suffix
    if not suffix:
        raise UnsupportedPathError("missing extension")

    ext = suffix[1:]
    try:
        ext.encode("utf-8")
    except UnicodeEncodeError:
        raise UnsupportedPathError("invalid utf8 in extension") from None
    return ext


class LanguageDetector:
    """Maps paths to grammars.

    Parameters
    ----------
    extensions:
        Extension → grammar family table.  Families must be keys of
        :data:`GRAMMAR_PACKAGES`.
    """

    def __init__(self, extensions: Mapping[str, str] | None = None) -> None:
        self._extensions = dict(DEFAULT_EXTENSIONS if extensions is None else extensions)

    def detect(self, path: str) -> Grammar | None:
        """Return the grammar for *path*, or ``None`` for opaque mode."""
        ext = file_extension(path)
        family = self._extensions.get(ext)
        if family is None:
            logger.info("*.%s: unknown language, indexing %s as a whole file", ext, printable_path(path))
            return None
        return load_grammar(family)
