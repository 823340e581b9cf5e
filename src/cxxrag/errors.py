"""Exceptions that abort an indexing or query run."""

from __future__ import annotations


class CxxragError(Exception):
    """Base class for fatal errors surfaced to the command line."""


class EmbeddingError(CxxragError):
    """The embedding service failed or returned an unusable response."""


class StoreError(CxxragError):
    """The vector store could not be reached or rejected a request."""


class StoreResponseError(StoreError):
    """The vector store answered a query with a structurally invalid payload."""
