"""Embedding gateway wrapping a LangChain ``Embeddings`` backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cxxrag.errors import EmbeddingError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from cxxrag.config import Settings

logger = logging.getLogger(__name__)


class EmbeddingGateway:
    """Turns chunk texts into vectors through one backend call per batch.

    Any failure inside the backend is re-raised as
    :class:`~cxxrag.errors.EmbeddingError`.
    """

    def __init__(self, backend: Embeddings, *, model_name: str = "") -> None:
        self._backend = backend
        self.model_name = model_name

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per entry of *texts*, in the same order."""
        if not texts:
            return []
        try:
            vectors = self._backend.embed_documents(texts)
        except Exception as exc:
            raise EmbeddingError(f"embedding {len(texts)} texts failed: {exc}") from exc

        if len(vectors) != len(texts):
            raise EmbeddingError(f"expected {len(texts)} embeddings, got {len(vectors)}")
        return vectors

    def embed_one(self, text: str) -> list[float]:
        """Embed a single query text."""
        try:
            return self._backend.embed_query(text)
        except Exception as exc:
            raise EmbeddingError(f"embedding query failed: {exc}") from exc


def pull_ollama_model(settings: Settings) -> None:
    """Make sure ``settings.embedding_model`` is present on the Ollama server.

    Pulling a model that is already present is a no-op on the server side.

    Raises
    ------
    EmbeddingError
        The server could not be reached or refused the pull.
    """
    import ollama

    logger.info("Pulling Ollama model %s", settings.embedding_model)
    try:
        ollama.Client(host=settings.ollama_base_url).pull(settings.embedding_model)
    except Exception as exc:
        raise EmbeddingError(f"pulling model {settings.embedding_model!r} failed: {exc}") from exc


def get_embedding_gateway(settings: Settings) -> EmbeddingGateway:
    """Return the configured embedding gateway.

    ``ollama`` pulls the model and then talks to the server at
    ``settings.ollama_base_url``; ``huggingface`` loads a local
    sentence-transformer.

    Raises
    ------
    ValueError
        ``settings.embedding_backend`` names no known backend.
    EmbeddingError
        The backend could not be imported, constructed or bootstrapped.
    """
    if settings.embedding_backend not in ("ollama", "huggingface"):
        raise ValueError(f"Unsupported embedding_backend: {settings.embedding_backend!r}")

    try:
        if settings.embedding_backend == "ollama":
            from langchain_ollama import OllamaEmbeddings

            logger.info("Using Ollama embeddings: %s (%s)", settings.embedding_model, settings.ollama_base_url)
            backend = OllamaEmbeddings(model=settings.embedding_model, base_url=settings.ollama_base_url)
        else:
            from langchain_huggingface import HuggingFaceEmbeddings

            logger.info("Using HuggingFace embeddings: %s", settings.embedding_model)
            backend = HuggingFaceEmbeddings(model_name=settings.embedding_model)
    except Exception as exc:
        raise EmbeddingError(f"could not load {settings.embedding_backend} embeddings: {exc}") from exc

    if settings.embedding_backend == "ollama":
        pull_ollama_model(settings)

    return EmbeddingGateway(backend, model_name=settings.embedding_model)
