"""Unit tests for the embedding gateway."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from cxxrag.config import Settings
from cxxrag.errors import EmbeddingError
from cxxrag.ingestion.embedder import EmbeddingGateway, get_embedding_gateway, pull_ollama_model


class TestEmbeddingGateway:
    def test_embed_returns_one_vector_per_text(self, embedder: EmbeddingGateway, backend) -> None:
        vectors = embedder.embed(["a", "bbb"])
        assert vectors == [[1.0, 1.0], [3.0, 1.0]]
        assert backend.document_calls == [["a", "bbb"]]

    def test_embed_empty_list_skips_backend(self, embedder: EmbeddingGateway, backend) -> None:
        assert embedder.embed([]) == []
        assert backend.document_calls == []

    def test_backend_failure_is_wrapped(self, make_backend) -> None:
        gateway = EmbeddingGateway(make_backend(fail=True))
        with pytest.raises(EmbeddingError, match="embedding 1 texts failed") as excinfo:
            gateway.embed(["x"])
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_count_mismatch_is_fatal(self) -> None:
        backend = MagicMock()
        backend.embed_documents.return_value = [[0.1]]
        gateway = EmbeddingGateway(backend)
        with pytest.raises(EmbeddingError, match="expected 2 embeddings, got 1"):
            gateway.embed(["a", "b"])

    def test_embed_one_uses_query_embedding(self, embedder: EmbeddingGateway, backend) -> None:
        assert embedder.embed_one("hello") == [5.0, 0.5]
        assert backend.query_calls == ["hello"]

    def test_embed_one_failure_is_wrapped(self, make_backend) -> None:
        gateway = EmbeddingGateway(make_backend(fail=True))
        with pytest.raises(EmbeddingError):
            gateway.embed_one("hello")


def _ollama_settings() -> Settings:
    return Settings(
        _env_file=None,
        embedding_backend="ollama",
        embedding_model="nomic-embed-text",
        ollama_base_url="http://ollama:11434",
    )


def _embedded_texts(embed_call) -> list[str]:
    args, kwargs = embed_call
    return kwargs["input"] if "input" in kwargs else args[1]


class TestGetEmbeddingGateway:
    def test_ollama_backend(self) -> None:
        with patch("langchain_ollama.OllamaEmbeddings") as ollama_cls, patch("ollama.Client.pull"):
            gateway = get_embedding_gateway(_ollama_settings())

        ollama_cls.assert_called_once_with(model="nomic-embed-text", base_url="http://ollama:11434")
        assert gateway.model_name == "nomic-embed-text"

    def test_ollama_batch_is_one_request_with_raw_texts(self) -> None:
        texts = ["int foo(void) {}", "struct Bar {}", "whole file"]
        with patch("ollama.Client.pull"), patch("ollama.Client.embed") as embed:
            embed.return_value = {"embeddings": [[0.1, 0.2], [0.3, 0.4], [0.5, 0.6]]}
            gateway = get_embedding_gateway(_ollama_settings())
            vectors = gateway.embed(texts)

        assert embed.call_count == 1
        assert _embedded_texts(embed.call_args) == texts
        assert vectors == [[0.1, 0.2], [0.3, 0.4], [0.5, 0.6]]

    def test_ollama_query_text_is_sent_unchanged(self) -> None:
        with patch("ollama.Client.pull"), patch("ollama.Client.embed") as embed:
            embed.return_value = {"embeddings": [[0.7, 0.8]]}
            gateway = get_embedding_gateway(_ollama_settings())
            vector = gateway.embed_one("where is the socket closed")

        assert embed.call_count == 1
        assert _embedded_texts(embed.call_args) == ["where is the socket closed"]
        assert vector == [0.7, 0.8]

    def test_ollama_model_is_pulled_at_startup(self) -> None:
        with patch("ollama.Client") as client_cls, patch("langchain_ollama.OllamaEmbeddings"):
            get_embedding_gateway(_ollama_settings())

        client_cls.assert_called_once_with(host="http://ollama:11434")
        client_cls.return_value.pull.assert_called_once_with("nomic-embed-text")

    def test_failed_pull_is_wrapped(self) -> None:
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.pull.side_effect = ConnectionError("connection refused")
            with pytest.raises(EmbeddingError, match="pulling model 'nomic-embed-text' failed") as excinfo:
                pull_ollama_model(_ollama_settings())
        assert isinstance(excinfo.value.__cause__, ConnectionError)

    def test_backend_construction_failure_is_wrapped(self) -> None:
        with patch("langchain_ollama.OllamaEmbeddings", side_effect=RuntimeError("bad model config")):
            with pytest.raises(EmbeddingError, match="could not load ollama embeddings") as excinfo:
                get_embedding_gateway(_ollama_settings())
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_missing_backend_package_is_wrapped(self) -> None:
        settings = Settings(_env_file=None, embedding_backend="huggingface", embedding_model="all-MiniLM-L6-v2")
        with patch.dict("sys.modules", {"langchain_huggingface": None}):
            with pytest.raises(EmbeddingError, match="could not load huggingface embeddings") as excinfo:
                get_embedding_gateway(settings)
        assert isinstance(excinfo.value.__cause__, ImportError)

    def test_huggingface_backend(self) -> None:
        try:
            import langchain_huggingface  # noqa: F401
        except Exception:
            pytest.skip("langchain_huggingface not importable in this environment")

        settings = Settings(
            _env_file=None,
            embedding_backend="huggingface",
            embedding_model="sentence-transformers/all-MiniLM-L6-v2",
        )
        with patch("langchain_huggingface.HuggingFaceEmbeddings") as hf_cls, patch("ollama.Client") as client_cls:
            gateway = get_embedding_gateway(settings)

        hf_cls.assert_called_once_with(model_name="sentence-transformers/all-MiniLM-L6-v2")
        client_cls.assert_not_called()
        assert gateway.model_name == "sentence-transformers/all-MiniLM-L6-v2"

    def test_unknown_backend(self) -> None:
        settings = Settings.model_construct(embedding_backend="openai")
        with pytest.raises(ValueError, match="Unsupported embedding_backend"):
            get_embedding_gateway(settings)
