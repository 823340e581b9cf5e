"""Runtime configuration loaded from environment / ``.env``."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-wide settings, populated from env vars or .env file.

    Instances are frozen: build one at startup and hand it to each
    component explicitly.
    """

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_tenant: str = "rag"
    chroma_database: str = "rag"
    chroma_collection: str = "rag"
    distance_metric: Literal["cosine", "l2", "ip"] = "cosine"

    # Embedding
    embedding_backend: Literal["ollama", "huggingface"] = Field(
        default="ollama",
        description="Which embedding service to call: a local Ollama server or a sentence-transformer.",
    )
    embedding_model: str = Field(default="nomic-embed-text", description="Embedding model identifier")
    ollama_base_url: str = "http://localhost:11434"

    # Pipeline
    batch_threshold: int = Field(
        default=512,
        gt=0,
        description="Pending chunk count that triggers a flush once the current file is done.",
    )
    query_k: int = Field(default=5, gt=0, description="Number of nearest records returned per query")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "frozen": True}

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
