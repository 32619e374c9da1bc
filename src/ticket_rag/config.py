"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from ticket_rag.errors import ConfigurationError


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file.

    Nothing here is read at import time by the rest of the package:
    construct a ``Settings`` and hand it to
    :func:`ticket_rag.services.build_services`.
    """

    # OpenAI (embeddings + chat)
    openai_api_key: str = Field(default="", description="OpenAI API key")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible API. Leave empty to use "
            "OpenAI cloud."
        ),
    )
    embedding_model: str = "text-embedding-3-small"
    llm_model_name: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("LLM_MODEL_NAME", "OPENAI_CHAT_MODEL", "llm_model_name"),
    )

    # Vector store
    vector_backend: Literal["pinecone", "chroma"] = "pinecone"
    pinecone_api_key: str = ""
    vector_index: str = Field(
        default="",
        validation_alias=AliasChoices("VECTOR_INDEX", "PINECONE_INDEX", "vector_index"),
    )
    vector_namespace: str | None = Field(
        default=None,
        validation_alias=AliasChoices("VECTOR_NAMESPACE", "PINECONE_NAMESPACE", "vector_namespace"),
    )
    chroma_host: str = "localhost"
    chroma_port: int = 8000

    # Pipelines
    ingest_batch_size: int = Field(default=100, ge=1)
    max_context_chars: int = Field(default=8000, ge=1)
    default_top_k: int = Field(default=20, ge=1)

    # Shared secrets checked by the HTTP layer
    chat_password: str = ""
    embed_password: str = ""

    # Origins allowed to call the HTTP API from a browser (JSON list in env)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def missing_settings(self) -> list[str]:
        """Return the env names of required values that are unset."""
        missing: list[str] = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if self.vector_backend == "pinecone" and not self.pinecone_api_key:
            missing.append("PINECONE_API_KEY")
        if not self.vector_index:
            missing.append("PINECONE_INDEX" if self.vector_backend == "pinecone" else "VECTOR_INDEX")
        return missing

    def ensure_configured(self) -> None:
        """Raise :class:`ConfigurationError` when required values are absent."""
        missing = self.missing_settings()
        if missing:
            raise ConfigurationError(missing)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI / server entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide ``Settings`` used by the HTTP layer."""
    return Settings()
