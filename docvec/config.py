"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from docvec.errors import ErrorKind, VectorIndexError


class Settings(BaseSettings):
    """Centralised application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    embedding_model_name: str = Field(default="text-embedding-3-small", alias="EMBEDDING_MODEL_NAME")
    embedding_dimensions: int = Field(default=1536, alias="EMBEDDING_DIMENSIONS")
    embedding_batch_size: int = Field(default=100, alias="EMBEDDING_BATCH_SIZE")

    vector_store_path: str = Field(default="./data/vector_store", alias="VECTOR_STORE_PATH")
    distance_metric: Literal["cosine", "l2", "ip"] = Field(default="cosine", alias="DISTANCE_METRIC")

    chunk_size_chars: int = Field(default=700, gt=0, alias="CHUNK_SIZE_CHARS")
    chunk_overlap_chars: int = Field(default=100, ge=0, alias="CHUNK_OVERLAP_CHARS")

    default_top_k: int = Field(default=10, ge=1, le=100, alias="DEFAULT_TOP_K")
    max_document_chars: int = Field(default=100_000, gt=0, alias="MAX_DOCUMENT_CHARS")
    batch_pacing_seconds: float = Field(default=1.0, ge=0, alias="BATCH_PACING_SECONDS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")


settings = Settings()

# Per-model bounds for the `dimensions` request parameter.
MODEL_DIMENSIONS: Dict[str, Dict[str, int]] = {
    "text-embedding-3-small": {"min": 512, "max": 1536, "default": 1536},
    "text-embedding-3-large": {"min": 256, "max": 3072, "default": 3072},
    "text-embedding-ada-002": {"min": 1536, "max": 1536, "default": 1536},
}

MAX_EMBEDDING_BATCH_SIZE = 2048


def validate_embedding_config(config: Settings | None = None) -> None:
    """
    Check the embedding model, dimensionality and batch size at startup.

    Raises VectorIndexError(CONFIGURATION) on any unsupported combination.
    """
    config = config or settings
    bounds = MODEL_DIMENSIONS.get(config.embedding_model_name)
    if bounds is None:
        raise VectorIndexError(
            ErrorKind.CONFIGURATION,
            f"Unknown embedding model: {config.embedding_model_name}. "
            f"Supported models: {', '.join(MODEL_DIMENSIONS)}",
        )

    if not bounds["min"] <= config.embedding_dimensions <= bounds["max"]:
        raise VectorIndexError(
            ErrorKind.CONFIGURATION,
            f"Invalid dimensions {config.embedding_dimensions} for model {config.embedding_model_name}. "
            f"Valid range: {bounds['min']}-{bounds['max']}",
        )

    if not 1 <= config.embedding_batch_size <= MAX_EMBEDDING_BATCH_SIZE:
        raise VectorIndexError(
            ErrorKind.CONFIGURATION,
            f"Invalid batch size: {config.embedding_batch_size}. "
            f"Must be between 1 and {MAX_EMBEDDING_BATCH_SIZE}.",
        )


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure base logging for the app.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    return logging.getLogger("docvec")


def public_settings() -> Dict[str, Any]:
    """
    Return settings without secrets for safe logging/inspection.
    """
    return settings.model_dump(
        exclude={"openai_api_key"},
        exclude_none=True,
    )


__all__ = [
    "Settings",
    "settings",
    "MODEL_DIMENSIONS",
    "validate_embedding_config",
    "setup_logging",
    "public_settings",
]
