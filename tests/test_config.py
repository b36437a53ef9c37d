"""
Tests for embedding configuration checks.
"""

import pytest

from docvec.config import MAX_EMBEDDING_BATCH_SIZE, Settings, public_settings, validate_embedding_config
from docvec.errors import ErrorKind, VectorIndexError


def _settings(**overrides) -> Settings:
    values = {
        "embedding_model_name": "text-embedding-3-small",
        "embedding_dimensions": 1536,
        "embedding_batch_size": 100,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestValidateEmbeddingConfig:
    @pytest.mark.parametrize(
        ("model", "dimensions"),
        [
            ("text-embedding-3-small", 512),
            ("text-embedding-3-small", 1536),
            ("text-embedding-3-large", 256),
            ("text-embedding-3-large", 3072),
            ("text-embedding-ada-002", 1536),
        ],
    )
    def test_accepts_supported_combinations(self, model: str, dimensions: int) -> None:
        validate_embedding_config(_settings(embedding_model_name=model, embedding_dimensions=dimensions))

    def test_rejects_unknown_model(self) -> None:
        with pytest.raises(VectorIndexError) as exc_info:
            validate_embedding_config(_settings(embedding_model_name="not-a-model"))

        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        assert "Unknown embedding model" in exc_info.value.message

    @pytest.mark.parametrize(
        ("model", "dimensions"),
        [
            ("text-embedding-3-small", 511),
            ("text-embedding-3-small", 2000),
            ("text-embedding-ada-002", 512),
        ],
    )
    def test_rejects_out_of_range_dimensions(self, model: str, dimensions: int) -> None:
        with pytest.raises(VectorIndexError) as exc_info:
            validate_embedding_config(_settings(embedding_model_name=model, embedding_dimensions=dimensions))

        assert exc_info.value.kind is ErrorKind.CONFIGURATION

    @pytest.mark.parametrize("batch_size", [0, MAX_EMBEDDING_BATCH_SIZE + 1])
    def test_rejects_invalid_batch_size(self, batch_size: int) -> None:
        with pytest.raises(VectorIndexError) as exc_info:
            validate_embedding_config(_settings(embedding_batch_size=batch_size))

        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        assert "batch size" in exc_info.value.message


def test_public_settings_hides_api_key() -> None:
    assert "openai_api_key" not in public_settings()
