"""
Tests for EmbeddingsClient against a mocked AsyncOpenAI client.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from docvec.embeddings.client import EmbeddingsClient
from docvec.errors import ErrorKind, VectorIndexError


def _response(vectors, total_tokens=7, order=None):
    order = order if order is not None else range(len(vectors))
    data = [SimpleNamespace(index=i, embedding=vectors[i]) for i in order]
    return SimpleNamespace(data=data, usage=SimpleNamespace(total_tokens=total_tokens))


@pytest.fixture
def openai_client():
    """AsyncOpenAI stand-in exposing ``embeddings.create``."""
    client = MagicMock()
    client.embeddings.create = AsyncMock()
    client.close = AsyncMock()
    return client


class TestEmbedMany:
    async def test_returns_vectors_in_input_order(self, openai_client) -> None:
        openai_client.embeddings.create.return_value = _response(
            [[0.1, 0.2], [0.3, 0.4], [0.5, 0.6]], total_tokens=12, order=[2, 0, 1]
        )
        client = EmbeddingsClient(model="text-embedding-3-small", dimensions=512, client=openai_client)

        result = await client.embed_many(["a", "b", "c"])

        assert result.embeddings == [[0.1, 0.2], [0.3, 0.4], [0.5, 0.6]]
        assert result.total_tokens == 12

    async def test_passes_model_and_dimensions(self, openai_client) -> None:
        openai_client.embeddings.create.return_value = _response([[0.0]])
        client = EmbeddingsClient(model="text-embedding-3-large", dimensions=256, client=openai_client)

        await client.embed_many(["hello"])

        kwargs = openai_client.embeddings.create.await_args.kwargs
        assert kwargs["model"] == "text-embedding-3-large"
        assert kwargs["dimensions"] == 256
        assert kwargs["input"] == ["hello"]
        assert kwargs["encoding_format"] == "float"

    async def test_ada_request_omits_dimensions(self, openai_client) -> None:
        openai_client.embeddings.create.return_value = _response([[0.0]])
        client = EmbeddingsClient(model="text-embedding-ada-002", dimensions=1536, client=openai_client)

        await client.embed_many(["hello"])

        assert "dimensions" not in openai_client.embeddings.create.await_args.kwargs

    async def test_empty_input_makes_no_call(self, openai_client) -> None:
        client = EmbeddingsClient(client=openai_client)

        result = await client.embed_many([])

        assert result.embeddings == []
        assert result.total_tokens == 0
        openai_client.embeddings.create.assert_not_awaited()

    async def test_too_many_texts_fails_before_calling_provider(self, openai_client) -> None:
        client = EmbeddingsClient(max_batch_size=2, client=openai_client)

        with pytest.raises(VectorIndexError) as exc_info:
            await client.embed_many(["a", "b", "c"])

        assert exc_info.value.kind is ErrorKind.BATCH_TOO_LARGE
        openai_client.embeddings.create.assert_not_awaited()

    async def test_provider_failure_is_wrapped(self, openai_client) -> None:
        boom = RuntimeError("rate limited")
        openai_client.embeddings.create.side_effect = boom
        client = EmbeddingsClient(client=openai_client)

        with pytest.raises(VectorIndexError) as exc_info:
            await client.embed_many(["a"])

        assert exc_info.value.kind is ErrorKind.EMBEDDING_PROVIDER
        assert exc_info.value.cause is boom
        assert "rate limited" in exc_info.value.message

    async def test_short_response_is_rejected(self, openai_client) -> None:
        openai_client.embeddings.create.return_value = _response([[0.1]])
        client = EmbeddingsClient(client=openai_client)

        with pytest.raises(VectorIndexError) as exc_info:
            await client.embed_many(["a", "b"])

        assert exc_info.value.kind is ErrorKind.EMBEDDING_PROVIDER


class TestEmbedOne:
    async def test_returns_single_vector_and_tokens(self, openai_client) -> None:
        openai_client.embeddings.create.return_value = _response([[0.9, 0.8]], total_tokens=3)
        client = EmbeddingsClient(client=openai_client)

        result = await client.embed_one("hi")

        assert result.embedding == [0.9, 0.8]
        assert result.token_count == 3


async def test_aclose_leaves_injected_client_open(openai_client) -> None:
    client = EmbeddingsClient(client=openai_client)

    await client.aclose()

    openai_client.close.assert_not_awaited()
