"""
OpenAI embeddings client.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from openai import AsyncOpenAI

from docvec.config import settings
from docvec.errors import ErrorKind, VectorIndexError

DEFAULT_EMBEDDING_MODEL = settings.embedding_model_name
DEFAULT_EMBEDDING_DIMENSIONS = settings.embedding_dimensions
DEFAULT_EMBED_BATCH_SIZE = settings.embedding_batch_size

# ada-002 rejects the `dimensions` parameter.
MODELS_WITH_DIMENSIONS = ("text-embedding-3-small", "text-embedding-3-large")

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingResult:
    embedding: List[float]
    token_count: int


@dataclass
class BatchEmbeddingResult:
    embeddings: List[List[float]]
    total_tokens: int


class EmbeddingsClient:
    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        max_batch_size: int = DEFAULT_EMBED_BATCH_SIZE,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.dimensions = dimensions
        self.max_batch_size = max_batch_size
        self._owns_client = client is None
        if client is None:
            api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
            client = AsyncOpenAI(api_key=api_key)
        self.client = client

    async def embed_many(self, texts: Sequence[str]) -> BatchEmbeddingResult:
        """
        Embed every text in one provider call.

        Either all texts get a vector or the call fails with
        EMBEDDING_PROVIDER; there is no partial result.
        """
        if not texts:
            return BatchEmbeddingResult(embeddings=[], total_tokens=0)

        if len(texts) > self.max_batch_size:
            raise VectorIndexError(
                ErrorKind.BATCH_TOO_LARGE,
                f"Maximum {self.max_batch_size} texts can be processed in a single batch, got {len(texts)}",
            )

        started = time.time()
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "input": list(texts),
            "encoding_format": "float",
        }
        if self.model in MODELS_WITH_DIMENSIONS:
            kwargs["dimensions"] = self.dimensions

        try:
            response = await self.client.embeddings.create(**kwargs)
        except Exception as exc:
            logger.error("Failed to generate embeddings", extra={"count": len(texts), "error": str(exc)})
            raise VectorIndexError(
                ErrorKind.EMBEDDING_PROVIDER,
                f"Failed to generate embeddings: {exc}",
                cause=exc,
            ) from exc

        items = sorted(response.data, key=lambda item: item.index)
        if len(items) != len(texts):
            raise VectorIndexError(
                ErrorKind.EMBEDDING_PROVIDER,
                f"Provider returned {len(items)} embeddings for {len(texts)} texts",
            )

        embeddings = [list(item.embedding) for item in items]
        total_tokens = response.usage.total_tokens if response.usage else 0
        logger.info(
            "Generated embeddings",
            extra={
                "count": len(embeddings),
                "tokens": total_tokens,
                "elapsed_ms": round((time.time() - started) * 1000),
            },
        )
        return BatchEmbeddingResult(embeddings=embeddings, total_tokens=total_tokens)

    async def embed_one(self, text: str) -> EmbeddingResult:
        result = await self.embed_many([text])
        return EmbeddingResult(embedding=result.embeddings[0], token_count=result.total_tokens)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.close()


__all__ = [
    "EmbeddingsClient",
    "EmbeddingResult",
    "BatchEmbeddingResult",
    "DEFAULT_EMBEDDING_MODEL",
    "DEFAULT_EMBEDDING_DIMENSIONS",
]
