"""
Shared fixtures: isolated settings, a deterministic embedder and a registry
backed by real Chroma stores under a temporary directory.
"""

import re
import zlib
from pathlib import Path
from typing import List, Sequence

import pytest

from docvec.config import Settings
from docvec.embeddings.client import BatchEmbeddingResult, EmbeddingResult
from docvec.errors import ErrorKind, VectorIndexError
from docvec.indexing.pipeline import DocumentPipeline
from docvec.registry import ServiceRegistry

TEST_DIMENSIONS = 512


class FakeEmbeddings:
    """
    Bag-of-words hashing embedder: identical texts get identical vectors and
    texts with disjoint vocabularies are (almost) orthogonal.
    """

    def __init__(self, dimensions: int = TEST_DIMENSIONS, max_batch_size: int = 100) -> None:
        self.dimensions = dimensions
        self.max_batch_size = max_batch_size
        self.calls: List[List[str]] = []
        self.closed = False

    def vectorize(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions
        for word in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(word.encode("utf-8")) % self.dimensions] += 1.0
        if not any(vector):
            vector[0] = 1.0
        return vector

    async def embed_many(self, texts: Sequence[str]) -> BatchEmbeddingResult:
        if not texts:
            return BatchEmbeddingResult(embeddings=[], total_tokens=0)
        if len(texts) > self.max_batch_size:
            raise VectorIndexError(ErrorKind.BATCH_TOO_LARGE, "too many texts")
        self.calls.append(list(texts))
        return BatchEmbeddingResult(
            embeddings=[self.vectorize(text) for text in texts],
            total_tokens=sum(len(text.split()) for text in texts),
        )

    async def embed_one(self, text: str) -> EmbeddingResult:
        result = await self.embed_many([text])
        return EmbeddingResult(embedding=result.embeddings[0], token_count=result.total_tokens)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def test_settings(store_root: Path) -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key=None,
        embedding_model_name="text-embedding-3-small",
        embedding_dimensions=TEST_DIMENSIONS,
        embedding_batch_size=100,
        vector_store_path=str(store_root / "vector_store"),
        distance_metric="cosine",
        chunk_size_chars=700,
        chunk_overlap_chars=100,
        default_top_k=10,
        batch_pacing_seconds=0,
    )


@pytest.fixture
def fake_embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()


@pytest.fixture
async def registry(test_settings: Settings, fake_embeddings: FakeEmbeddings):
    services = ServiceRegistry(config=test_settings, embeddings=fake_embeddings)
    yield services
    await services.aclose()


@pytest.fixture
def pipeline(registry: ServiceRegistry) -> DocumentPipeline:
    return DocumentPipeline(registry)
