"""
Vector store abstractions and factories.
"""

from docvec.config import Settings
from docvec.vector_store.base import ChunkRecord, MetadataBlob, SearchHit, StoredChunk, VectorStore
from docvec.vector_store.chroma_store import DEFAULT_STORE_NAME, ChromaVectorStore
from docvec.vector_store.store_registry import StoreRegistry, validate_store_name


def get_store_registry(config: Settings | None = None) -> StoreRegistry:
    """
    Factory to obtain a StoreRegistry for the configured backend.
    Currently supports only Chroma persistent stores.
    """
    return StoreRegistry(config)


__all__ = [
    "ChunkRecord",
    "MetadataBlob",
    "SearchHit",
    "StoredChunk",
    "VectorStore",
    "ChromaVectorStore",
    "DEFAULT_STORE_NAME",
    "StoreRegistry",
    "get_store_registry",
    "validate_store_name",
]
