"""
Vector store interface and shared types.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Protocol


@dataclass(frozen=True)
class MetadataBlob:
    """Opaque JSON-serialized metadata with a dict accessor."""

    raw: str

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "MetadataBlob | None":
        if value is None:
            return None
        return cls(raw=json.dumps(dict(value), ensure_ascii=False, default=str))

    def to_dict(self) -> Dict[str, Any]:
        data = json.loads(self.raw)
        return data if isinstance(data, dict) else {"value": data}


@dataclass
class ChunkRecord:
    index: int
    text: str
    embedding: List[float]
    metadata: MetadataBlob | None = None


@dataclass
class SearchHit:
    chunk_id: str
    doc_id: str
    chunk_index: int
    text: str
    score: float
    distance: float
    metadata: MetadataBlob | None = None


@dataclass
class StoredChunk:
    chunk_id: str
    doc_id: str
    chunk_index: int
    text: str
    created_at: str
    metadata: MetadataBlob | None = None


class VectorStore(Protocol):
    name: str
    path: str

    async def insert_chunks(self, doc_id: str, chunks: List[ChunkRecord]) -> List[str]:
        ...

    async def search(self, query_embedding: List[float], top_k: int) -> List[SearchHit]:
        ...

    async def delete_by_doc_id(self, doc_id: str) -> int:
        ...

    async def count(self, doc_id: str | None = None) -> int:
        ...

    async def close(self) -> None:
        ...


__all__ = ["MetadataBlob", "ChunkRecord", "SearchHit", "StoredChunk", "VectorStore"]
