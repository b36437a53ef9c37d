"""
Chroma-based VectorStore implementation.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import chromadb
from chromadb.api import ClientAPI
from chromadb.config import Settings as ChromaSettings

from docvec.config import settings
from docvec.errors import ErrorKind, VectorIndexError, storage_error
from docvec.vector_store.base import ChunkRecord, MetadataBlob, SearchHit, StoredChunk, VectorStore
from docvec.vector_store.migrations import CHUNKS_COLLECTION, MigrationContext, apply_migrations

DEFAULT_STORE_NAME = "default"
CHROMA_PERSIST_DIR = settings.vector_store_path

logger = logging.getLogger(__name__)


def make_chunk_id(doc_id: str, index: int) -> str:
    return f"{doc_id}-{index:05d}"


def _metadata_from_row(row: Dict[str, Any] | None) -> MetadataBlob | None:
    raw = (row or {}).get("metadata_json")
    return MetadataBlob(raw=raw) if raw else None


class ChromaVectorStore(VectorStore):
    """
    Handle to one persistent store directory.

    Every chunk is a single Chroma record: its vector, text and chunk metadata
    share one id, so a chunk is never half-written. Writes on a handle are
    serialized; reads run concurrently.
    """

    def __init__(
        self,
        persist_directory: str | Path | None = None,
        name: str = DEFAULT_STORE_NAME,
        dimensions: int = settings.embedding_dimensions,
        distance_metric: str = settings.distance_metric,
    ) -> None:
        self.path = str(persist_directory or CHROMA_PERSIST_DIR)
        self.name = name
        self.dimensions = dimensions
        self.distance_metric = distance_metric
        self.client: ClientAPI | None = None
        self.collection = None
        self._write_lock = asyncio.Lock()

    # --- Lifecycle ---
    def initialize(self) -> List[str]:
        """
        Open the client and apply pending migrations. Blocking; returns the
        migration ids applied by this call.
        """
        try:
            Path(self.path).mkdir(parents=True, exist_ok=True)
            self.client = chromadb.PersistentClient(
                path=self.path,
                settings=ChromaSettings(anonymized_telemetry=False),
            )
            applied = apply_migrations(
                self.client,
                MigrationContext(dimensions=self.dimensions, distance_metric=self.distance_metric),
            )
            self.collection = self.client.get_collection(CHUNKS_COLLECTION)
        except Exception as exc:
            raise storage_error(f"Failed to initialize store {self.name}", exc) from exc

        self._check_collection_config()
        logger.info(
            "ChromaVectorStore initialised",
            extra={"store": self.name, "persist_directory": self.path, "migrations_applied": applied},
        )
        return applied

    def _check_collection_config(self) -> None:
        metadata = self.collection.metadata or {}
        stored_dimensions = metadata.get("dimensions")
        if stored_dimensions is not None and int(stored_dimensions) != self.dimensions:
            raise VectorIndexError(
                ErrorKind.CONFIGURATION,
                f"Store {self.name} holds {stored_dimensions}-dimensional vectors, "
                f"configured dimensionality is {self.dimensions}",
            )
        stored_metric = metadata.get("hnsw:space")
        if stored_metric is not None and stored_metric != self.distance_metric:
            raise VectorIndexError(
                ErrorKind.CONFIGURATION,
                f"Store {self.name} uses distance metric {stored_metric}, configured metric is {self.distance_metric}",
            )

    @property
    def is_open(self) -> bool:
        return self.collection is not None

    def _require_open(self):
        if self.collection is None:
            raise VectorIndexError(ErrorKind.STORAGE, f"Store {self.name} is not open")
        return self.collection

    async def close(self) -> None:
        # Waiting on the write lock lets an in-flight insert/delete finish first.
        async with self._write_lock:
            self.collection = None
            self.client = None
        logger.info("ChromaVectorStore closed", extra={"store": self.name})

    # --- Writes ---
    async def insert_chunks(self, doc_id: str, chunks: List[ChunkRecord]) -> List[str]:
        self._require_open()
        if not chunks:
            return []

        indices = sorted(chunk.index for chunk in chunks)
        if indices != list(range(len(chunks))):
            raise VectorIndexError(
                ErrorKind.VALIDATION,
                f"Chunk indices for document {doc_id} must be contiguous from 0",
            )
        for chunk in chunks:
            if len(chunk.embedding) != self.dimensions:
                raise VectorIndexError(
                    ErrorKind.VALIDATION,
                    f"Chunk {chunk.index} has {len(chunk.embedding)} dimensions, expected {self.dimensions}",
                )

        created_at = datetime.now(timezone.utc).isoformat()
        ids = [make_chunk_id(doc_id, chunk.index) for chunk in chunks]
        metadatas: List[Dict[str, Any]] = []
        for chunk in chunks:
            row: Dict[str, Any] = {"doc_id": doc_id, "chunk_index": chunk.index, "created_at": created_at}
            if chunk.metadata is not None:
                row["metadata_json"] = chunk.metadata.raw
            metadatas.append(row)

        async with self._write_lock:
            # close() may have won the lock while this insert was queued.
            collection = self._require_open()
            try:
                await asyncio.to_thread(
                    collection.add,
                    ids=ids,
                    embeddings=[list(chunk.embedding) for chunk in chunks],
                    documents=[chunk.text for chunk in chunks],
                    metadatas=metadatas,
                )
            except Exception as exc:
                await self._rollback_insert(collection, doc_id, ids)
                raise VectorIndexError(
                    ErrorKind.STORAGE,
                    f"Failed to insert chunks for document {doc_id}: {exc}",
                    cause=exc,
                ) from exc

        logger.info("Inserted chunks", extra={"store": self.name, "doc_id": doc_id, "count": len(ids)})
        return ids

    async def _rollback_insert(self, collection, doc_id: str, ids: List[str]) -> None:
        try:
            await asyncio.to_thread(collection.delete, ids=ids)
        except Exception:
            logger.exception("Rollback of partial insert failed", extra={"store": self.name, "doc_id": doc_id})

    async def delete_by_doc_id(self, doc_id: str) -> int:
        self._require_open()
        async with self._write_lock:
            collection = self._require_open()
            try:
                found = await asyncio.to_thread(collection.get, where={"doc_id": doc_id}, include=[])
            except Exception as exc:
                raise storage_error(f"Failed to look up document {doc_id}", exc) from exc

            ids = found.get("ids") or []
            if not ids:
                raise VectorIndexError(ErrorKind.NOT_FOUND, f"Document not found: {doc_id}")

            try:
                await asyncio.to_thread(collection.delete, ids=ids)
            except Exception as exc:
                raise storage_error(f"Failed to delete document {doc_id}", exc) from exc

        logger.info("Deleted chunks", extra={"store": self.name, "doc_id": doc_id, "count": len(ids)})
        return len(ids)

    # --- Reads ---
    async def search(self, query_embedding: List[float], top_k: int) -> List[SearchHit]:
        collection = self._require_open()
        if top_k <= 0:
            return []

        try:
            total = await asyncio.to_thread(collection.count)
            if total == 0:
                return []
            result = await asyncio.to_thread(
                collection.query,
                query_embeddings=[list(query_embedding)],
                n_results=min(top_k, total),
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise storage_error("Failed to search vectors", exc) from exc

        ids = (result.get("ids") or [[]])[0] or []
        texts = (result.get("documents") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []

        hits: List[SearchHit] = []
        for chunk_id, text, row, distance in zip(ids, texts, metadatas, distances):
            row = row or {}
            hits.append(
                SearchHit(
                    chunk_id=chunk_id,
                    doc_id=str(row.get("doc_id", "")),
                    chunk_index=int(row.get("chunk_index", 0)),
                    text=text or "",
                    score=1.0 - float(distance),
                    distance=float(distance),
                    metadata=_metadata_from_row(row),
                )
            )

        # Chroma already orders by distance; the stable sort keeps its tie order.
        hits.sort(key=lambda hit: hit.distance)
        return hits

    async def count(self, doc_id: str | None = None) -> int:
        collection = self._require_open()
        try:
            if doc_id is None:
                return await asyncio.to_thread(collection.count)
            found = await asyncio.to_thread(collection.get, where={"doc_id": doc_id}, include=[])
        except Exception as exc:
            raise storage_error("Failed to count chunks", exc) from exc
        return len(found.get("ids") or [])

    async def list_chunks(self, limit: int = 10, offset: int = 0) -> List[StoredChunk]:
        collection = self._require_open()
        try:
            result = await asyncio.to_thread(
                collection.get,
                include=["documents", "metadatas"],
                limit=limit,
                offset=offset,
            )
        except Exception as exc:
            raise storage_error("Failed to list chunks", exc) from exc

        chunks: List[StoredChunk] = []
        for chunk_id, text, row in zip(
            result.get("ids") or [], result.get("documents") or [], result.get("metadatas") or []
        ):
            row = row or {}
            chunks.append(
                StoredChunk(
                    chunk_id=chunk_id,
                    doc_id=str(row.get("doc_id", "")),
                    chunk_index=int(row.get("chunk_index", 0)),
                    text=text or "",
                    created_at=str(row.get("created_at", "")),
                    metadata=_metadata_from_row(row),
                )
            )
        return chunks


__all__ = ["ChromaVectorStore", "DEFAULT_STORE_NAME", "CHROMA_PERSIST_DIR", "make_chunk_id"]
