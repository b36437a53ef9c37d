"""
Indexing pipeline: chunk, embed and store documents; embed queries and search.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping

from docvec.errors import ErrorKind, VectorIndexError, storage_error
from docvec.ids import is_valid_document_id, new_document_id
from docvec.indexing.chunker import chunk_text
from docvec.models.schemas import (
    CreateDatabaseResult,
    DeleteDocumentResult,
    FindSimilarDocumentsResult,
    InsertDocumentResult,
    SearchResult,
)
from docvec.registry import ServiceRegistry
from docvec.vector_store.base import ChunkRecord, MetadataBlob, SearchHit

MAX_TOP_K = 100

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Chunker -> EmbeddingsClient -> VectorStore orchestration."""

    def __init__(
        self,
        registry: ServiceRegistry,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
        max_document_chars: int | None = None,
        default_top_k: int | None = None,
        logger_: logging.Logger | None = None,
    ) -> None:
        config = registry.settings
        self.registry = registry
        self.chunk_size = chunk_size or config.chunk_size_chars
        self.chunk_overlap = config.chunk_overlap_chars if chunk_overlap is None else chunk_overlap
        self.max_document_chars = max_document_chars or config.max_document_chars
        self.default_top_k = default_top_k or config.default_top_k
        self.logger = logger_ or logger

    # --- Public API ---
    async def insert(
        self,
        text: str,
        metadata: Mapping[str, Any] | None = None,
        db_name: str | None = None,
    ) -> InsertDocumentResult:
        """Index one document; all of its chunks become visible together or not at all."""
        self.validate_document_text(text)

        started = time.time()
        doc_id = new_document_id()
        self.logger.info("Starting document insertion", extra={"doc_id": doc_id, "text_length": len(text)})

        try:
            chunks = chunk_text(text, chunk_size=self.chunk_size, chunk_overlap=self.chunk_overlap)
            if not chunks:
                raise VectorIndexError(ErrorKind.EMPTY_CHUNKS, "No chunks generated from text")
            self.logger.info("Text chunked", extra={"doc_id": doc_id, "chunk_count": len(chunks)})

            embeddings, total_tokens = await self._embed_chunk_texts([chunk.text for chunk in chunks])

            blob = MetadataBlob.from_mapping(metadata)
            records = [
                ChunkRecord(index=chunk.index, text=chunk.text, embedding=embedding, metadata=blob)
                for chunk, embedding in zip(chunks, embeddings)
            ]
            store = await self.registry.stores.open(db_name)
            await store.insert_chunks(doc_id, records)
        except VectorIndexError as exc:
            self.logger.error("Failed to insert document", extra={"doc_id": doc_id, "error": exc.message})
            raise
        except Exception as exc:
            self.logger.error("Failed to insert document", extra={"doc_id": doc_id, "error": str(exc)})
            raise storage_error("Failed to insert document", exc) from exc

        self.logger.info(
            "Document inserted successfully",
            extra={
                "doc_id": doc_id,
                "chunk_count": len(records),
                "total_tokens": total_tokens,
                "elapsed_sec": round(time.time() - started, 3),
            },
        )
        return InsertDocumentResult(doc_id=doc_id, chunk_count=len(records))

    async def find(
        self,
        text: str,
        top_k: int | None = None,
        db_name: str | None = None,
    ) -> FindSimilarDocumentsResult:
        if not text or not text.strip():
            raise VectorIndexError(ErrorKind.VALIDATION, "Query text cannot be empty")
        top_k = self.default_top_k if top_k is None else top_k
        if isinstance(top_k, bool) or not isinstance(top_k, int) or not 1 <= top_k <= MAX_TOP_K:
            raise VectorIndexError(ErrorKind.VALIDATION, f"top_k must be between 1 and {MAX_TOP_K}")

        started = time.time()
        self.logger.info("Starting similarity search", extra={"query_length": len(text), "top_k": top_k})

        try:
            query = await self.registry.embeddings.embed_one(text)
            store = await self.registry.stores.open(db_name)
            hits = await store.search(query.embedding, top_k=top_k)
        except VectorIndexError:
            raise
        except Exception as exc:
            raise storage_error("Failed to find similar documents", exc) from exc

        results = [self._to_search_result(hit) for hit in hits]
        self.logger.info(
            "Similarity search completed",
            extra={
                "result_count": len(results),
                "query_tokens": query.token_count,
                "top_score": round(results[0].score, 3) if results else None,
                "elapsed_sec": round(time.time() - started, 3),
            },
        )
        return FindSimilarDocumentsResult(results=results)

    async def delete(self, doc_id: str, db_name: str | None = None) -> DeleteDocumentResult:
        if not doc_id or not doc_id.strip():
            raise VectorIndexError(ErrorKind.VALIDATION, "Document ID cannot be empty")
        if not is_valid_document_id(doc_id):
            raise VectorIndexError(ErrorKind.VALIDATION, "Invalid document ID format")

        self.logger.info("Starting document deletion", extra={"doc_id": doc_id})
        try:
            store = await self.registry.stores.open(db_name)
            deleted = await store.delete_by_doc_id(doc_id)
        except VectorIndexError as exc:
            if exc.kind is ErrorKind.NOT_FOUND:
                self.logger.warning("Document not found", extra={"doc_id": doc_id})
            raise
        except Exception as exc:
            raise storage_error("Failed to delete document", exc) from exc

        self.logger.info("Document deleted successfully", extra={"doc_id": doc_id, "deleted_chunks": deleted})
        return DeleteDocumentResult(deleted_chunks=deleted)

    async def create_store(self, db_name: str) -> CreateDatabaseResult:
        try:
            store = await self.registry.stores.create(db_name)
        except VectorIndexError:
            raise
        except Exception as exc:
            raise storage_error("Failed to create database", exc) from exc
        return CreateDatabaseResult(success=True, db_path=store.path)

    # --- Steps ---
    def validate_document_text(self, text: str) -> None:
        if not text or not text.strip():
            raise VectorIndexError(ErrorKind.VALIDATION, "Text cannot be empty")
        if len(text) > self.max_document_chars:
            raise VectorIndexError(
                ErrorKind.VALIDATION,
                f"Text cannot exceed {self.max_document_chars:,} characters",
            )

    async def _embed_chunk_texts(self, texts: List[str]) -> tuple[List[List[float]], int]:
        """Embed in slices no larger than the client's batch limit, preserving order."""
        client = self.registry.embeddings
        embeddings: List[List[float]] = []
        total_tokens = 0
        for i in range(0, len(texts), client.max_batch_size):
            batch = await client.embed_many(texts[i : i + client.max_batch_size])
            embeddings.extend(batch.embeddings)
            total_tokens += batch.total_tokens
        return embeddings, total_tokens

    @staticmethod
    def _to_search_result(hit: SearchHit) -> SearchResult:
        metadata: Dict[str, Any] | None = hit.metadata.to_dict() if hit.metadata else None
        return SearchResult(
            chunk_id=hit.chunk_id,
            doc_id=hit.doc_id,
            chunk_index=hit.chunk_index,
            text=hit.text,
            score=hit.score,
            metadata=metadata,
        )


__all__ = ["DocumentPipeline", "MAX_TOP_K"]
