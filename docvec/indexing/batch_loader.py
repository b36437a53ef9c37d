"""
Batch loading: insert many documents with bounded concurrency and isolated failures.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from tqdm import tqdm

from docvec.errors import ErrorKind, VectorIndexError
from docvec.indexing.parser import SourceDocument
from docvec.indexing.pipeline import DocumentPipeline

DEFAULT_BATCH_SIZE = 10

logger = logging.getLogger(__name__)


@dataclass
class BatchFailure:
    index: int
    error: str


@dataclass
class BatchResult:
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: List[BatchFailure] = field(default_factory=list)


@dataclass
class _ItemOutcome:
    index: int
    doc_id: str | None = None
    error: str | None = None


class BatchLoader:
    """
    Drives DocumentPipeline.insert over a list of documents.

    Documents are processed in consecutive groups of ``batch_size``: inserts
    inside a group run concurrently, groups run one after another with
    ``pacing_seconds`` between them. A failing document is recorded in the
    result and never stops its siblings or later groups.
    """

    def __init__(
        self,
        pipeline: DocumentPipeline,
        pacing_seconds: float | None = None,
        show_progress: bool = False,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.pipeline = pipeline
        if pacing_seconds is None:
            pacing_seconds = pipeline.registry.settings.batch_pacing_seconds
        self.pacing_seconds = pacing_seconds
        self.show_progress = show_progress
        self.logger = logger_ or logger

    async def load(
        self,
        documents: Sequence[SourceDocument],
        batch_size: int = DEFAULT_BATCH_SIZE,
        dry_run: bool = False,
        db_name: str | None = None,
    ) -> BatchResult:
        if batch_size < 1:
            raise VectorIndexError(ErrorKind.VALIDATION, "batch_size must be at least 1")

        if dry_run:
            self.logger.info("DRY RUN MODE - No documents will be inserted")
        self.logger.info("Starting batch load", extra={"documents": len(documents), "batch_size": batch_size})

        result = BatchResult()
        starts = range(0, len(documents), batch_size)
        for start in tqdm(starts, desc="Loading", unit="batch", disable=not self.show_progress):
            group = documents[start : start + batch_size]
            self.logger.info(
                "Processing batch",
                extra={"batch": start // batch_size + 1, "first": start, "last": start + len(group) - 1},
            )
            outcomes = await asyncio.gather(
                *(self._process_item(doc, start + offset, dry_run, db_name) for offset, doc in enumerate(group))
            )
            self._record(result, outcomes)

            if start + batch_size < len(documents) and self.pacing_seconds > 0:
                await asyncio.sleep(self.pacing_seconds)

        self._log_summary(result)
        return result

    async def _process_item(
        self,
        doc: SourceDocument,
        index: int,
        dry_run: bool,
        db_name: str | None,
    ) -> _ItemOutcome:
        try:
            if not doc.text or not doc.text.strip():
                raise VectorIndexError(ErrorKind.VALIDATION, "Document text is empty")

            if dry_run:
                self.logger.info("[DRY RUN] Would insert document", extra={"index": index, "preview": doc.text[:50]})
                return _ItemOutcome(index=index)

            inserted = await self.pipeline.insert(doc.text, metadata=doc.metadata, db_name=db_name)
        except Exception as exc:
            message = exc.message if isinstance(exc, VectorIndexError) else str(exc)
            self.logger.error("Failed to insert document", extra={"index": index, "error": message})
            return _ItemOutcome(index=index, error=message)

        self.logger.info(
            "Document inserted",
            extra={"index": index, "doc_id": inserted.doc_id, "chunk_count": inserted.chunk_count},
        )
        return _ItemOutcome(index=index, doc_id=inserted.doc_id)

    @staticmethod
    def _record(result: BatchResult, outcomes: Sequence[_ItemOutcome]) -> None:
        for outcome in outcomes:
            result.processed += 1
            if outcome.error is None:
                result.succeeded += 1
            else:
                result.failed += 1
                result.errors.append(BatchFailure(index=outcome.index, error=outcome.error))

    def _log_summary(self, result: BatchResult) -> None:
        self.logger.info(
            "Batch load summary",
            extra={"processed": result.processed, "succeeded": result.succeeded, "failed": result.failed},
        )
        for failure in result.errors:
            self.logger.error("Failed document", extra={"index": failure.index, "error": failure.error})


__all__ = ["BatchLoader", "BatchResult", "BatchFailure", "DEFAULT_BATCH_SIZE"]
