"""
CLI for loading many documents from a file.

Supported formats: JSON (array or {"documents": [...]}), CSV with a "text"
column, plain text separated by blank lines, text with "---" metadata headers
and "===" separators, Markdown split on "## " headings.

Example:
    python -m scripts.batch_load samples/documents.json --batch-size 5 --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from docvec.config import setup_logging
from docvec.errors import VectorIndexError
from docvec.indexing.batch_loader import DEFAULT_BATCH_SIZE, BatchLoader, BatchResult
from docvec.indexing.parser import load_documents
from docvec.indexing.pipeline import DocumentPipeline
from docvec.registry import ServiceRegistry


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Batch load documents into the vector store.")
    parser.add_argument("file", help="Path to the file containing documents to load")
    parser.add_argument(
        "--batch-size",
        "-b",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Number of documents inserted concurrently per batch.",
    )
    parser.add_argument("--dry-run", "-n", action="store_true", help="Validate without inserting")
    parser.add_argument("--db", "-d", dest="db_name", default=None, help="Database name to use")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    return parser.parse_args()


async def run(args: argparse.Namespace, logger: logging.Logger) -> BatchResult:
    documents = load_documents(args.file)
    logger.info("Loaded documents from file", extra={"file": args.file, "documents": len(documents)})

    async with ServiceRegistry() as registry:
        loader = BatchLoader(DocumentPipeline(registry), show_progress=args.progress, logger_=logger)
        return await loader.load(
            documents,
            batch_size=args.batch_size,
            dry_run=args.dry_run,
            db_name=args.db_name,
        )


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    try:
        result = asyncio.run(run(args, logger))
    except VectorIndexError as exc:
        logger.error("Batch load failed: %s", exc.message, extra={"kind": exc.kind.value})
        sys.exit(1)

    print("=== Batch Load Summary ===")
    print(f"Total documents processed: {result.processed}")
    print(f"Successfully inserted: {result.succeeded}")
    print(f"Failed: {result.failed}")
    for failure in result.errors:
        print(f"  Document {failure.index}: {failure.error}")

    if result.failed:
        sys.exit(2)


if __name__ == "__main__":
    main()
