"""
Utility script to inspect stored chunks without embeddings.

Usage:
    python -m scripts.inspect_index --limit 5 --offset 0 [--db my-db]
"""

from __future__ import annotations

import argparse
import asyncio
import json

from docvec.vector_store import StoredChunk, get_store_registry


async def collect(args: argparse.Namespace) -> tuple[int, list[StoredChunk]]:
    stores = get_store_registry()
    try:
        store = await stores.open(args.db_name)
        total = await store.count()
        chunks = await store.list_chunks(limit=args.limit, offset=args.offset)
    finally:
        await stores.close_all()
    return total, chunks


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect stored chunks in a store.")
    parser.add_argument("--limit", type=int, default=5, help="Number of chunks to show")
    parser.add_argument("--offset", type=int, default=0, help="Offset for pagination")
    parser.add_argument("--db", dest="db_name", default=None, help="Database name; default store when omitted")
    args = parser.parse_args()

    total, chunks = asyncio.run(collect(args))

    print(f"Total chunks in store: {total}")
    print(f"Showing {len(chunks)} chunks (offset={args.offset}, limit={args.limit})")
    for idx, chunk in enumerate(chunks, start=1):
        print(f"\n#{idx}: {chunk.chunk_id} doc_id={chunk.doc_id} chunk_index={chunk.chunk_index}")
        print("Created:", chunk.created_at)
        metadata = chunk.metadata.to_dict() if chunk.metadata else {}
        print("Metadata:", json.dumps(metadata, ensure_ascii=False))
        snippet = chunk.text[:400].replace("\n", " ")
        print("Text:", snippet + ("..." if len(chunk.text) > 400 else ""))


if __name__ == "__main__":
    main()
