"""
CLI для поиска по векторному индексу по текстовому запросу.

Пример:
    python -m scripts.search_query --query "vector databases" --top-k 5
"""

from __future__ import annotations

import argparse
import asyncio

from docvec.indexing.pipeline import DocumentPipeline
from docvec.registry import ServiceRegistry


async def search(args: argparse.Namespace):
    async with ServiceRegistry() as registry:
        return await DocumentPipeline(registry).find(args.query, top_k=args.top_k, db_name=args.db_name)


def main() -> None:
    parser = argparse.ArgumentParser(description="Search indexed chunks by text query.")
    parser.add_argument("--query", "-q", required=True, help="Текст запроса")
    parser.add_argument("--top-k", type=int, default=5, help="Сколько результатов вернуть")
    parser.add_argument("--db", dest="db_name", default=None, help="Имя базы; по умолчанию основная")
    parser.add_argument("--snippet", type=int, default=300, help="Длина сниппета текста")
    args = parser.parse_args()

    found = asyncio.run(search(args))

    if not found.results:
        print("Нет результатов")
        return

    for idx, hit in enumerate(found.results, start=1):
        snippet = hit.text[: args.snippet].replace("\n", " ")
        print(f"\n#{idx} score={hit.score:.4f} doc_id={hit.doc_id} chunk={hit.chunk_index}")
        print("metadata:", hit.metadata)
        print("text:", snippet + ("..." if len(hit.text) > args.snippet else ""))


if __name__ == "__main__":
    main()
