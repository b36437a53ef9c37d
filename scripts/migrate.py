"""
Apply pending schema migrations to a store.

Example:
    python -m scripts.migrate            # default store
    python -m scripts.migrate --db docs  # named store (created if missing)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from docvec.config import setup_logging
from docvec.errors import VectorIndexError
from docvec.vector_store import get_store_registry
from docvec.vector_store.migrations import MIGRATIONS, applied_migration_ids


async def migrate(db_name: str | None) -> list[str]:
    stores = get_store_registry()
    try:
        store = await stores.open(db_name, create=db_name is not None)
        return await asyncio.to_thread(applied_migration_ids, store.client)
    finally:
        await stores.close_all()


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    parser = argparse.ArgumentParser(description="Apply schema migrations to a store.")
    parser.add_argument("--db", dest="db_name", default=None, help="Database name; default store when omitted")
    args = parser.parse_args()

    try:
        applied = asyncio.run(migrate(args.db_name))
    except VectorIndexError as exc:
        logger.error("Migration failed: %s", exc.message, extra={"kind": exc.kind.value})
        sys.exit(1)

    print(f"Known migrations: {len(MIGRATIONS)}")
    print(f"Applied migrations: {', '.join(applied) or '<none>'}")


if __name__ == "__main__":
    main()
