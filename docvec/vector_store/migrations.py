"""
Schema migrations for a Chroma-backed store directory.

Applied migrations are recorded in the ``schema_migrations`` collection, one
record per migration id. Pending migrations run once, in ascending id order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List

from chromadb.api import ClientAPI

CHUNKS_COLLECTION = "chunks"
MIGRATIONS_COLLECTION = "schema_migrations"

# Ledger records carry no meaningful vector; Chroma still requires one.
_LEDGER_PLACEHOLDER_EMBEDDING = [0.0]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationContext:
    dimensions: int
    distance_metric: str


@dataclass(frozen=True)
class Migration:
    id: str
    description: str
    apply: Callable[[ClientAPI, MigrationContext], None]


def _create_chunks_collection(client: ClientAPI, context: MigrationContext) -> None:
    client.get_or_create_collection(
        name=CHUNKS_COLLECTION,
        metadata={
            "hnsw:space": context.distance_metric,
            "dimensions": context.dimensions,
        },
    )


MIGRATIONS: List[Migration] = [
    Migration(
        id="001_init",
        description="Create chunks collection with vector, text and chunk metadata",
        apply=_create_chunks_collection,
    ),
]


def applied_migration_ids(client: ClientAPI) -> List[str]:
    ledger = client.get_or_create_collection(name=MIGRATIONS_COLLECTION)
    result = ledger.get(include=[])
    return sorted(result.get("ids") or [])


def apply_migrations(
    client: ClientAPI,
    context: MigrationContext,
    migrations: List[Migration] | None = None,
) -> List[str]:
    """Apply pending migrations and return the ids applied by this call."""
    migrations = sorted(migrations if migrations is not None else MIGRATIONS, key=lambda m: m.id)
    ledger = client.get_or_create_collection(name=MIGRATIONS_COLLECTION)
    already_applied = set(ledger.get(include=[]).get("ids") or [])

    applied: List[str] = []
    for migration in migrations:
        if migration.id in already_applied:
            continue
        migration.apply(client, context)
        ledger.add(
            ids=[migration.id],
            embeddings=[_LEDGER_PLACEHOLDER_EMBEDDING],
            documents=[migration.description],
            metadatas=[{"applied_at": datetime.now(timezone.utc).isoformat()}],
        )
        applied.append(migration.id)
        logger.info("Applied migration", extra={"migration": migration.id})

    return applied


__all__ = [
    "CHUNKS_COLLECTION",
    "MIGRATIONS_COLLECTION",
    "Migration",
    "MigrationContext",
    "MIGRATIONS",
    "apply_migrations",
    "applied_migration_ids",
]
