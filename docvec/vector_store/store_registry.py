"""
Named store handles: path resolution, creation and caching.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Dict, List

from docvec.config import Settings, settings as default_settings
from docvec.errors import ErrorKind, VectorIndexError
from docvec.vector_store.chroma_store import DEFAULT_STORE_NAME, ChromaVectorStore

STORE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

logger = logging.getLogger(__name__)


def validate_store_name(name: str | None) -> str:
    if not name or not name.strip():
        raise VectorIndexError(ErrorKind.VALIDATION, "Database name cannot be empty")
    if not STORE_NAME_PATTERN.match(name):
        raise VectorIndexError(
            ErrorKind.VALIDATION,
            "Database name can only contain alphanumeric characters, underscores, and hyphens",
        )
    return name


class StoreRegistry:
    """
    Owns every open store handle, one per resolved path.

    The default store (``name=None``) lives at ``VECTOR_STORE_PATH`` and is
    initialised on first use. Named stores live next to it and must be
    created before they can be opened.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self.settings = config or default_settings
        self._handles: Dict[str, ChromaVectorStore] = {}
        self._lock = asyncio.Lock()

    @property
    def default_path(self) -> Path:
        return Path(self.settings.vector_store_path)

    def store_path(self, name: str | None = None) -> Path:
        if name is None:
            return self.default_path
        return self.default_path.parent / validate_store_name(name)

    @property
    def open_handles(self) -> List[ChromaVectorStore]:
        return list(self._handles.values())

    async def open(self, name: str | None = None, create: bool = False) -> ChromaVectorStore:
        path = self.store_path(name)
        key = str(path.resolve())

        async with self._lock:
            handle = self._handles.get(key)
            if handle is not None:
                return handle

            if name is not None and not create and not path.is_dir():
                raise VectorIndexError(ErrorKind.STORE_NOT_FOUND, f"Database not found: {path}")

            handle = ChromaVectorStore(
                persist_directory=path,
                name=name or DEFAULT_STORE_NAME,
                dimensions=self.settings.embedding_dimensions,
                distance_metric=self.settings.distance_metric,
            )
            logger.info("Opening store", extra={"store": handle.name, "path": str(path)})
            await asyncio.to_thread(handle.initialize)
            self._handles[key] = handle
            return handle

    async def create(self, name: str) -> ChromaVectorStore:
        validate_store_name(name)
        path = self.store_path(name)
        if path.is_dir():
            logger.info("Database already exists", extra={"store": name, "path": str(path)})
        return await self.open(name, create=True)

    async def close_all(self) -> None:
        async with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        for handle in handles:
            await handle.close()


__all__ = ["StoreRegistry", "validate_store_name", "STORE_NAME_PATTERN"]
