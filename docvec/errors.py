"""
Error taxonomy shared by every layer.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    BATCH_TOO_LARGE = "batch_too_large"
    EMBEDDING_PROVIDER = "embedding_provider"
    EMPTY_CHUNKS = "empty_chunks"
    STORE_NOT_FOUND = "store_not_found"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


class VectorIndexError(Exception):
    """
    Single exception type raised by the indexing core.

    Callers branch on ``kind`` instead of on the exception class. The
    underlying fault, when there is one, is kept in ``cause`` and is also
    chained as ``__cause__`` by the raising site.

    Example:
        ```python
        try:
            await pipeline.delete(doc_id)
        except VectorIndexError as exc:
            if exc.kind is ErrorKind.NOT_FOUND:
                ...
        ```
    """

    def __init__(self, kind: ErrorKind, message: str, cause: BaseException | None = None) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __repr__(self) -> str:
        return f"VectorIndexError(kind={self.kind.name}, message={self.message!r})"


def storage_error(message: str, exc: BaseException) -> VectorIndexError:
    return VectorIndexError(ErrorKind.STORAGE, f"{message}: {exc}", cause=exc)


__all__ = ["ErrorKind", "VectorIndexError", "storage_error"]
