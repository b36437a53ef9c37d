"""
Text chunking utilities.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from docvec.config import settings

CHUNK_SIZE_CHARS = settings.chunk_size_chars
CHUNK_OVERLAP_CHARS = settings.chunk_overlap_chars

# Western and full-width sentence terminators.
SENTENCE_TERMINATORS = (".", "!", "?", "。", "！", "？")

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class TextChunk:
    text: str
    index: int


def normalize_text(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip()


def _find_window_end(text: str, start: int, end: int) -> int:
    """
    Pick where a window [start, end) should be cut.
    Sentence terminator first, then the last space, else the hard boundary.
    """
    sentence_break = max(text.rfind(mark, start, end) for mark in SENTENCE_TERMINATORS)
    if sentence_break > start:
        return sentence_break + 1

    word_break = text.rfind(" ", start, end)
    if word_break > start:
        return word_break

    return end


def chunk_text(
    text: str,
    chunk_size: int = CHUNK_SIZE_CHARS,
    chunk_overlap: int = CHUNK_OVERLAP_CHARS,
) -> List[TextChunk]:
    """
    Split text into ordered, overlapping chunks of at most ``chunk_size`` characters.

    The window start always moves forward by at least one character, so the
    loop terminates even when ``chunk_overlap >= chunk_size``. A large overlap
    repeats content across neighbouring chunks (and their embeddings).
    """
    normalized = normalize_text(text)
    if not normalized:
        return []

    if len(normalized) <= chunk_size:
        return [TextChunk(text=normalized, index=0)]

    chunks: List[TextChunk] = []
    length = len(normalized)
    start = 0

    while start < length:
        end = start + chunk_size
        if end < length:
            end = _find_window_end(normalized, start, end)
        else:
            end = length

        piece = normalized[start:end].strip()
        if piece:
            chunks.append(TextChunk(text=piece, index=len(chunks)))

        if end >= length:
            break

        start = max(start + 1, end - chunk_overlap)

    return chunks


__all__ = ["TextChunk", "chunk_text", "normalize_text", "CHUNK_SIZE_CHARS", "CHUNK_OVERLAP_CHARS"]
