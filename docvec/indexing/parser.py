"""
Document loaders: read JSON, CSV and text files into documents for batch loading.
"""

from __future__ import annotations

import csv
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from docvec.errors import ErrorKind, VectorIndexError

# Fields that never become metadata when a JSON object carries the text inline.
EXCLUDED_METADATA_FIELDS = ("text", "doc_id", "id")

METADATA_FENCE = "---"
DOCUMENT_SEPARATOR = "==="
METADATA_LINE_PATTERN = re.compile(r"^(\w+):\s*(.*)$")

MARKDOWN_SEPARATOR = "\n## "


@dataclass
class SourceDocument:
    text: str
    metadata: Dict[str, Any] | None = None


def _decode_value(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def extract_metadata(item: Dict[str, Any]) -> Dict[str, Any] | None:
    metadata = {
        key: value
        for key, value in item.items()
        if key not in EXCLUDED_METADATA_FIELDS and value is not None
    }
    return metadata or None


def load_json_file(path: str | Path) -> List[SourceDocument]:
    """
    Accepts an array of strings, an array of objects with a ``text`` field,
    or an object with a ``documents`` array.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise VectorIndexError(ErrorKind.VALIDATION, f"Invalid JSON in {path}: {exc}", cause=exc) from exc

    if isinstance(data, dict) and isinstance(data.get("documents"), list):
        items = data["documents"]
    elif isinstance(data, list):
        items = data
    else:
        raise VectorIndexError(
            ErrorKind.VALIDATION,
            'Invalid JSON structure: must be an array or have a "documents" array field',
        )

    documents: List[SourceDocument] = []
    for item in items:
        if isinstance(item, str):
            documents.append(SourceDocument(text=item))
        elif isinstance(item, dict) and item.get("text"):
            documents.append(
                SourceDocument(text=item["text"], metadata=item.get("metadata") or extract_metadata(item))
            )
        else:
            raise VectorIndexError(
                ErrorKind.VALIDATION,
                'Invalid JSON structure: each item must have a "text" field or be a string',
            )
    return documents


def load_csv_file(path: str | Path) -> List[SourceDocument]:
    with Path(path).open(encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames or "text" not in reader.fieldnames:
            raise VectorIndexError(ErrorKind.VALIDATION, 'CSV must have a "text" column')

        documents: List[SourceDocument] = []
        for record in reader:
            if not any((value or "").strip() for value in record.values()):
                continue
            metadata: Dict[str, Any] = {}
            for key, value in record.items():
                value = (value or "").strip()
                if key != "text" and value:
                    metadata[key] = _decode_value(value)
            documents.append(SourceDocument(text=(record.get("text") or "").strip(), metadata=metadata or None))
    return documents


def load_text_file(path: str | Path, separator: str = "\n\n") -> List[SourceDocument]:
    content = Path(path).read_text(encoding="utf-8")
    return [SourceDocument(text=part.strip()) for part in content.split(separator) if part.strip()]


def load_text_file_with_metadata(path: str | Path) -> List[SourceDocument]:
    """
    Parse documents written as::

        ---
        title: Document Title
        tags: ["ai", "ml"]
        ---
        Document text...
        ===
    """
    documents: List[SourceDocument] = []
    metadata: Dict[str, Any] = {}
    text_lines: List[str] = []
    in_metadata = False

    def flush() -> None:
        text = "\n".join(text_lines).strip()
        if text:
            documents.append(SourceDocument(text=text, metadata=dict(metadata) or None))

    with Path(path).open(encoding="utf-8") as handle:
        for raw_line in handle:
            line = raw_line.rstrip("\r\n")
            if line == METADATA_FENCE:
                in_metadata = not in_metadata
            elif line == DOCUMENT_SEPARATOR:
                flush()
                metadata = {}
                text_lines = []
            elif in_metadata:
                match = METADATA_LINE_PATTERN.match(line)
                if match:
                    key, value = match.groups()
                    metadata[key] = _decode_value(value)
            else:
                text_lines.append(line)

    flush()
    return documents


def _has_metadata_headers(content: str) -> bool:
    return f"{METADATA_FENCE}\n" in content and f"\n{DOCUMENT_SEPARATOR}" in content


def load_documents(path: str | Path) -> List[SourceDocument]:
    """Pick a loader from the file extension."""
    path = Path(path)
    if not path.exists():
        raise VectorIndexError(ErrorKind.VALIDATION, f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        return load_json_file(path)
    if suffix == ".csv":
        return load_csv_file(path)
    if suffix == ".txt":
        if _has_metadata_headers(path.read_text(encoding="utf-8")):
            return load_text_file_with_metadata(path)
        return load_text_file(path)
    if suffix == ".md":
        return load_text_file(path, separator=MARKDOWN_SEPARATOR)
    raise VectorIndexError(ErrorKind.VALIDATION, f"Unsupported file format: {suffix or path.name}")


__all__ = [
    "SourceDocument",
    "extract_metadata",
    "load_json_file",
    "load_csv_file",
    "load_text_file",
    "load_text_file_with_metadata",
    "load_documents",
]
