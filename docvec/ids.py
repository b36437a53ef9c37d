"""
Document identifiers (ULID).
"""

from __future__ import annotations

import re

from ulid import ULID

# Crockford base32, uppercase only; first character bounds the 48-bit timestamp.
DOC_ID_PATTERN = re.compile(r"^[0-7][0-9A-HJKMNP-TV-Z]{25}$")


def new_document_id() -> str:
    return str(ULID())


def is_valid_document_id(value: str) -> bool:
    if not isinstance(value, str) or not DOC_ID_PATTERN.match(value):
        return False
    try:
        ULID.from_str(value)
    except ValueError:
        return False
    return True


__all__ = ["new_document_id", "is_valid_document_id", "DOC_ID_PATTERN"]
