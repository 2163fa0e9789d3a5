# core/utils.py

import re
import unicodedata
import uuid


def sanitize(data: dict) -> dict:
    """
    Sanitize dictionary data:
    - Empty strings → None
    - Preserve booleans, None values
    - Strip string whitespace
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped if stripped else None
            continue

        # For other types, keep as-is
        clean[k] = v

    return clean


def strip_accents(value: str) -> str:
    """'Ñuñoa' → 'Nunoa'."""
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(value) -> str:
    """
    Case / diacritic-insensitive key used for header matching and
    natural-key (project name) lookups.
    """
    if value is None:
        return ""
    text = strip_accents(str(value)).lower().strip()
    return re.sub(r"\s+", " ", text)


def is_valid_uuid(value) -> bool:
    """Check if a value is a valid UUID (not a placeholder like 'string')."""
    if not value or str(value).lower() == "string":
        return False
    try:
        uuid.UUID(str(value))
        return True
    except (ValueError, AttributeError, TypeError):
        return False
