# services/comparison.py

"""
Field-wise equality used to diff spreadsheet rows against stored projects.

    • None and "" are the same "no value"
    • *_id fields: surrounding quotes and whitespace are ignored
    • date fields: equal when closer than the tolerance window
    • mappings / lists: same keys (or length) and every member equal
    • anything else: strict equality (1 == 1.0, but True != 1, "1" != 1)
"""

from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Optional

import pandas as pd

from core.config import settings
from models.project import DATE_FIELDS, DESCRIPTIVE_FIELDS


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def normalize_id(value):
    if isinstance(value, str):
        return value.strip().strip("\"'").strip()
    return value


def is_date_field(field: str) -> bool:
    return field in DATE_FIELDS


def to_datetime(value) -> Optional[datetime]:
    """Best-effort conversion to an aware (UTC) datetime; None when not a date."""
    if value is None or value == "":
        return None

    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            try:
                dt = pd.to_datetime(text, dayfirst=True).to_pydatetime()
            except (ValueError, TypeError, OverflowError):
                return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _strict_equal(value1, value2) -> bool:
    if isinstance(value1, bool) or isinstance(value2, bool):
        return type(value1) is type(value2) and value1 == value2
    if isinstance(value1, (int, float)) and isinstance(value2, (int, float)):
        return value1 == value2
    if type(value1) is not type(value2):
        return False
    return value1 == value2


def values_equal(value1, value2, field: str, tolerance_seconds: Optional[float] = None) -> bool:
    if tolerance_seconds is None:
        tolerance_seconds = settings.IMPORT_DATE_TOLERANCE_SECONDS

    if is_blank(value1) and is_blank(value2):
        return True

    if field.endswith("_id"):
        value1 = normalize_id(value1)
        value2 = normalize_id(value2)

    if is_date_field(field):
        date1 = to_datetime(value1)
        date2 = to_datetime(value2)
        if date1 is not None and date2 is not None:
            return abs((date1 - date2).total_seconds()) < tolerance_seconds
        return False

    if isinstance(value1, Mapping) and isinstance(value2, Mapping):
        if set(value1.keys()) != set(value2.keys()):
            return False
        return all(
            values_equal(value1[key], value2[key], f"{field}.{key}", tolerance_seconds)
            for key in value1
        )

    if isinstance(value1, (list, tuple)) and isinstance(value2, (list, tuple)):
        if len(value1) != len(value2):
            return False
        return all(
            values_equal(item1, item2, f"{field}.{index}", tolerance_seconds)
            for index, (item1, item2) in enumerate(zip(value1, value2))
        )

    return _strict_equal(value1, value2)


def parse_cell_value(value: Any, field: str):
    """
    Shape a raw cell for storage/comparison:
    date fields → ISO timestamp, descriptive text fields → string
    (dates reduced to YYYY-MM-DD).
    """
    if value is None:
        return None

    if is_date_field(field) and isinstance(value, (datetime, date, pd.Timestamp)):
        return to_datetime(value).isoformat()

    if field in DESCRIPTIVE_FIELDS:
        if isinstance(value, (datetime, date, pd.Timestamp)):
            return to_datetime(value).date().isoformat()
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    return value
