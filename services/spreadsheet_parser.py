# services/spreadsheet_parser.py

import io
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from core.config import settings
from core.errors import MalformedFileError, ValidationError
from core.logging_config import logger


# Spreadsheet row numbers: header is row 1, first data row is row 2
FIRST_DATA_ROW = 2


@dataclass
class SourceRow:
    row_number: int
    values: Dict[str, Any]


@dataclass
class ParsedSheet:
    headers: List[str]
    rows: List[SourceRow] = field(default_factory=list)


def _clean_header(raw, index: int) -> str:
    text = "" if raw is None else str(raw).strip()
    # pandas names blank header cells "Unnamed: <n>"
    if not text or text.startswith("Unnamed:"):
        return f"column_{index}"
    return text


def clean_cell(value):
    """pandas/numpy cell → plain Python value (NaN / NaT → None)."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # list-like cells
        return value
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, datetime):
        return value
    return value


def _row_has_data(values: Dict[str, Any]) -> bool:
    for value in values.values():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return True
    return False


def read_dataframe(content: bytes, filename: Optional[str] = None) -> pd.DataFrame:
    name = (filename or "").lower()
    buffer = io.BytesIO(content)
    try:
        if name.endswith(".csv"):
            return pd.read_csv(buffer, dtype=object)
        return pd.read_excel(buffer, sheet_name=0, engine="openpyxl", dtype=object)
    except Exception as e:
        logger.warning(f"Spreadsheet parse failed for '{filename}': {e}")
        raise MalformedFileError(f"Failed to read spreadsheet: {e}")


def parse_spreadsheet(content: bytes, filename: Optional[str] = None) -> ParsedSheet:
    """
    Read the first worksheet (or a CSV) into ordered headers plus raw rows.
    Fully empty rows are dropped.
    """
    if not content:
        raise ValidationError("File is required.")

    if len(content) > settings.IMPORT_MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File is too large ({len(content)} bytes, max {settings.IMPORT_MAX_UPLOAD_BYTES})."
        )

    df = read_dataframe(content, filename)

    if len(df.columns) == 0:
        raise ValidationError("Spreadsheet is empty.")

    headers = [_clean_header(col, idx) for idx, col in enumerate(df.columns, start=1)]
    df.columns = headers

    rows: List[SourceRow] = []
    for offset, record in enumerate(df.to_dict("records")):
        values = {header: clean_cell(record.get(header)) for header in headers}
        if not _row_has_data(values):
            continue
        rows.append(SourceRow(row_number=offset + FIRST_DATA_ROW, values=values))

    logger.info(f"Parsed spreadsheet '{filename}': {len(headers)} columns, {len(rows)} rows")
    return ParsedSheet(headers=headers, rows=rows)
