# services/field_mapping.py

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.errors import MissingKeyColumnError, ValidationError
from core.logging_config import logger
from core.utils import normalize_text
from models.project import (
    FieldKind,
    IMMUTABLE_FIELDS,
    KEY_FIELD,
    PROJECT_FIELD_MINIMUMS,
    PROJECT_IMPORT_FIELDS,
    PROJECT_OBJECT_FIELDS,
    mappable_field_paths,
)
from services.comparison import normalize_id, parse_cell_value, to_datetime
from services.spreadsheet_parser import SourceRow


# ============================================================
# Column → field mapping
# ============================================================
@dataclass
class FieldMapping:
    # header → field path ("name", "location.lat"), in sheet order
    columns: Dict[str, str] = field(default_factory=dict)
    # headers that match no known field
    unmapped: List[str] = field(default_factory=list)
    # headers dropped on purpose (override → None, or a second column for a taken field)
    ignored: List[str] = field(default_factory=list)

    def has_field(self, target: str) -> bool:
        return any(
            path == target or path.startswith(f"{target}.")
            for path in self.columns.values()
        )


def normalize_header(text) -> str:
    return normalize_text(text)


def _root(path: str) -> str:
    return path.split(".", 1)[0]


def _validate_overrides(headers: List[str], overrides: Dict[str, Optional[str]], paths: List[str]):
    unknown_headers = [h for h in overrides if h not in headers]
    if unknown_headers:
        raise ValidationError(f"Mapping refers to unknown columns: {', '.join(unknown_headers)}")

    targets = {}
    for header, target in overrides.items():
        if not target:
            continue
        if target in IMMUTABLE_FIELDS or _root(target) in IMMUTABLE_FIELDS:
            raise ValidationError(f"Column '{header}' cannot be mapped to protected field '{target}'.")
        if target not in paths:
            raise ValidationError(f"Unknown field '{target}' for column '{header}'.")
        if target in targets:
            raise ValidationError(
                f"Columns '{targets[target]}' and '{header}' are both mapped to '{target}'."
            )
        targets[target] = header


def build_field_mapping(
    headers: Iterable[str],
    field_paths: Optional[Iterable[str]] = None,
    overrides: Optional[Dict[str, Optional[str]]] = None,
) -> FieldMapping:
    """
    Match headers to fields ignoring case, accents and extra spaces
    ("NAME " → name, "Location.Lat" → location.lat).
    Explicit overrides win over automatic matches; an override of None ignores the column.
    """
    headers = list(headers)
    paths = list(field_paths) if field_paths is not None else mappable_field_paths()
    overrides = dict(overrides or {})

    _validate_overrides(headers, overrides, paths)

    lookup = {normalize_header(path): path for path in paths}
    mapping = FieldMapping()
    taken: Dict[str, str] = {}

    # Explicit first so they always claim their target
    for header in headers:
        if header not in overrides:
            continue
        target = overrides[header]
        if not target:
            mapping.ignored.append(header)
            continue
        mapping.columns[header] = target
        taken[target] = header

    for header in headers:
        if header in overrides:
            continue
        candidate = lookup.get(normalize_header(header))
        if candidate is None:
            mapping.unmapped.append(header)
            continue
        if candidate in taken:
            logger.info(f"Column '{header}' ignored: '{candidate}' already comes from '{taken[candidate]}'")
            mapping.ignored.append(header)
            continue
        mapping.columns[header] = candidate
        taken[candidate] = header

    # Keep sheet order
    mapping.columns = {h: mapping.columns[h] for h in headers if h in mapping.columns}
    return mapping


def require_key_field(mapping: FieldMapping, key_field: str = KEY_FIELD):
    if not mapping.has_field(key_field):
        raise MissingKeyColumnError(key_field)


# ============================================================
# Typed rows
# ============================================================
@dataclass
class TypedRow:
    row_number: int
    fields: Dict[str, Any]


def _kind_of(path: str) -> FieldKind:
    if "." in path:
        parent, key = path.split(".", 1)
        return PROJECT_OBJECT_FIELDS[parent][key]
    return PROJECT_IMPORT_FIELDS[path]


def _to_integer(value) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expected a whole number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValueError(f"expected a whole number, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"expected a whole number, got {value!r}")


def _to_number(value):
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    if isinstance(value, (int, float)):
        return int(value) if isinstance(value, float) and value.is_integer() else value
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValueError(f"expected a number, got {value!r}")
        return int(number) if number.is_integer() else number
    raise ValueError(f"expected a number, got {value!r}")


def _to_string(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def coerce_value(value, path: str, kind: FieldKind):
    """Raw cell → typed value for `kind`. Raises ValueError on an unrecoverable mismatch."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None

    if kind is FieldKind.descriptive:
        return parse_cell_value(value, path)

    if kind is FieldKind.date:
        parsed = to_datetime(value)
        if parsed is None:
            raise ValueError(f"{value!r} is not a valid date")
        return parsed.isoformat()

    if kind is FieldKind.integer:
        coerced = _to_integer(value)
    elif kind is FieldKind.number:
        coerced = _to_number(value)
    elif kind is FieldKind.identifier:
        coerced = normalize_id(_to_string(value)) or None
    elif kind is FieldKind.string_list:
        if isinstance(value, (list, tuple)):
            coerced = [_to_string(item) for item in value if item is not None and _to_string(item)]
        else:
            coerced = [part.strip() for part in _to_string(value).split(",") if part.strip()]
    else:
        coerced = _to_string(value)

    minimum = PROJECT_FIELD_MINIMUMS.get(path)
    if minimum is not None and coerced is not None and coerced < minimum:
        raise ValueError(f"must not be lower than {minimum}")

    return coerced


def is_empty_object(value) -> bool:
    return isinstance(value, dict) and all(v is None for v in value.values())


def build_typed_row(source_row: SourceRow, mapping: FieldMapping) -> Tuple[Optional[TypedRow], Optional[str]]:
    """
    Project a raw row onto the mapped fields, coercing each cell by field kind.
    Returns (row, None) or (None, "Row <n>: <field>: <reason>") for a quarantined row.
    """
    fields: Dict[str, Any] = {}

    for header, path in mapping.columns.items():
        try:
            value = coerce_value(source_row.values.get(header), path, _kind_of(path))
        except ValueError as e:
            return None, f"Row {source_row.row_number}: {path}: {e}"

        if "." in path:
            parent, key = path.split(".", 1)
            fields.setdefault(parent, {})[key] = value
        else:
            fields[path] = value

    # A fully mapped object whose every sub-value is empty is "no value".
    # Partly mapped objects keep their sub-keys.
    for parent, keys in PROJECT_OBJECT_FIELDS.items():
        nested = fields.get(parent)
        if is_empty_object(nested) and set(nested) == set(keys):
            fields[parent] = None

    return TypedRow(row_number=source_row.row_number, fields=fields), None
