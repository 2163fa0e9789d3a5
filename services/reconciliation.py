# services/reconciliation.py

"""
Analyze step of the project spreadsheet import.

Compares every sheet row with the organization's stored projects (matched by
normalized name) and produces a change-set: documents to insert and sparse
`$set` updates. Nothing is written here; the same inputs with the same clock
and id factory always yield the same result.

Rows that cannot be used (type mismatch, missing or repeated name, unknown
county) are reported in `errors` and skipped; the rest of the batch proceeds.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from core.config import settings
from core.errors import StorageError, ValidationError, extract_supabase_error
from core.logging_config import logger
from core.utils import normalize_text
from models.project import IMMUTABLE_FIELDS, KEY_FIELD, PROJECT_OBJECT_FIELDS
from models.project_import import (
    AnalyzeResult,
    DbOperations,
    InsertOperation,
    UpdateFilter,
    UpdateOperation,
    UpdateSpec,
)
from services.comparison import values_equal
from services.field_mapping import (
    FieldMapping,
    build_field_mapping,
    build_typed_row,
    is_empty_object,
    require_key_field,
)
from services.geography import geography_for, load_county_index, resolve_county
from services.spreadsheet_parser import SourceRow, parse_spreadsheet


NO_CHANGES_MESSAGE = "No changes detected. All projects are up to date."


def normalize_name(name) -> str:
    return normalize_text(name)


def new_project_id() -> str:
    return str(uuid.uuid4())


# -----------------------------------------------------
# Stored projects
# -----------------------------------------------------
def fetch_existing_projects(client, organization_id: str) -> List[dict]:
    try:
        result = (
            client.table(settings.PROJECTS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .order("createdAt")
            .execute()
        )
    except Exception as e:
        raise StorageError(f"Unable to load existing projects: {extract_supabase_error(e)}")
    return result.data or []


def index_existing_projects(projects: Sequence[dict]) -> Dict[str, dict]:
    """normalized name → stored project. On duplicates the first one wins."""
    index: Dict[str, dict] = {}
    for project in projects:
        key = normalize_name(project.get("name"))
        if not key:
            continue
        if key in index:
            logger.warning(
                f"Duplicate stored project name '{project.get('name')}' "
                f"(ids {index[key].get('id')} and {project.get('id')}); using the first"
            )
            continue
        index[key] = project
    return index


def diff_object(incoming: dict, stored, field: str, tolerance_seconds: Optional[float] = None):
    """
    Compare an object field only on the sub-keys the sheet supplies.
    Returns the stored object merged with the incoming sub-keys, or None when equal.
    """
    current = stored if isinstance(stored, dict) else {}
    if all(
        values_equal(value, current.get(key), f"{field}.{key}", tolerance_seconds)
        for key, value in incoming.items()
    ):
        return None
    return {**current, **incoming}


def diff_project(incoming: dict, stored: dict, tolerance_seconds: Optional[float] = None) -> dict:
    """Fields of `incoming` whose value differs from `stored`. Immutable fields never differ."""
    changes = {}
    for field, value in incoming.items():
        if field in IMMUTABLE_FIELDS:
            continue
        if field in PROJECT_OBJECT_FIELDS and isinstance(value, dict):
            merged = diff_object(value, stored.get(field), field, tolerance_seconds)
            if merged is not None:
                changes[field] = None if is_empty_object(merged) else merged
            continue
        if not values_equal(value, stored.get(field), field, tolerance_seconds):
            changes[field] = value
    return changes


# -----------------------------------------------------
# Analyze
# -----------------------------------------------------
def analyze_rows(
    rows: Sequence[SourceRow],
    mapping: FieldMapping,
    existing_projects: Sequence[dict],
    organization_id: str,
    counties: Optional[Dict[str, dict]] = None,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
    tolerance_seconds: Optional[float] = None,
) -> AnalyzeResult:
    if not organization_id:
        raise ValidationError("Organization ID is required.")
    require_key_field(mapping)

    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    id_factory = id_factory or new_project_id

    logs = ["Starting analysis process"]
    logs.append(
        "Field mapping: " + ", ".join(f"{header} → {path}" for header, path in mapping.columns.items())
    )
    if mapping.unmapped:
        logs.append(f"Columns without a matching field (ignored): {', '.join(mapping.unmapped)}")

    existing_index = index_existing_projects(existing_projects)
    logs.append(f"Fetched {len(existing_projects)} existing projects from database")
    logs.append(f"Rows to analyze: {len(rows)}")

    operations = DbOperations()
    projects_to_create: List[dict] = []
    projects_to_update: List[dict] = []
    missing_counties: List[str] = []
    errors: List[str] = []
    seen_names: Dict[str, int] = {}
    unchanged = 0

    for source_row in rows:
        typed, error = build_typed_row(source_row, mapping)
        if error:
            logger.warning(error)
            errors.append(error)
            continue

        row_number = typed.row_number
        fields = {k: v for k, v in typed.fields.items() if k not in IMMUTABLE_FIELDS}
        name = fields.get(KEY_FIELD)
        key = normalize_name(name)

        if not key:
            errors.append(f"Row {row_number}: missing project name")
            continue

        if key in seen_names:
            errors.append(
                f"Row {row_number}: duplicate project name '{name}' (already on row {seen_names[key]})"
            )
            continue
        seen_names[key] = row_number

        geography = {}
        county_name = fields.get("county_name")
        if county_name and counties is not None:
            county = resolve_county(counties, county_name)
            if county is None:
                if county_name not in missing_counties:
                    missing_counties.append(county_name)
                errors.append(f"Row {row_number}: county '{county_name}' not found")
                continue
            geography = geography_for(county)

        existing = existing_index.get(key)

        # ---------- insert ----------
        if existing is None:
            project_id = id_factory()
            document = {
                **{k: (None if is_empty_object(v) else v) for k, v in fields.items()},
                **geography,
                "_id": project_id,
                "organization_id": organization_id,
                "createdAt": timestamp,
                "updatedAt": timestamp,
            }
            operations.insert.append(InsertOperation(document=document))
            projects_to_create.append({
                project_id: {
                    "name": name,
                    **{k: v for k, v in document.items() if k not in ("_id", "updatedAt", KEY_FIELD)},
                }
            })
            continue

        # ---------- update ----------
        changes = diff_project(fields, existing, tolerance_seconds)
        if not changes:
            unchanged += 1
            continue

        project_id = str(existing.get("id"))
        logs.append(f"Project '{existing.get('name')}' differs in: {', '.join(changes)}")
        operations.update.append(
            UpdateOperation(
                filter=UpdateFilter(id=project_id),
                update=UpdateSpec(set_fields={**changes, "updatedAt": timestamp}),
            )
        )
        projects_to_update.append({project_id: {"name": existing.get("name"), **changes}})

    logs.append("Analysis process completed")
    logs.append(f"Projects to create: {len(operations.insert)}")
    logs.append(f"Projects to update: {len(operations.update)}")
    logs.append(f"Projects unchanged: {unchanged}")
    logs.append(f"Errors encountered: {len(errors)}")
    if missing_counties:
        logs.append(f"Missing counties: {', '.join(missing_counties)}")

    logger.info(
        f"Analyze org={organization_id}: {len(operations.insert)} inserts, "
        f"{len(operations.update)} updates, {unchanged} unchanged, {len(errors)} errors"
    )

    message = None
    if not operations.insert and not operations.update and not errors:
        message = NO_CHANGES_MESSAGE

    return AnalyzeResult(
        message=message,
        dbOperations=operations,
        projectsToCreate=projects_to_create,
        projectsToUpdate=projects_to_update,
        missingCounties=missing_counties,
        errors=errors,
        logs=logs,
    )


def analyze_upload(
    client,
    content: bytes,
    filename: Optional[str],
    organization_id: str,
    overrides: Optional[Dict[str, Optional[str]]] = None,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> AnalyzeResult:
    """Parse → map → load stored state → analyze. Read-only."""
    if not organization_id:
        raise ValidationError("Organization ID is required.")

    sheet = parse_spreadsheet(content, filename)
    mapping = build_field_mapping(sheet.headers, overrides=overrides)
    require_key_field(mapping)

    existing = fetch_existing_projects(client, organization_id)
    counties = load_county_index(client) if mapping.has_field("county_name") else None

    return analyze_rows(
        sheet.rows,
        mapping,
        existing,
        organization_id,
        counties=counties,
        now=now,
        id_factory=id_factory,
    )
