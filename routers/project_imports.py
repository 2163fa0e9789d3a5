# routers/project_imports.py

import json
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from core.config import settings
from core.errors import RealtyError, to_http_exception
from core.logging_config import logger
from core.permission_helpers import requires_permission, require_organization
from core.supabase_client import get_supabase_client
from dependencies.auth import CurrentUser
from models.project import KEY_FIELD, PROJECT_IMPORT_FIELDS, PROJECT_OBJECT_FIELDS, mappable_field_paths
from models.project_import import AnalyzeResult, ApplyRequest, ApplyResult, ImportField, MappingPreview
from services.apply import apply_operations
from services.field_mapping import build_field_mapping
from services.reconciliation import analyze_upload
from services.spreadsheet_parser import parse_spreadsheet

router = APIRouter(
    prefix="/projects/import",
    tags=["Project Import"],
)


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def parse_mapping_field(mapping: Optional[str]) -> Optional[Dict[str, Optional[str]]]:
    """`mapping` form field: JSON object {"<header>": "<field path>" | null}."""
    if not mapping:
        return None
    try:
        parsed = json.loads(mapping)
    except json.JSONDecodeError:
        raise HTTPException(400, "Invalid JSON in mapping parameter")

    if not isinstance(parsed, dict) or not all(
        isinstance(k, str) and (v is None or isinstance(v, str)) for k, v in parsed.items()
    ):
        raise HTTPException(400, "mapping must be a JSON object of column → field (or null)")
    return parsed


def get_client_or_500():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


# -----------------------------------------------------
# GET /projects/import/fields
# -----------------------------------------------------
@router.get(
    "/fields",
    response_model=List[ImportField],
    summary="Fields a spreadsheet column can map to",
    dependencies=[Depends(requires_permission("projects", "view"))],
)
def list_import_fields():
    fields = []
    for path in mappable_field_paths():
        if "." in path:
            parent, key = path.split(".", 1)
            kind = PROJECT_OBJECT_FIELDS[parent][key]
        else:
            kind = PROJECT_IMPORT_FIELDS[path]
        fields.append(ImportField(path=path, kind=kind.value, key=path == KEY_FIELD))
    return fields


# -----------------------------------------------------
# POST /projects/import/preview
# -----------------------------------------------------
@router.post(
    "/preview",
    response_model=MappingPreview,
    summary="Show how the columns of a spreadsheet would be mapped",
    dependencies=[Depends(requires_permission("projects", "edit"))],
)
async def preview_import(
    file: UploadFile = File(...),
    mapping: Optional[str] = Form(None, description='JSON object: {"Column": "field.path" | null}'),
):
    overrides = parse_mapping_field(mapping)
    content = await file.read()

    try:
        sheet = parse_spreadsheet(content, file.filename)
        field_mapping = build_field_mapping(sheet.headers, overrides=overrides)
    except RealtyError as e:
        raise to_http_exception(e)

    return MappingPreview(
        headers=sheet.headers,
        mapping=field_mapping.columns,
        unmapped=field_mapping.unmapped,
        ignored=field_mapping.ignored,
        sample_rows=[row.values for row in sheet.rows[: settings.IMPORT_PREVIEW_ROWS]],
        total_rows=len(sheet.rows),
    )


# -----------------------------------------------------
# POST /projects/import/analyze
# Read-only: returns the change-set for review
# -----------------------------------------------------
@router.post(
    "/analyze",
    response_model=AnalyzeResult,
    summary="Compare a spreadsheet with stored projects",
)
async def analyze_import(
    file: UploadFile = File(...),
    mapping: Optional[str] = Form(None, description='JSON object: {"Column": "field.path" | null}'),
    current_user: CurrentUser = Depends(requires_permission("projects", "edit")),
):
    organization_id = require_organization(current_user)
    overrides = parse_mapping_field(mapping)
    content = await file.read()
    client = get_client_or_500()

    logger.info(f"Import analyze by {current_user.id}: file={file.filename} org={organization_id}")

    try:
        return analyze_upload(
            client,
            content,
            file.filename,
            organization_id,
            overrides=overrides,
        )
    except RealtyError as e:
        raise to_http_exception(e)


# -----------------------------------------------------
# POST /projects/import/apply
# -----------------------------------------------------
@router.post(
    "/apply",
    response_model=ApplyResult,
    summary="Execute a reviewed change-set",
)
def apply_import(
    payload: ApplyRequest,
    current_user: CurrentUser = Depends(requires_permission("projects", "edit")),
):
    organization_id = require_organization(current_user)
    client = get_client_or_500()

    logger.info(
        f"Import apply by {current_user.id}: {len(payload.dbOperations.insert)} inserts, "
        f"{len(payload.dbOperations.update)} updates"
    )

    try:
        return apply_operations(client, payload.dbOperations, organization_id)
    except RealtyError as e:
        raise to_http_exception(e)
