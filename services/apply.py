# services/apply.py

from core.config import settings
from core.errors import ValidationError, extract_supabase_error
from core.logging_config import logger
from core.utils import is_valid_uuid
from models.project import IMMUTABLE_FIELDS
from models.project_import import ApplyResult, DbOperations


def to_storage_document(document: dict, organization_id: str) -> dict:
    """Change-set document → table row (`_id` is stored as `id`, tenant always forced)."""
    project_id = document.get("_id") or document.get("id")
    if not project_id:
        raise ValidationError("document has no _id")
    row = {k: v for k, v in document.items() if k not in ("_id", "id")}
    row["id"] = str(project_id)
    row["organization_id"] = organization_id
    return row


def apply_operations(client, db_operations: DbOperations, organization_id: str) -> ApplyResult:
    """
    Execute a reviewed change-set.

    Inserts go in as one batch (all or nothing); a document without an `_id`
    is reported in `errors` and left out of the batch. Each update runs on its own,
    filtered by (id, organization); a failing update is recorded in `errors`
    and the rest continue. Nothing is retried or rolled back.
    """
    if not organization_id:
        raise ValidationError("Organization ID is required.")

    table = settings.PROJECTS_TABLE
    result = ApplyResult()

    # ------------------------------
    # Inserts (single batch)
    # ------------------------------
    documents = []
    for index, op in enumerate(db_operations.insert, start=1):
        try:
            documents.append(to_storage_document(op.document, organization_id))
        except ValidationError as e:
            result.errors.append(f"Insert error for document {index}: {e.message}")

    if documents:
        try:
            response = client.table(table).insert(documents).execute()
            result.inserted = len(response.data or [])
            logger.info(f"Apply org={organization_id}: inserted {result.inserted} projects")
        except Exception as e:
            detail = extract_supabase_error(e)
            logger.error(f"Apply org={organization_id}: batch insert failed: {detail}")
            result.errors.append(f"Insert error: {detail}")

    # ------------------------------
    # Updates (independent)
    # ------------------------------
    for op in db_operations.update:
        project_id = op.filter.id

        if not is_valid_uuid(project_id):
            result.errors.append(f"Update error for {project_id}: invalid identifier")
            continue

        changes = {
            k: v for k, v in op.update.set_fields.items()
            if k not in IMMUTABLE_FIELDS
        }
        if not changes:
            result.errors.append(f"Update error for {project_id}: no updatable fields")
            continue

        try:
            response = (
                client.table(table)
                .update(changes)
                .eq("id", project_id)
                .eq("organization_id", organization_id)
                .execute()
            )
        except Exception as e:
            detail = extract_supabase_error(e)
            logger.error(f"Apply org={organization_id}: update {project_id} failed: {detail}")
            result.errors.append(f"Update error for {project_id}: {detail}")
            continue

        if response.data:
            result.updated += 1
        else:
            result.errors.append(f"Update error for {project_id}: project not found")

    logger.info(
        f"Apply org={organization_id}: {result.inserted} inserted, "
        f"{result.updated} updated, {len(result.errors)} errors"
    )
    return result
