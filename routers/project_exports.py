# routers/project_exports.py

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from core.config import settings
from core.errors import handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_permission, require_organization
from core.supabase_client import get_supabase_client
from dependencies.auth import CurrentUser
from services.project_export import export_projects_workbook

router = APIRouter(
    prefix="/projects",
    tags=["Project Export"],
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# -----------------------------------------------------
# GET /projects/export
# Same columns as the import, so the file can be edited and re-uploaded
# -----------------------------------------------------
@router.get("/export", summary="Download the organization's projects as XLSX")
def export_projects(
    current_user: CurrentUser = Depends(requires_permission("reports", "export")),
):
    organization_id = require_organization(current_user)

    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        result = (
            client.table(settings.PROJECTS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .order("name")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to export projects")

    projects = result.data or []
    buf = export_projects_workbook(projects)

    logger.info(f"Exported {len(projects)} projects for org={organization_id}")

    filename = f"projects_{datetime.now().strftime('%Y%m%d')}.xlsx"
    return StreamingResponse(
        buf,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
