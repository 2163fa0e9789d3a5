# routers/projects.py

import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from core.config import settings
from core.errors import NotFoundError, RealtyError, handle_supabase_error, to_http_exception
from core.logging_config import logger
from core.permission_helpers import requires_permission, require_organization
from core.supabase_client import get_supabase_client
from core.utils import sanitize
from dependencies.auth import CurrentUser
from models.project import ProjectCreate, ProjectRead, ProjectUpdate
from services.geography import geography_for, load_county_index, resolve_county

router = APIRouter(
    prefix="/projects",
    tags=["Projects"],
)


def get_client_or_500():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


def fetch_project(client, project_id: str, organization_id: str) -> dict:
    try:
        result = (
            client.table(settings.PROJECTS_TABLE)
            .select("*")
            .eq("id", project_id)
            .eq("organization_id", organization_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch project")

    if not result.data:
        raise NotFoundError(f"Project '{project_id}' not found")
    return result.data[0]


# ============================================================================
# PROJECT CRUD
# ============================================================================
@router.get("", summary="List Projects")
def list_projects(
    limit: int = 100,
    name: Optional[str] = None,
    current_user: CurrentUser = Depends(requires_permission("projects", "view")),
):
    organization_id = require_organization(current_user)
    client = get_client_or_500()

    try:
        query = (
            client.table(settings.PROJECTS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .limit(limit)
        )
        if name:
            query = query.ilike("name", f"%{name}%")

        result = query.execute()
        return result.data or []

    except Exception as e:
        raise handle_supabase_error(e, "Failed to list projects")


@router.get("/{project_id}", response_model=ProjectRead, summary="Get Project")
def get_project(
    project_id: str,
    current_user: CurrentUser = Depends(requires_permission("projects", "view")),
):
    organization_id = require_organization(current_user)
    return fetch_project(get_client_or_500(), project_id, organization_id)


@router.post("", response_model=ProjectRead, summary="Create Project")
def create_project(
    payload: ProjectCreate,
    current_user: CurrentUser = Depends(requires_permission("projects", "create")),
):
    organization_id = require_organization(current_user)
    client = get_client_or_500()

    data = sanitize(payload.model_dump(mode="json"))

    if data.get("county_name"):
        try:
            county = resolve_county(load_county_index(client), data["county_name"])
        except RealtyError as e:
            raise to_http_exception(e)
        if county is None:
            raise HTTPException(400, f"County '{data['county_name']}' not found")
        data.update(geography_for(county))

    now = datetime.now(timezone.utc).isoformat()
    data.update({
        "id": str(uuid.uuid4()),
        "organization_id": organization_id,
        "createdAt": now,
        "updatedAt": now,
    })

    try:
        result = client.table(settings.PROJECTS_TABLE).insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create project")

    logger.info(f"Project '{payload.name}' created by {current_user.id}")
    return result.data[0] if result.data else data


@router.patch("/{project_id}", response_model=ProjectRead, summary="Update Project")
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    current_user: CurrentUser = Depends(requires_permission("projects", "edit")),
):
    organization_id = require_organization(current_user)
    client = get_client_or_500()

    update_data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    if not update_data:
        raise HTTPException(400, "No fields provided to update.")
    update_data["updatedAt"] = datetime.now(timezone.utc).isoformat()

    try:
        result = (
            client.table(settings.PROJECTS_TABLE)
            .update(update_data)
            .eq("id", project_id)
            .eq("organization_id", organization_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update project")

    if not result.data:
        raise NotFoundError(f"Project '{project_id}' not found")
    return result.data[0]


@router.delete("/{project_id}", summary="Delete Project")
def delete_project(
    project_id: str,
    current_user: CurrentUser = Depends(requires_permission("projects", "delete")),
):
    organization_id = require_organization(current_user)
    client = get_client_or_500()

    try:
        result = (
            client.table(settings.PROJECTS_TABLE)
            .delete()
            .eq("id", project_id)
            .eq("organization_id", organization_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete project")

    if not result.data:
        raise NotFoundError(f"Project '{project_id}' not found")

    logger.info(f"Project {project_id} deleted by {current_user.id}")
    return {"status": "deleted", "id": project_id}
