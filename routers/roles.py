# routers/roles.py

from fastapi import APIRouter, Depends, HTTPException

from core.permission_helpers import requires_permission
from core.roles import get_all_roles, get_role_description, role_matrix
from models.enums import ACTION_LABELS, MODULE_LABELS

router = APIRouter(
    prefix="/roles",
    tags=["Roles"],
)


def serialize_role(role: str) -> dict:
    return {
        "role": role,
        "description": get_role_description(role),
        "permissions": role_matrix(role),
    }


# -----------------------------------------------------
# GET /roles
# -----------------------------------------------------
@router.get(
    "",
    summary="List roles and their permission matrices",
    dependencies=[Depends(requires_permission("users", "view"))],
)
def list_roles():
    return [serialize_role(role) for role in get_all_roles()]


# -----------------------------------------------------
# GET /roles/catalog
# Modules and actions with display labels
# -----------------------------------------------------
@router.get(
    "/catalog",
    summary="Permission modules and actions",
    dependencies=[Depends(requires_permission("users", "view"))],
)
def permission_catalog():
    return {
        "modules": [{"key": m.value, "label": label} for m, label in MODULE_LABELS.items()],
        "actions": [{"key": a.value, "label": label} for a, label in ACTION_LABELS.items()],
    }


# -----------------------------------------------------
# GET /roles/{role}
# -----------------------------------------------------
@router.get(
    "/{role}",
    summary="Get one role",
    dependencies=[Depends(requires_permission("users", "view"))],
)
def get_role(role: str):
    if role not in get_all_roles():
        raise HTTPException(404, f"Role '{role}' not found")
    return serialize_role(role)
