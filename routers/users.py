# routers/users.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from core.logging_config import logger
from core.permission_helpers import requires_permission, is_admin, require_organization
from core.permissions import CustomPermissions, effective_permissions
from core.supabase_client import get_supabase_client
from dependencies.auth import get_current_user, CurrentUser, DEFAULT_ROLE
from models.enums import Role
from models.user import UserRead, UserPermissionsUpdate, UserRoleUpdate

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def extract_user_list(result):
    if isinstance(result, list):
        return result
    if isinstance(result, dict) and "users" in result:
        return result["users"]
    users_attr = getattr(result, "users", None)
    if users_attr is not None:
        return users_attr
    return []


def serialize_user(auth_user) -> dict:
    meta = getattr(auth_user, "user_metadata", None) or {}
    return UserRead(
        id=str(auth_user.id),
        email=getattr(auth_user, "email", None),
        created_at=getattr(auth_user, "created_at", None),
        role=meta.get("role", DEFAULT_ROLE),
        full_name=meta.get("full_name"),
        organization_id=meta.get("organization_id"),
        custom_permissions=CustomPermissions.from_stored(meta.get("custom_permissions")).to_stored() or None,
    ).model_dump()


def get_client_or_500():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


def get_org_user(client, user_id: str, organization_id: str):
    """Target auth user, 404 when missing or in another organization."""
    try:
        resp = client.auth.admin.get_user_by_id(user_id)
    except Exception as e:
        raise HTTPException(500, f"Supabase read error: {e}")

    user = getattr(resp, "user", None)
    if not user:
        raise HTTPException(404, "User not found")

    meta = user.user_metadata or {}
    if str(meta.get("organization_id")) != str(organization_id):
        raise HTTPException(404, "User not found")
    return user


def update_metadata(client, user, changes: dict):
    merged = {**(user.user_metadata or {}), **changes}
    try:
        resp = client.auth.admin.update_user_by_id(user.id, {"user_metadata": merged})
    except Exception as e:
        raise HTTPException(500, f"Supabase update failed: {e}")

    updated = getattr(resp, "user", None)
    if updated is None:
        user.user_metadata = merged
        updated = user
    return updated


# -----------------------------------------------------
# GET /users/me/permissions
# -----------------------------------------------------
@router.get("/me/permissions", summary="Effective permissions of the caller")
def my_permissions(current_user: CurrentUser = Depends(get_current_user)):
    return {
        "role": current_user.role,
        "custom_permissions": CustomPermissions.from_stored(current_user.custom_permissions).to_stored(),
        "permissions": effective_permissions(current_user),
    }


# -----------------------------------------------------
# GET /users
# -----------------------------------------------------
@router.get(
    "",
    response_model=List[UserRead],
    summary="List users of the caller's organization",
)
def list_users(current_user: CurrentUser = Depends(requires_permission("users", "view"))):
    organization_id = require_organization(current_user)
    client = get_client_or_500()

    try:
        users = extract_user_list(client.auth.admin.list_users())
    except Exception as e:
        raise HTTPException(500, f"Error reading Supabase users: {e}")

    return [
        serialize_user(u) for u in users
        if str((u.user_metadata or {}).get("organization_id")) == organization_id
    ]


# -----------------------------------------------------
# PATCH /users/{user_id}/permissions
# -----------------------------------------------------
@router.patch(
    "/{user_id}/permissions",
    response_model=UserRead,
    summary="Replace a user's custom permissions",
)
def update_user_permissions(
    user_id: str,
    payload: UserPermissionsUpdate,
    current_user: CurrentUser = Depends(requires_permission("users", "edit")),
):
    organization_id = require_organization(current_user)
    client = get_client_or_500()
    target = get_org_user(client, user_id, organization_id)

    # null cells are dropped: the user inherits from the role again
    stored = CustomPermissions.from_stored(payload.custom_permissions).to_stored()

    logger.info(f"User {current_user.id} set custom permissions of {user_id}: {stored}")
    updated = update_metadata(client, target, {"custom_permissions": stored})
    return serialize_user(updated)


# -----------------------------------------------------
# PATCH /users/{user_id}/role
# -----------------------------------------------------
@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    summary="Change a user's role",
)
def update_user_role(
    user_id: str,
    payload: UserRoleUpdate,
    current_user: CurrentUser = Depends(requires_permission("users", "edit")),
):
    organization_id = require_organization(current_user)

    if payload.role is Role.admin and not is_admin(current_user):
        raise HTTPException(403, "Only an admin may assign the admin role.")

    client = get_client_or_500()
    target = get_org_user(client, user_id, organization_id)

    current_role = (target.user_metadata or {}).get("role")
    if current_role == Role.admin.value and not is_admin(current_user):
        raise HTTPException(403, "Only an admin may change the role of an admin.")

    logger.info(f"User {current_user.id} set role of {user_id} to {payload.role.value}")
    updated = update_metadata(client, target, {"role": payload.role.value})
    return serialize_user(updated)
