from typing import Optional, Dict, Any
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.supabase_client import get_supabase_client
from core.roles import ROLES
from models.enums import Role


bearer_scheme = HTTPBearer()

DEFAULT_ROLE = Role.sales_agent.value


# ============================================================
# Current User Model (full backend identity)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    email: str
    role: str

    # Tenant boundary: every record and check is scoped to it
    organization_id: Optional[str] = None

    full_name: Optional[str] = None

    # Stored shape: {"quotations": {"edit": 1}}; absent = inherit from role
    custom_permissions: Optional[Dict[str, Dict[str, Any]]] = None


def current_user_from_auth_user(auth_user) -> CurrentUser:
    """Build the backend identity from a Supabase auth user + its metadata."""
    metadata = getattr(auth_user, "user_metadata", None) or {}

    role = metadata.get("role", DEFAULT_ROLE)
    if role not in ROLES:
        role = DEFAULT_ROLE

    custom_permissions = metadata.get("custom_permissions")
    if not isinstance(custom_permissions, dict):
        custom_permissions = None

    organization_id = metadata.get("organization_id")

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email,
        role=role,
        organization_id=str(organization_id) if organization_id else None,
        full_name=metadata.get("full_name"),
        custom_permissions=custom_permissions,
    )


# ============================================================
# AUTH DECODING (Supabase: validates JWT + fetches metadata)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    token = credentials.credentials

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
        if not auth_resp or not auth_resp.user:
            raise unauthorized
        auth_user = auth_resp.user
    except HTTPException:
        raise
    except Exception:
        raise unauthorized

    if not auth_user.email:
        raise unauthorized

    return current_user_from_auth_user(auth_user)

