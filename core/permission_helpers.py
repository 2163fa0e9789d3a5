from fastapi import Depends, HTTPException

from dependencies.auth import get_current_user, CurrentUser
from core.permissions import permission_for_user
from core.logging_config import logger
from models.enums import Role


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_permission(module: str, action: str):
    """
    Usage:
        @router.post("/", dependencies=[Depends(requires_permission("projects", "create"))])
    """
    module = str(module)
    action = str(action)

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not permission_for_user(current_user, module, action):
            logger.info(
                f"Permission denied: user={current_user.id} role={current_user.role} "
                f"needs {module}:{action}"
            )
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{module}:{action}' required"
            )
        return current_user

    return dependency


# ============================================================
# ROLE / TENANT HELPERS
# ============================================================

def is_admin(user: CurrentUser) -> bool:
    return user.role == Role.admin.value


def require_organization(user: CurrentUser) -> str:
    """Tenant id of the caller; every tenant-scoped route needs one."""
    if not user.organization_id:
        raise HTTPException(
            status_code=400,
            detail="Your account is not linked to an organization",
        )
    return user.organization_id
