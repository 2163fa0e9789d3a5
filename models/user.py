# models/user.py

from typing import Dict, Optional
from datetime import datetime
from pydantic import BaseModel, field_validator

from models.enums import Role, PermissionModule, PermissionAction


# ===============================================================
# SUPABASE AUTH USER MODELS
# ===============================================================

class UserRead(BaseModel):
    """
    Returned to API consumers after normalization.
    """
    id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    role: str = Role.sales_agent.value
    full_name: Optional[str] = None
    organization_id: Optional[str] = None
    custom_permissions: Optional[Dict[str, Dict[str, int]]] = None


# ===============================================================
# PERMISSION / ROLE CHANGES
# ===============================================================

class UserPermissionsUpdate(BaseModel):
    """
    Full replacement of a user's customPermissions.
    Cells are 1 (grant), 0 (deny) or null (clear → inherit from role).
    """
    custom_permissions: Dict[str, Dict[str, Optional[int]]] = {}

    @field_validator("custom_permissions")
    @classmethod
    def check_cells(cls, value):
        for module, actions in value.items():
            if PermissionModule.parse(module) is None:
                raise ValueError(f"Unknown module: {module}")
            for action, cell in actions.items():
                if PermissionAction.parse(action) is None:
                    raise ValueError(f"Unknown action: {module}.{action}")
                if cell not in (0, 1, None):
                    raise ValueError(f"{module}.{action} must be 0, 1 or null")
        return value


class UserRoleUpdate(BaseModel):
    role: Role
