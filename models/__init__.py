# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    PermissionModule,
    PermissionAction,
    PermissionOverride,
)

# -------------------------
# Project Models
# -------------------------
from .project import (
    ProjectBase,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
)

# -------------------------
# Import change-set
# -------------------------
from .project_import import (
    DbOperations,
    AnalyzeResult,
    ApplyRequest,
    ApplyResult,
)

# -------------------------
# User Models (Supabase Auth)
# -------------------------
from .user import (
    UserRead,
    UserPermissionsUpdate,
    UserRoleUpdate,
)

__all__ = [
    # enums
    "Role",
    "PermissionModule",
    "PermissionAction",
    "PermissionOverride",

    # projects
    "ProjectBase",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",

    # import
    "DbOperations",
    "AnalyzeResult",
    "ApplyRequest",
    "ApplyResult",

    # users
    "UserRead",
    "UserPermissionsUpdate",
    "UserRoleUpdate",
]
