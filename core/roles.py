# core/roles.py

from types import MappingProxyType
from typing import List, Mapping, Optional

from models.enums import Role, PermissionModule, PermissionAction


def _freeze(role_table: dict) -> Mapping:
    """Wrap every level in a read-only proxy so nothing can mutate it at runtime."""
    return MappingProxyType({
        role: MappingProxyType({
            "description": definition["description"],
            "permissions": MappingProxyType({
                module: MappingProxyType(dict(actions))
                for module, actions in definition["permissions"].items()
            }),
        })
        for role, definition in role_table.items()
    })


# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
#   1 = allowed, 0 (or absent) = not allowed
#   A module missing from a role = no access
# ============================================
ROLES = _freeze({

    # =====================================================
    # ADMIN: Full access to everything
    # (also hard-bypassed in core.permissions)
    # =====================================================
    Role.admin.value: {
        "description": "Full system access",
        "permissions": {
            "users": {"view": 1, "create": 1, "edit": 1, "delete": 1},
            "projects": {"view": 1, "create": 1, "edit": 1, "delete": 1},
            "quotations": {"view": 1, "create": 1, "edit": 1, "delete": 1},
            "reports": {"view": 1, "export": 1},
            "inventory": {"view": 1, "create": 1, "edit": 1, "delete": 1},
        },
    },

    # =====================================================
    # SALES MANAGER: sales team + reports
    # =====================================================
    Role.sales_manager.value: {
        "description": "Sales team and reports management",
        "permissions": {
            "users": {"view": 1},
            "projects": {"view": 1, "edit": 0},
            "quotations": {"view": 1, "create": 1, "edit": 1},
            "reports": {"view": 1, "export": 1},
        },
    },

    # =====================================================
    # OPERATIONS: keeps projects and stock up to date
    # =====================================================
    Role.operations.value: {
        "description": "Operations and property updates",
        "permissions": {
            "projects": {"view": 1, "edit": 1},
            "quotations": {"view": 1},
            "reports": {"view": 1, "export": 1},
            "inventory": {"view": 1, "edit": 1, "status": 1},
        },
    },

    # =====================================================
    # SALES AGENT
    # =====================================================
    Role.sales_agent.value: {
        "description": "Sales agent",
        "permissions": {
            "projects": {"view": 1},
            "quotations": {"view": 1, "create": 1},
            "reports": {"view": 1},
        },
    },
})


# -----------------------------------------------------
# Read accessors
# -----------------------------------------------------
def get_all_roles() -> List[str]:
    return list(ROLES.keys())


def get_role_description(role) -> Optional[str]:
    definition = ROLES.get(str(role)) if role is not None else None
    return definition["description"] if definition else None


def get_role_permissions(role) -> Optional[Mapping]:
    definition = ROLES.get(str(role)) if role is not None else None
    return definition["permissions"] if definition else None


def get_module_permissions(role, module) -> Optional[Mapping]:
    permissions = get_role_permissions(role)
    if permissions is None or module is None:
        return None
    return permissions.get(str(module))


def role_matrix(role) -> dict:
    """Full module × action matrix of booleans for a role (absent → False)."""
    permissions = get_role_permissions(role) or {}
    return {
        module.value: {
            action.value: permissions.get(module.value, {}).get(action.value) == 1
            for action in PermissionAction
        }
        for module in PermissionModule
    }
