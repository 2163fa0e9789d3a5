# core/permissions.py

"""
Effective permission resolution.

A check is computed on every call from the static role table plus the
user's optional customPermissions; nothing is cached or stored.

Resolution order, first match wins:
    1. role admin            → allowed (overrides cannot revoke it)
    2. override == granted   → allowed
    3. role table cell == 1  → allowed, anything else → denied

A `denied` (stored 0) override is kept and reported but does not revoke
a permission the role already grants.

Unknown roles, modules or actions resolve to False; lookups never raise.
"""

from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from core.roles import get_module_permissions
from models.enums import Role, PermissionModule, PermissionAction, PermissionOverride


# ============================================================
# Sparse per-user overrides
# ============================================================
class CustomPermissions(BaseModel):
    """module → action → tri-state override. Absent cells are `unset`."""

    overrides: Dict[PermissionModule, Dict[PermissionAction, PermissionOverride]] = {}

    @classmethod
    def from_stored(cls, raw: Optional[Mapping]) -> "CustomPermissions":
        """
        Parse the stored shape ({"quotations": {"edit": 1}}).
        Unknown modules/actions and non 0/1 values are dropped.
        """
        overrides: Dict[PermissionModule, Dict[PermissionAction, PermissionOverride]] = {}
        if not isinstance(raw, Mapping):
            return cls()

        for raw_module, raw_actions in raw.items():
            module = PermissionModule.parse(raw_module)
            if module is None or not isinstance(raw_actions, Mapping):
                continue
            for raw_action, raw_value in raw_actions.items():
                action = PermissionAction.parse(raw_action)
                state = PermissionOverride.from_stored(raw_value)
                if action is None or state is PermissionOverride.unset:
                    continue
                overrides.setdefault(module, {})[action] = state

        return cls(overrides=overrides)

    def get(self, module, action) -> PermissionOverride:
        module = PermissionModule.parse(module)
        action = PermissionAction.parse(action)
        if module is None or action is None:
            return PermissionOverride.unset
        return self.overrides.get(module, {}).get(action, PermissionOverride.unset)

    def to_stored(self) -> dict:
        stored = {}
        for module, actions in self.overrides.items():
            cells = {
                action.value: state.to_stored()
                for action, state in actions.items()
                if state is not PermissionOverride.unset
            }
            if cells:
                stored[module.value] = cells
        return stored


def _custom_permissions_of(user) -> CustomPermissions:
    raw = getattr(user, "custom_permissions", None)
    if isinstance(raw, CustomPermissions):
        return raw
    return CustomPermissions.from_stored(raw)


# ============================================================
# Permission evaluation
# ============================================================
def permission_for_role(role, module, action) -> bool:
    """True iff the base role table holds a 1 for (module, action)."""
    if role is None or module is None or action is None:
        return False
    cells = get_module_permissions(role, module)
    if not cells:
        return False
    return cells.get(str(action)) == 1


def permission_for_user(user, module, action) -> bool:
    """Effective permission for a user-like object carrying `role` and `custom_permissions`."""
    if user is None:
        return False

    role = getattr(user, "role", None)
    if role is not None and str(role) == Role.admin.value:
        return True

    if _custom_permissions_of(user).get(module, action) is PermissionOverride.granted:
        return True

    return permission_for_role(role, module, action)


def effective_permissions(user) -> Dict[str, Dict[str, bool]]:
    """Full module × action matrix for a user."""
    return {
        module.value: {
            action.value: permission_for_user(user, module.value, action.value)
            for action in PermissionAction
        }
        for module in PermissionModule
    }
