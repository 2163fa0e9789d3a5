from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]

    @classmethod
    def parse(cls, value):
        """Return the member for `value`, or None when it is not one of ours."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Exactly one per user, assigned at creation."""

    admin = "admin"
    sales_manager = "sales_manager"
    operations = "operations"
    sales_agent = "sales_agent"


# -----------------------------------------------------
# PERMISSION MODULE
# -----------------------------------------------------
class PermissionModule(BaseStrEnum):
    users = "users"
    projects = "projects"
    quotations = "quotations"
    reports = "reports"
    inventory = "inventory"


# -----------------------------------------------------
# PERMISSION ACTION
# -----------------------------------------------------
class PermissionAction(BaseStrEnum):
    view = "view"
    create = "create"
    edit = "edit"
    delete = "delete"
    export = "export"
    status = "status"


# -----------------------------------------------------
# PER-USER OVERRIDE
# -----------------------------------------------------
class PermissionOverride(BaseStrEnum):
    """
    State of one customPermissions cell.
    Stored as: absent → unset, 0 → denied, 1 → granted.
    """

    unset = "unset"
    denied = "denied"
    granted = "granted"

    @classmethod
    def from_stored(cls, value) -> "PermissionOverride":
        # bool is an int subclass; True/False behave as 1/0
        if value is None or isinstance(value, str):
            return cls.unset
        if value == 1:
            return cls.granted
        if value == 0:
            return cls.denied
        return cls.unset

    def to_stored(self):
        if self is PermissionOverride.granted:
            return 1
        if self is PermissionOverride.denied:
            return 0
        return None


MODULE_LABELS = {
    PermissionModule.users: "Users",
    PermissionModule.projects: "Projects",
    PermissionModule.quotations: "Quotations",
    PermissionModule.reports: "Reports",
    PermissionModule.inventory: "Stock",
}

ACTION_LABELS = {
    PermissionAction.view: "View",
    PermissionAction.create: "Create",
    PermissionAction.edit: "Edit",
    PermissionAction.delete: "Delete",
    PermissionAction.export: "Export",
    PermissionAction.status: "Status",
}
