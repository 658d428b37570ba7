"""Role to permission matrix."""

from __future__ import annotations

APPOINTMENTS_READ = "appointments:read"
REPORTS_READ = "reports:read"
REPORTS_READ_BRANCH = "reports:read:branch"
ALL = "*"

ROLE_PERMISSIONS: dict[str, tuple[str, ...]] = {
    "super_owner": (ALL,),
    "regional_manager": (
        "branch:read",
        "branch:write",
        "users:read",
        "users:write",
        "appointments:*",
        "customers:*",
        "services:read",
        "bills:*",
        REPORTS_READ,
        "inventory:*",
        "expenses:*",
        "marketing:*",
    ),
    "branch_manager": (
        "branch:read",
        "users:read",
        "appointments:*",
        "customers:*",
        "services:read",
        "bills:*",
        REPORTS_READ_BRANCH,
        "inventory:*",
        "expenses:write",
        "marketing:write:branch",
    ),
    "receptionist": (
        "appointments:*",
        "customers:read",
        "customers:write",
        "bills:read",
        "bills:write",
        "services:read",
    ),
    "stylist": (
        "appointments:read:own",
        "customers:read:limited",
        "services:read",
        "bills:read:own",
    ),
    "accountant": (
        "bills:read",
        REPORTS_READ,
        "reports:read:financial",
        "expenses:read",
        "inventory:read",
    ),
}

# Roles that can read every branch of their tenant.
GLOBAL_BRANCH_ROLES = frozenset({"super_owner", "regional_manager"})


def has_permission(role: str, permission: str) -> bool:
    """``resource:*`` grants every permission on that resource; ``*`` grants everything."""
    granted = ROLE_PERMISSIONS.get(role, ())
    if ALL in granted:
        return True
    resource = permission.split(":", 1)[0]
    return permission in granted or f"{resource}:*" in granted
