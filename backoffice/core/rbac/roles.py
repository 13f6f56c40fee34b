"""Baseline role definitions.

Four roles ship with every installation:
1. SYSTEM_ADMIN - every permission
2. OPERATION_ADMIN - everything except the System menu
3. GENERAL_ADMIN - dashboard, posts, statistics, read/write data
4. USER - no back-office permissions
"""

from typing import Dict, List

from .permissions import (
    BASELINE_PERMISSIONS,
    PermissionGroup,
    MENU_DASHBOARD,
    MENU_POST,
    MENU_STATISTICS,
    DATA_READ,
    DATA_WRITE,
)

USER = "USER"
SYSTEM_ADMIN = "SYSTEM_ADMIN"
OPERATION_ADMIN = "OPERATION_ADMIN"
GENERAL_ADMIN = "GENERAL_ADMIN"

# Roles that receive permissions introduced by later releases
SUPPLEMENT_GRANTEES = (SYSTEM_ADMIN, OPERATION_ADMIN)


SYSTEM_ADMIN_PERMISSIONS: List[str] = [p.code for p in BASELINE_PERMISSIONS]

OPERATION_ADMIN_PERMISSIONS: List[str] = [
    p.code for p in BASELINE_PERMISSIONS if p.group != PermissionGroup.SYSTEM
]

GENERAL_ADMIN_PERMISSIONS: List[str] = [
    MENU_DASHBOARD,
    MENU_POST,
    MENU_STATISTICS,
    DATA_READ,
    DATA_WRITE,
]

USER_PERMISSIONS: List[str] = []


# Ordered by how the migration and the seeder insert them
DEFAULT_ROLES: Dict[str, dict] = {
    USER: {
        "name": "User",
        "description": "Regular site member",
        "sort_order": 4,
        "permissions": USER_PERMISSIONS,
    },
    SYSTEM_ADMIN: {
        "name": "System administrator",
        "description": "System administrator with every permission",
        "sort_order": 1,
        "permissions": SYSTEM_ADMIN_PERMISSIONS,
    },
    OPERATION_ADMIN: {
        "name": "Operations administrator",
        "description": "Operations administrator without access to the System menu",
        "sort_order": 2,
        "permissions": OPERATION_ADMIN_PERMISSIONS,
    },
    GENERAL_ADMIN: {
        "name": "General administrator",
        "description": "General administrator limited to basic management pages",
        "sort_order": 3,
        "permissions": GENERAL_ADMIN_PERMISSIONS,
    },
}


def get_default_role_permissions(role_code: str) -> List[str]:
    """Get the baseline permission codes for a default role."""
    role = DEFAULT_ROLES.get(role_code)
    if role:
        return list(role["permissions"])
    return []
