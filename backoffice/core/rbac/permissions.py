"""Permission catalog for the back office.

Permission codes are flat tokens grouped by category:
  - MENU_*   access to a back-office menu
  - MENU_SYSTEM_* access to a page under the System menu (SYSTEM group)
  - DATA_*   data manipulation rights

The catalog is what the bootstrap seeder provisions; the database is the
source of truth at request time.
"""

from enum import Enum
from typing import NamedTuple


class PermissionGroup(str, Enum):
    """Categories a permission belongs to."""

    MENU = "MENU"       # Back-office menu access
    SYSTEM = "SYSTEM"   # System administration pages
    DATA = "DATA"       # Read/write/delete rights on data


class PermissionDef(NamedTuple):
    """Seed definition of one permission."""
    code: str
    name: str
    group: PermissionGroup
    description: str
    sort_order: int


# Menu access
MENU_DASHBOARD = "MENU_DASHBOARD"
MENU_POST = "MENU_POST"
MENU_STATISTICS = "MENU_STATISTICS"
MENU_USER = "MENU_USER"
MENU_CONTENT = "MENU_CONTENT"
MENU_POPUP = "MENU_POPUP"
MENU_INTERIOR = "MENU_INTERIOR"

# System administration
MENU_SYSTEM_MENU = "MENU_SYSTEM_MENU"
MENU_SYSTEM_ADMIN = "MENU_SYSTEM_ADMIN"
MENU_SYSTEM_IP = "MENU_SYSTEM_IP"
MENU_SYSTEM_CODE = "MENU_SYSTEM_CODE"
MENU_SYSTEM_BOARD = "MENU_SYSTEM_BOARD"
MENU_SYSTEM_ROLE = "MENU_SYSTEM_ROLE"

# Data manipulation
DATA_READ = "DATA_READ"
DATA_WRITE = "DATA_WRITE"
DATA_DELETE = "DATA_DELETE"


BASELINE_PERMISSIONS: tuple[PermissionDef, ...] = (
    PermissionDef(MENU_DASHBOARD, "Dashboard access", PermissionGroup.MENU, "Access to the dashboard menu", 1),
    PermissionDef(MENU_POST, "Post management access", PermissionGroup.MENU, "Access to the post management menu", 2),
    PermissionDef(MENU_STATISTICS, "Statistics access", PermissionGroup.MENU, "Access to the statistics menu", 3),
    PermissionDef(MENU_USER, "User management access", PermissionGroup.MENU, "Access to the user management menu", 4),
    PermissionDef(MENU_SYSTEM_MENU, "Menu management access", PermissionGroup.SYSTEM, "System > menu management", 5),
    PermissionDef(MENU_SYSTEM_ADMIN, "Admin account access", PermissionGroup.SYSTEM, "System > admin account management", 6),
    PermissionDef(MENU_SYSTEM_IP, "IP management access", PermissionGroup.SYSTEM, "System > IP management", 7),
    PermissionDef(MENU_SYSTEM_CODE, "Common code access", PermissionGroup.SYSTEM, "System > common code management", 8),
    PermissionDef(MENU_SYSTEM_BOARD, "Board settings access", PermissionGroup.SYSTEM, "System > board settings", 9),
    PermissionDef(MENU_SYSTEM_ROLE, "Role management access", PermissionGroup.SYSTEM, "System > role/permission management", 10),
    PermissionDef(MENU_CONTENT, "Content management access", PermissionGroup.MENU, "Access to the content management menu", 11),
    PermissionDef(DATA_READ, "Read data", PermissionGroup.DATA, "Read data", 1),
    PermissionDef(DATA_WRITE, "Create/update data", PermissionGroup.DATA, "Create and update data", 2),
    PermissionDef(DATA_DELETE, "Delete data", PermissionGroup.DATA, "Delete data", 3),
)

# Added after the first release; supplemented into already-provisioned databases.
MENU_POPUP_DEF = PermissionDef(
    MENU_POPUP, "Popup management access", PermissionGroup.MENU, "Access to the popup management menu", 12,
)
MENU_INTERIOR_DEF = PermissionDef(
    MENU_INTERIOR, "Interior management access", PermissionGroup.MENU, "Access to the interior management menu", 13,
)


# All permissions the code knows about: code -> definition
PERMISSION_DEFINITIONS: dict[str, PermissionDef] = {
    p.code: p for p in BASELINE_PERMISSIONS + (MENU_POPUP_DEF, MENU_INTERIOR_DEF)
}


def get_permission_def(code: str) -> PermissionDef:
    """Look up the seed definition for a code (KeyError when unknown)."""
    return PERMISSION_DEFINITIONS[code]


def get_permissions_for_group(group: PermissionGroup) -> list[str]:
    """Baseline permission codes in a group, in catalog order."""
    return [p.code for p in BASELINE_PERMISSIONS if p.group == group]
