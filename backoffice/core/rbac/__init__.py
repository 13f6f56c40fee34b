"""RBAC (Role-Based Access Control) for the back office.

Permission catalog, baseline roles, permission resolution and request gating.
"""

from .permissions import PermissionGroup, PermissionDef, PERMISSION_DEFINITIONS
from .roles import DEFAULT_ROLES, SUPPLEMENT_GRANTEES
from .resolver import resolve_permissions, get_role_permission_codes

__all__ = [
    "PermissionGroup",
    "PermissionDef",
    "PERMISSION_DEFINITIONS",
    "DEFAULT_ROLES",
    "SUPPLEMENT_GRANTEES",
    "resolve_permissions",
    "get_role_permission_codes",
]
