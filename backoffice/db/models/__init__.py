"""Database models for the back-office RBAC core."""

from backoffice.db.models.role import Role, PROTECTED_ROLE_CODES
from backoffice.db.models.permission import Permission, RolePermission
from backoffice.db.models.menu import Menu, MenuType
from backoffice.db.models.member import Member, MEMBER_ROLE_FK_NAME

__all__ = [
    "Role",
    "PROTECTED_ROLE_CODES",
    "Permission",
    "RolePermission",
    "Menu",
    "MenuType",
    "Member",
    "MEMBER_ROLE_FK_NAME",
]
