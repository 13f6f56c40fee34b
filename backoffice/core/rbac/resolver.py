"""Resolve what a role is allowed to do."""

from typing import List

from sqlalchemy.orm import Session

from backoffice.db.models import Permission, Role, RolePermission


def resolve_permissions(db: Session, role_code: str) -> set[str]:
    """
    Return the permission codes granted to a role.

    A role with no grants, or an unknown role code, resolves to an empty
    set; callers decide whether that is an error.
    """
    rows = (
        db.query(Permission.perm_code)
        .join(RolePermission, RolePermission.perm_id == Permission.id)
        .join(Role, Role.id == RolePermission.role_id)
        .filter(Role.role_code == role_code)
        .all()
    )
    return {code for (code,) in rows}


def get_role_permission_codes(db: Session, role_id: int) -> List[str]:
    """Permission codes granted to a role, in display order (group, sort order)."""
    rows = (
        db.query(Permission.perm_code)
        .join(RolePermission, RolePermission.perm_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .order_by(Permission.perm_group, Permission.sort_order, Permission.id)
        .all()
    )
    return [code for (code,) in rows]
