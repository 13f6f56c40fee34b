"""Role and permission administration.

Roles own a set of permission grants. Grants are always replaced as a whole:
a role edit deletes every grant of the role and inserts the new set, so the
stored set is exactly what the caller submitted.

Service methods flush but never commit; the caller (one request, one
transaction) decides.
"""

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from backoffice.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PolicyViolationError,
)
from backoffice.core.rbac.resolver import get_role_permission_codes
from backoffice.core.rbac.roles import USER
from backoffice.db.audit import stamp_created, stamp_modified
from backoffice.db.models import Member, Permission, Role, RolePermission

logger = logging.getLogger(__name__)


class RoleService:
    """
    Administration of roles and their permission grants.

    Handles:
    - Role listing and lookup (with granted permission codes)
    - Role create/update with atomic grant replacement
    - Activation, deactivation and deletion under the protected-role policy
    - Permission catalog listing
    """

    def __init__(self, db: Session):
        self.db = db

    # -- Queries ---------------------------------------------------------------

    def list_roles(self) -> List[Role]:
        """All roles ordered by sort order, then id."""
        return self.db.query(Role).order_by(Role.sort_order, Role.id).all()

    def list_active_roles(self) -> List[Role]:
        return (
            self.db.query(Role)
            .filter(Role.use_yn == "Y")
            .order_by(Role.sort_order, Role.id)
            .all()
        )

    def list_admin_roles(self) -> List[Role]:
        """Active roles that can be assigned to back-office accounts (everything but USER)."""
        return (
            self.db.query(Role)
            .filter(Role.use_yn == "Y", Role.role_code != USER)
            .order_by(Role.sort_order, Role.id)
            .all()
        )

    def get_role(self, role_id: int) -> Role:
        role = self.db.get(Role, role_id)
        if role is None:
            raise NotFoundError(f"Role not found: {role_id}")
        return role

    def get_role_by_code(self, role_code: str) -> Role:
        role = self.db.query(Role).filter(Role.role_code == role_code).first()
        if role is None:
            raise NotFoundError(f"Role not found: {role_code}")
        return role

    def get_permission_codes(self, role: Role) -> List[str]:
        return get_role_permission_codes(self.db, role.id)

    def get_permissions_by_role_code(self, role_code: str) -> List[str]:
        """Permission codes granted to a role, looked up by code."""
        return self.get_permission_codes(self.get_role_by_code(role_code))

    def list_permissions(self) -> List[Permission]:
        """Active permissions ordered by group, then sort order."""
        return (
            self.db.query(Permission)
            .filter(Permission.use_yn == "Y")
            .order_by(Permission.perm_group, Permission.sort_order, Permission.id)
            .all()
        )

    # -- Commands --------------------------------------------------------------

    def create_role(
        self,
        role_code: str,
        role_name: str,
        *,
        description: Optional[str] = None,
        sort_order: int = 0,
        permission_codes: Sequence[str] = (),
        actor: Optional[str] = None,
    ) -> Role:
        """
        Create a role and grant it the given permissions.

        Raises:
            ConflictError: role_code already exists
            NotFoundError: a permission code is unknown
        """
        role_code = (role_code or "").strip()
        if not role_code:
            raise InvalidInputError("role_code is required")

        if self.db.query(Role.id).filter(Role.role_code == role_code).first():
            raise ConflictError(f"Role code already exists: {role_code}")

        # Resolve every code before writing anything
        permissions = self._resolve_permissions(permission_codes)

        role = Role(
            role_code=role_code,
            role_name=role_name,
            description=description,
            sort_order=sort_order,
            use_yn="Y",
        )
        stamp_created(role, actor)
        self.db.add(role)
        self.db.flush()

        self._replace_grants(role, permissions)
        logger.info("Role created: %s (%d permissions) by %s", role_code, len(permissions), actor)
        return role

    def update_role(
        self,
        role_id: int,
        role_name: str,
        *,
        description: Optional[str] = None,
        sort_order: int = 0,
        permission_codes: Optional[Sequence[str]] = None,
        actor: Optional[str] = None,
    ) -> Role:
        """
        Update role fields. The role code never changes.

        Name, description and sort order are always overwritten, so
        ``description=None`` clears it. ``permission_codes=None`` leaves the
        grants untouched; any list, including an empty one, replaces them.
        """
        role_name = (role_name or "").strip()
        if not role_name:
            raise InvalidInputError("role_name is required")

        role = self.get_role(role_id)

        permissions = None
        if permission_codes is not None:
            permissions = self._resolve_permissions(permission_codes)

        role.role_name = role_name
        role.description = description
        role.sort_order = sort_order
        stamp_modified(role, actor)

        if permissions is not None:
            self._replace_grants(role, permissions)

        self.db.flush()
        logger.info("Role updated: %s by %s", role.role_code, actor)
        return role

    def activate_role(self, role_id: int, *, actor: Optional[str] = None) -> Role:
        role = self.get_role(role_id)
        role.activate()
        stamp_modified(role, actor)
        self.db.flush()
        return role

    def deactivate_role(self, role_id: int, *, actor: Optional[str] = None) -> Role:
        role = self.get_role(role_id)
        if role.is_protected:
            raise PolicyViolationError(f"{role.role_code} role cannot be deactivated")
        role.deactivate()
        stamp_modified(role, actor)
        self.db.flush()
        logger.info("Role deactivated: %s by %s", role.role_code, actor)
        return role

    def delete_role(self, role_id: int, *, actor: Optional[str] = None) -> None:
        """
        Delete a role and its grants.

        Raises:
            PolicyViolationError: the role is protected or still assigned to members
        """
        role = self.get_role(role_id)
        if role.is_protected:
            raise PolicyViolationError(f"{role.role_code} role cannot be deleted")

        members = self.db.query(Member).filter(Member.role_id == role.id).count()
        if members > 0:
            raise PolicyViolationError(
                f"Cannot delete role: {members} members are assigned to this role"
            )

        self.db.query(RolePermission).filter(
            RolePermission.role_id == role.id
        ).delete(synchronize_session=False)
        self.db.delete(role)
        self.db.flush()
        logger.info("Role deleted: %s by %s", role.role_code, actor)

    # -- Helpers ---------------------------------------------------------------

    def _resolve_permissions(self, permission_codes: Sequence[str]) -> List[Permission]:
        codes = list(dict.fromkeys(permission_codes))
        if not codes:
            return []

        found: Dict[str, Permission] = {
            p.perm_code: p
            for p in self.db.query(Permission).filter(Permission.perm_code.in_(codes)).all()
        }
        missing = [code for code in codes if code not in found]
        if missing:
            raise NotFoundError(f"Permission not found: {', '.join(missing)}")
        return [found[code] for code in codes]

    def _replace_grants(self, role: Role, permissions: List[Permission]) -> None:
        self.db.query(RolePermission).filter(
            RolePermission.role_id == role.id
        ).delete(synchronize_session=False)
        for permission in permissions:
            self.db.add(RolePermission(role_id=role.id, perm_id=permission.id))
        self.db.flush()
