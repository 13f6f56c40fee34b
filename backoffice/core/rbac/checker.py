"""Permission checking utilities."""

from typing import Iterable

from sqlalchemy.orm import Session

from backoffice.core.security import Principal
from .resolver import resolve_permissions


class PermissionChecker:
    """Checks a role's permission codes. Codes match exactly, there are no wildcards."""

    def __init__(self, permissions: Iterable[str]):
        self.permissions = set(permissions)

    def has_permission(self, code: str) -> bool:
        return code in self.permissions

    def has_any_permission(self, codes: Iterable[str]) -> bool:
        """Check if the role has any of the given permissions."""
        return any(self.has_permission(c) for c in codes)

    def has_all_permissions(self, codes: Iterable[str]) -> bool:
        """Check if the role has all of the given permissions."""
        return all(self.has_permission(c) for c in codes)


def has_permission(db: Session, principal: Principal, code: str) -> bool:
    """Check a single permission for an authenticated principal."""
    if principal is None or not principal.role_code:
        return False
    return PermissionChecker(resolve_permissions(db, principal.role_code)).has_permission(code)


def check_permissions(db: Session, role_code: str, codes: Iterable[str], require_all: bool = False) -> bool:
    """Check a role against several codes, any one of them or all of them."""
    checker = PermissionChecker(resolve_permissions(db, role_code))
    if require_all:
        return checker.has_all_permissions(codes)
    return checker.has_any_permission(codes)
