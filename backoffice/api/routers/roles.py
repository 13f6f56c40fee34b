"""Role and permission administration endpoints."""

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backoffice.api.deps import get_db, require_permission
from backoffice.api.schemas.common import ApiResponse
from backoffice.api.schemas.role import (
    PermissionResponse,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
)
from backoffice.core.rbac.permissions import MENU_SYSTEM_ROLE
from backoffice.core.security import Principal
from backoffice.db.models import Role
from backoffice.services import RoleService

router = APIRouter(prefix="/admin/roles", tags=["roles"])

role_admin = require_permission(MENU_SYSTEM_ROLE)


def to_role_response(service: RoleService, role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        role_code=role.role_code,
        role_name=role.role_name,
        description=role.description,
        sort_order=role.sort_order,
        use_yn=role.use_yn,
        is_protected=role.is_protected,
        permission_codes=service.get_permission_codes(role),
        audit=asdict(role.audit) if role.audit else None,
    )


@router.get("", response_model=ApiResponse[List[RoleResponse]])
def list_roles(
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    """List all roles with their permission codes."""
    service = RoleService(db)
    return ApiResponse.ok([to_role_response(service, r) for r in service.list_roles()])


@router.get("/admin", response_model=ApiResponse[List[RoleResponse]])
def list_admin_roles(
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    """Active roles assignable to admin accounts."""
    service = RoleService(db)
    return ApiResponse.ok([to_role_response(service, r) for r in service.list_admin_roles()])


@router.get("/permissions", response_model=ApiResponse[List[PermissionResponse]])
def list_permissions(
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    """List the active permission catalog."""
    permissions = RoleService(db).list_permissions()
    return ApiResponse.ok([PermissionResponse.model_validate(p) for p in permissions])


@router.get("/code/{role_code}/permissions", response_model=ApiResponse[List[str]])
def get_role_permissions_by_code(
    role_code: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    return ApiResponse.ok(RoleService(db).get_permissions_by_role_code(role_code))


@router.get("/{role_id}", response_model=ApiResponse[RoleResponse])
def get_role(
    role_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    service = RoleService(db)
    return ApiResponse.ok(to_role_response(service, service.get_role(role_id)))


@router.post("", response_model=ApiResponse[RoleResponse], status_code=status.HTTP_201_CREATED)
def create_role(
    role_data: RoleCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    """Create a role with its permission grants."""
    service = RoleService(db)
    role = service.create_role(
        role_data.role_code,
        role_data.role_name,
        description=role_data.description,
        sort_order=role_data.sort_order,
        permission_codes=role_data.permission_codes,
        actor=principal.subject,
    )
    db.commit()
    db.refresh(role)
    return ApiResponse.ok(to_role_response(service, role), "Role created")


@router.put("/{role_id}", response_model=ApiResponse[RoleResponse])
def update_role(
    role_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    """Update a role. Omitting permission_codes keeps the current grants."""
    service = RoleService(db)
    role = service.update_role(
        role_id,
        role_name=role_data.role_name,
        description=role_data.description,
        sort_order=role_data.sort_order,
        permission_codes=role_data.permission_codes,
        actor=principal.subject,
    )
    db.commit()
    db.refresh(role)
    return ApiResponse.ok(to_role_response(service, role), "Role updated")


@router.delete("/{role_id}", response_model=ApiResponse[None])
def delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    """Delete a role. Protected roles and roles still assigned to members are refused."""
    RoleService(db).delete_role(role_id, actor=principal.subject)
    db.commit()
    return ApiResponse.ok(message="Role deleted")


@router.patch("/{role_id}/activate", response_model=ApiResponse[RoleResponse])
def activate_role(
    role_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    service = RoleService(db)
    role = service.activate_role(role_id, actor=principal.subject)
    db.commit()
    db.refresh(role)
    return ApiResponse.ok(to_role_response(service, role), "Role activated")


@router.patch("/{role_id}/deactivate", response_model=ApiResponse[RoleResponse])
def deactivate_role(
    role_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(role_admin),
):
    service = RoleService(db)
    role = service.deactivate_role(role_id, actor=principal.subject)
    db.commit()
    db.refresh(role)
    return ApiResponse.ok(to_role_response(service, role), "Role deactivated")
