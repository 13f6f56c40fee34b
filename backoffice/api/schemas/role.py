"""Role and permission schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import AuditResponse


class PermissionResponse(BaseModel):
    id: int
    perm_code: str
    perm_name: str
    perm_group: str
    description: Optional[str] = None
    sort_order: int

    model_config = {"from_attributes": True}


class RoleCreate(BaseModel):
    role_code: str = Field(..., min_length=1, max_length=30, pattern=r"^[A-Z][A-Z0-9_]*$")
    role_name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    sort_order: int = 0
    permission_codes: List[str] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    role_name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    sort_order: int = 0
    # None keeps the current grants; a list (even empty) replaces them
    permission_codes: Optional[List[str]] = None


class RoleResponse(BaseModel):
    id: int
    role_code: str
    role_name: str
    description: Optional[str] = None
    sort_order: int
    use_yn: str
    is_protected: bool
    permission_codes: List[str] = Field(default_factory=list)
    audit: Optional[AuditResponse] = None
