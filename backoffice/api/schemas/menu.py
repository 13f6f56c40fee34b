"""Menu schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.db.models import MenuType
from .common import AuditResponse


class MenuCreate(BaseModel):
    menu_type: MenuType
    menu_name: str = Field(..., min_length=1, max_length=100)
    menu_url: Optional[str] = Field(None, max_length=200)
    parent_id: Optional[int] = None
    depth: Optional[int] = Field(None, ge=1)
    sort_order: int = 0
    icon: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)


class MenuUpdate(BaseModel):
    menu_name: Optional[str] = Field(None, min_length=1, max_length=100)
    menu_url: Optional[str] = Field(None, max_length=200)
    sort_order: Optional[int] = None
    icon: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)


class MenuResponse(BaseModel):
    id: int
    menu_type: str
    menu_name: str
    menu_url: Optional[str] = None
    parent_id: Optional[int] = None
    depth: int
    sort_order: int
    icon: Optional[str] = None
    description: Optional[str] = None
    use_yn: str
    audit: Optional[AuditResponse] = None
    children: List["MenuResponse"] = Field(default_factory=list)

    model_config = {"from_attributes": True}


MenuResponse.model_rebuild()
