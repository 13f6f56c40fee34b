"""Menu endpoints. Reads are public; writes need MENU_SYSTEM_MENU."""

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backoffice.api.deps import get_db, require_permission
from backoffice.api.schemas.common import ApiResponse
from backoffice.api.schemas.menu import MenuCreate, MenuResponse, MenuUpdate
from backoffice.core.menu.tree import MenuNode
from backoffice.core.rbac.permissions import MENU_SYSTEM_MENU
from backoffice.core.security import Principal
from backoffice.db.models import Menu, MenuType
from backoffice.services import MenuService

router = APIRouter(prefix="/menus", tags=["menus"])

menu_admin = require_permission(MENU_SYSTEM_MENU)


def to_menu_response(menu: Menu, children: List[MenuResponse] = None) -> MenuResponse:
    return MenuResponse(
        id=menu.id,
        menu_type=menu.menu_type,
        menu_name=menu.menu_name,
        menu_url=menu.menu_url,
        parent_id=menu.parent_id,
        depth=menu.depth,
        sort_order=menu.sort_order,
        icon=menu.icon,
        description=menu.description,
        use_yn=menu.use_yn,
        audit=asdict(menu.audit) if menu.audit else None,
        children=children or [],
    )


def to_tree_response(node: MenuNode) -> MenuResponse:
    return to_menu_response(node.menu, [to_tree_response(child) for child in node.children])


@router.get("/type/{menu_type}", response_model=ApiResponse[List[MenuResponse]])
def get_menu_tree(
    menu_type: MenuType,
    include_inactive: bool = Query(False, description="Include deactivated menus"),
    db: Session = Depends(get_db),
):
    """Menu forest for one menu type, ordered by sort order then id at every level."""
    tree = MenuService(db).get_menu_tree(menu_type, include_inactive=include_inactive)
    return ApiResponse.ok([to_tree_response(node) for node in tree])


@router.get("", response_model=ApiResponse[List[MenuResponse]])
def list_menus(db: Session = Depends(get_db)):
    return ApiResponse.ok([to_menu_response(m) for m in MenuService(db).list_menus()])


@router.get("/{menu_id}", response_model=ApiResponse[MenuResponse])
def get_menu(menu_id: int, db: Session = Depends(get_db)):
    return ApiResponse.ok(to_menu_response(MenuService(db).get_menu(menu_id)))


@router.post("", response_model=ApiResponse[MenuResponse], status_code=status.HTTP_201_CREATED)
def create_menu(
    menu_data: MenuCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(menu_admin),
):
    menu = MenuService(db).create_menu(
        menu_data.menu_type,
        menu_data.menu_name,
        menu_url=menu_data.menu_url,
        parent_id=menu_data.parent_id,
        depth=menu_data.depth,
        sort_order=menu_data.sort_order,
        icon=menu_data.icon,
        description=menu_data.description,
        actor=principal.subject,
    )
    db.commit()
    db.refresh(menu)
    return ApiResponse.ok(to_menu_response(menu), "Menu created")


@router.put("/{menu_id}", response_model=ApiResponse[MenuResponse])
def update_menu(
    menu_id: int,
    menu_data: MenuUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(menu_admin),
):
    menu = MenuService(db).update_menu(
        menu_id,
        menu_name=menu_data.menu_name,
        menu_url=menu_data.menu_url,
        sort_order=menu_data.sort_order,
        icon=menu_data.icon,
        description=menu_data.description,
        actor=principal.subject,
    )
    db.commit()
    db.refresh(menu)
    return ApiResponse.ok(to_menu_response(menu), "Menu updated")


@router.delete("/{menu_id}", response_model=ApiResponse[MenuResponse])
def delete_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(menu_admin),
):
    """Deactivate a menu. Menus with sub-menus are refused."""
    menu = MenuService(db).delete_menu(menu_id, actor=principal.subject)
    db.commit()
    db.refresh(menu)
    return ApiResponse.ok(to_menu_response(menu), "Menu deleted")


@router.patch("/{menu_id}/activate", response_model=ApiResponse[MenuResponse])
def activate_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(menu_admin),
):
    menu = MenuService(db).activate_menu(menu_id, actor=principal.subject)
    db.commit()
    db.refresh(menu)
    return ApiResponse.ok(to_menu_response(menu), "Menu activated")
