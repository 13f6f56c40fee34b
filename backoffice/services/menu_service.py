"""Menu administration and tree retrieval."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from backoffice.core.exceptions import InvalidInputError, NotFoundError, PolicyViolationError
from backoffice.core.menu.tree import MenuNode, build_menu_tree
from backoffice.db.audit import stamp_created, stamp_modified
from backoffice.db.models import Menu, MenuType

logger = logging.getLogger(__name__)


def _menu_type_value(menu_type) -> str:
    try:
        return MenuType(menu_type).value
    except ValueError:
        raise InvalidInputError(f"Unknown menu type: {menu_type}")


class MenuService:
    """
    Menu CRUD plus tree assembly.

    Menus are never hard-deleted; removal deactivates the row and is refused
    while the menu still has children.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_menu(self, menu_id: int) -> Menu:
        menu = self.db.get(Menu, menu_id)
        if menu is None:
            raise NotFoundError(f"Menu not found: {menu_id}")
        return menu

    def list_menus(self, menu_type=None) -> List[Menu]:
        """Flat list ordered by type, sort order, id."""
        query = self.db.query(Menu)
        if menu_type is not None:
            query = query.filter(Menu.menu_type == _menu_type_value(menu_type))
        return query.order_by(Menu.menu_type, Menu.sort_order, Menu.id).all()

    def get_menu_tree(self, menu_type, include_inactive: bool = False) -> List[MenuNode]:
        """
        Menu forest for one menu type.

        Active-only mode also hides every descendant of an inactive menu,
        since its children lose their parent in the input.
        """
        query = self.db.query(Menu).filter(Menu.menu_type == _menu_type_value(menu_type))
        if not include_inactive:
            query = query.filter(Menu.use_yn == "Y")
        menus = query.order_by(Menu.sort_order, Menu.id).all()
        return build_menu_tree(menus)

    def create_menu(
        self,
        menu_type,
        menu_name: str,
        *,
        menu_url: Optional[str] = None,
        parent_id: Optional[int] = None,
        depth: Optional[int] = None,
        sort_order: int = 0,
        icon: Optional[str] = None,
        description: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Menu:
        """
        Create a menu under ``parent_id`` (or as a root).

        Depth is derived from the parent. A caller-supplied depth must agree.

        Raises:
            NotFoundError: parent does not exist
            InvalidInputError: parent has another menu type, or depth disagrees
        """
        type_value = _menu_type_value(menu_type)

        expected_depth = 1
        if parent_id is not None:
            parent = self.db.get(Menu, parent_id)
            if parent is None:
                raise NotFoundError(f"Parent menu not found: {parent_id}")
            if parent.menu_type != type_value:
                raise InvalidInputError(
                    f"Parent menu type {parent.menu_type} does not match {type_value}"
                )
            expected_depth = parent.depth + 1

        if depth is not None and depth != expected_depth:
            raise InvalidInputError(f"Menu depth must be {expected_depth}, got {depth}")

        menu = Menu(
            menu_type=type_value,
            menu_name=menu_name,
            menu_url=menu_url or None,
            parent_id=parent_id,
            depth=expected_depth,
            sort_order=sort_order,
            icon=icon,
            description=description,
            use_yn="Y",
        )
        stamp_created(menu, actor)
        self.db.add(menu)
        self.db.flush()
        logger.info("Menu created: %s (id=%s) by %s", menu_name, menu.id, actor)
        return menu

    def update_menu(
        self,
        menu_id: int,
        *,
        menu_name: Optional[str] = None,
        menu_url: Optional[str] = None,
        sort_order: Optional[int] = None,
        icon: Optional[str] = None,
        description: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Menu:
        """Update display fields. Type, parent and depth are fixed at creation."""
        menu = self.get_menu(menu_id)
        if menu_name is not None:
            menu.menu_name = menu_name
        if menu_url is not None:
            # Empty string turns the menu into a grouping node
            menu.menu_url = menu_url or None
        if sort_order is not None:
            menu.sort_order = sort_order
        if icon is not None:
            menu.icon = icon
        if description is not None:
            menu.description = description
        stamp_modified(menu, actor)
        self.db.flush()
        return menu

    def delete_menu(self, menu_id: int, *, actor: Optional[str] = None) -> Menu:
        """Soft-delete a leaf menu."""
        menu = self.get_menu(menu_id)
        children = self.db.query(Menu).filter(Menu.parent_id == menu.id).count()
        if children > 0:
            raise PolicyViolationError(
                f"Cannot delete menu with {children} sub-menus; remove them first"
            )
        menu.deactivate()
        stamp_modified(menu, actor)
        self.db.flush()
        logger.info("Menu deactivated: %s (id=%s) by %s", menu.menu_name, menu.id, actor)
        return menu

    def activate_menu(self, menu_id: int, *, actor: Optional[str] = None) -> Menu:
        menu = self.get_menu(menu_id)
        menu.activate()
        stamp_modified(menu, actor)
        self.db.flush()
        return menu
