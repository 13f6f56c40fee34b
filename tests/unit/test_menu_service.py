"""Tests for menu administration and tree retrieval."""

import pytest

from backoffice.core.exceptions import InvalidInputError, NotFoundError, PolicyViolationError
from backoffice.db.models import MenuType
from backoffice.services import MenuService


@pytest.fixture
def service(db_session):
    return MenuService(db_session)


class TestCreateMenu:

    def test_root_menu_depth_one(self, service):
        menu = service.create_menu(MenuType.ADMIN, "Dashboard", menu_url="/admin", actor="admin")
        assert menu.depth == 1
        assert menu.parent_id is None
        assert menu.is_active
        assert menu.audit.created_by == "admin"

    def test_child_depth_derived_from_parent(self, service):
        parent = service.create_menu(MenuType.ADMIN, "System")
        child = service.create_menu(MenuType.ADMIN, "Menus", menu_url="/admin/system/menus", parent_id=parent.id)
        grandchild = service.create_menu(MenuType.ADMIN, "Detail", parent_id=child.id, depth=3)

        assert child.depth == 2
        assert grandchild.depth == 3

    def test_wrong_depth_rejected(self, service):
        parent = service.create_menu(MenuType.ADMIN, "System")
        with pytest.raises(InvalidInputError):
            service.create_menu(MenuType.ADMIN, "Menus", parent_id=parent.id, depth=1)
        with pytest.raises(InvalidInputError):
            service.create_menu(MenuType.ADMIN, "Root", depth=2)

    def test_missing_parent(self, service):
        with pytest.raises(NotFoundError):
            service.create_menu(MenuType.ADMIN, "Orphan", parent_id=9999)

    def test_parent_of_other_type_rejected(self, service):
        parent = service.create_menu(MenuType.USER, "About")
        with pytest.raises(InvalidInputError):
            service.create_menu(MenuType.ADMIN, "Child", parent_id=parent.id)

    def test_unknown_menu_type(self, service):
        with pytest.raises(InvalidInputError):
            service.create_menu("PARTNER", "Nope")

    def test_accepts_type_as_string(self, service):
        menu = service.create_menu("USER", "Home", menu_url="/")
        assert menu.menu_type == "USER"


class TestUpdateMenu:

    def test_update_fields(self, service, menu_factory):
        menu = menu_factory(menu_name="Old", menu_url="/old")
        service.update_menu(menu.id, menu_name="New", sort_order=7, icon="StarOutlined", actor="editor")

        assert menu.menu_name == "New"
        assert menu.menu_url == "/old"
        assert menu.sort_order == 7
        assert menu.icon == "StarOutlined"
        assert menu.audit.modified_by == "editor"
        assert menu.audit.created_by == "test"

    def test_empty_url_makes_group(self, service, menu_factory):
        menu = menu_factory(menu_url="/somewhere")
        service.update_menu(menu.id, menu_url="")
        assert menu.menu_url is None

    def test_missing_menu(self, service):
        with pytest.raises(NotFoundError):
            service.update_menu(9999, menu_name="X")


class TestDeleteMenu:

    def test_leaf_is_soft_deleted(self, service, menu_factory, db_session):
        menu = menu_factory()
        service.delete_menu(menu.id, actor="admin")

        assert service.get_menu(menu.id).use_yn == "N"

    def test_menu_with_children_rejected(self, service, menu_factory):
        parent = menu_factory()
        menu_factory(parent=parent)

        with pytest.raises(PolicyViolationError):
            service.delete_menu(parent.id)
        assert parent.is_active

    def test_inactive_children_still_block(self, service, menu_factory):
        parent = menu_factory()
        menu_factory(parent=parent, use_yn="N")
        with pytest.raises(PolicyViolationError):
            service.delete_menu(parent.id)

    def test_activate_restores(self, service, menu_factory):
        menu = menu_factory(use_yn="N")
        service.activate_menu(menu.id)
        assert menu.is_active


class TestMenuTree:

    def test_scenario_ordering_and_nesting(self, service, menu_factory):
        a = menu_factory(menu_name="A", sort_order=2)
        b = menu_factory(menu_name="B", sort_order=1)
        c = menu_factory(menu_name="C", parent=a, sort_order=1)

        tree = service.get_menu_tree(MenuType.ADMIN)

        assert [node.menu.menu_name for node in tree] == ["B", "A"]
        assert tree[0].children == []
        assert [node.id for node in tree[1].children] == [c.id]
        assert b.id == tree[0].id

    def test_equal_sort_order_falls_back_to_id(self, service, menu_factory):
        first = menu_factory(sort_order=1)
        second = menu_factory(sort_order=1)
        assert [node.id for node in service.get_menu_tree(MenuType.ADMIN)] == [first.id, second.id]

    def test_types_are_separate(self, service, menu_factory):
        menu_factory(menu_type=MenuType.ADMIN, menu_name="Admin only")
        menu_factory(menu_type=MenuType.USER, menu_name="Public")

        assert [n.menu.menu_name for n in service.get_menu_tree(MenuType.USER)] == ["Public"]
        assert [n.menu.menu_name for n in service.get_menu_tree("ADMIN")] == ["Admin only"]

    def test_inactive_parent_hides_subtree(self, service, menu_factory):
        visible = menu_factory(menu_name="Visible", sort_order=1)
        hidden = menu_factory(menu_name="Hidden", sort_order=2, use_yn="N")
        menu_factory(menu_name="Child of hidden", parent=hidden)

        active = service.get_menu_tree(MenuType.ADMIN)
        assert [n.id for n in active] == [visible.id]

        full = service.get_menu_tree(MenuType.ADMIN, include_inactive=True)
        assert [n.id for n in full] == [visible.id, hidden.id]
        assert [c.menu.menu_name for c in full[1].children] == ["Child of hidden"]

    def test_list_menus_flat(self, service, menu_factory):
        parent = menu_factory(sort_order=1)
        child = menu_factory(parent=parent)
        ids = [m.id for m in service.list_menus()]
        assert set(ids) == {parent.id, child.id}
