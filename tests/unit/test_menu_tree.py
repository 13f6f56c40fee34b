"""Tests for menu tree assembly."""

from types import SimpleNamespace

from backoffice.core.menu import MenuNode, build_menu_tree


def row(id, parent_id=None, name=None):
    return SimpleNamespace(id=id, parent_id=parent_id, menu_name=name or f"m{id}")


class TestBuildMenuTree:

    def test_empty_input(self):
        assert build_menu_tree([]) == []

    def test_roots_keep_input_order(self):
        tree = build_menu_tree([row(3), row(1), row(2)])
        assert [node.id for node in tree] == [3, 1, 2]

    def test_children_attached_in_input_order(self):
        menus = [row(1), row(2), row(12, parent_id=1), row(11, parent_id=1), row(21, parent_id=2)]
        tree = build_menu_tree(menus)

        assert [node.id for node in tree] == [1, 2]
        assert [child.id for child in tree[0].children] == [12, 11]
        assert [child.id for child in tree[1].children] == [21]

    def test_child_listed_before_parent(self):
        tree = build_menu_tree([row(5, parent_id=1), row(1)])
        assert [node.id for node in tree] == [1]
        assert [child.id for child in tree[0].children] == [5]

    def test_orphan_is_dropped_with_descendants(self):
        menus = [row(1), row(2, parent_id=99), row(3, parent_id=2)]
        tree = build_menu_tree(menus)

        assert [node.id for node in tree] == [1]
        all_ids = [node.id for root in tree for node in root.walk()]
        assert 2 not in all_ids
        assert 3 not in all_ids

    def test_walk_is_depth_first(self):
        menus = [row(1), row(2, parent_id=1), row(3, parent_id=2), row(4, parent_id=1)]
        tree = build_menu_tree(menus)
        assert [node.id for node in tree[0].walk()] == [1, 2, 3, 4]

    def test_node_wraps_row(self):
        menu = row(7, name="Dashboard")
        (node,) = build_menu_tree([menu])
        assert isinstance(node, MenuNode)
        assert node.menu is menu
        assert node.children == []
