"""Assemble flat menu rows into a forest.

The builder is pure and in-memory. It never sorts: callers hand it rows
already ordered by ``(sort_order, id)`` and every level of the forest keeps
that order.

A row whose ``parent_id`` is not among the input rows is dropped from the
forest altogether, together with its descendants. With active-only input
this hides the subtree of an inactive parent.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence


@dataclass
class MenuNode:
    """A menu row plus its ordered children."""
    menu: Any
    children: List["MenuNode"] = field(default_factory=list)

    @property
    def id(self):
        return self.menu.id

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


def build_menu_tree(menus: Sequence[Any]) -> List[MenuNode]:
    """
    Build the menu forest from rows exposing ``id`` and ``parent_id``.

    Args:
        menus: Rows of a single menu type, pre-sorted by (sort_order, id)

    Returns:
        Root nodes in input order
    """
    nodes: Dict[Any, MenuNode] = {}
    roots: List[MenuNode] = []

    for menu in menus:
        nodes[menu.id] = MenuNode(menu)

    for menu in menus:
        node = nodes[menu.id]
        if menu.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(menu.parent_id)
        if parent is not None:
            parent.children.append(node)

    return roots
