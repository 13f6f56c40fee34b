from .tree import MenuNode, build_menu_tree

__all__ = ["MenuNode", "build_menu_tree"]
