"""Back-office RBAC core: roles, permissions, menus and the role schema migration."""

__version__ = "0.3.0"
