"""Back-office services.

Services take a session, flush their changes and leave committing to the
caller.
"""

from .role_service import RoleService
from .menu_service import MenuService

__all__ = ["RoleService", "MenuService"]
