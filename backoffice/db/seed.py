"""Database seeding for the back office.

Provisions the baseline permissions, roles, admin account and admin menu
tree, then supplements rows introduced by later releases into databases that
were provisioned earlier.

Seeding is additive: rows are matched by natural key (role code, permission
code, menu URL or, for URL-less group menus, menu name) and existing rows are
never updated or removed. Grants are only written for a role or permission
created in the same run, so an administrator's later changes stick.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from sqlalchemy.orm import Session

from backoffice.core.rbac.permissions import (
    BASELINE_PERMISSIONS,
    MENU_POPUP_DEF,
    MENU_INTERIOR_DEF,
    PermissionDef,
)
from backoffice.core.rbac.roles import DEFAULT_ROLES, SUPPLEMENT_GRANTEES, SYSTEM_ADMIN
from backoffice.core.security import get_password_hash
from backoffice.db.audit import stamp_created
from backoffice.db.models import Member, Menu, MenuType, Permission, Role, RolePermission

logger = logging.getLogger(__name__)

SEED_ACTOR = "system"


@dataclass(frozen=True)
class MenuSeed:
    name: str
    url: Optional[str]
    sort_order: int
    icon: str
    description: str
    children: tuple = ()


BASELINE_ADMIN_MENUS: tuple[MenuSeed, ...] = (
    MenuSeed("Dashboard", "/admin", 1, "DashboardOutlined", "Admin dashboard"),
    MenuSeed("Posts", "/admin/posts", 2, "FileTextOutlined", "Post management"),
    MenuSeed("Statistics", "/admin/statistics", 3, "BarChartOutlined", "Statistics"),
    MenuSeed("Users", "/admin/users", 4, "UserOutlined", "User management"),
    MenuSeed("System", None, 5, "SettingOutlined", "System management", children=(
        MenuSeed("Menus", "/admin/system/menus", 1, "MenuOutlined", "Menu management"),
        MenuSeed("Admin accounts", "/admin/system/admins", 2, "UserSwitchOutlined", "Admin account management"),
        MenuSeed("IP access", "/admin/system/ips", 3, "GlobalOutlined", "IP management"),
        MenuSeed("Common codes", "/admin/system/codes", 4, "CodeOutlined", "Common code management"),
        MenuSeed("Boards", "/admin/system/boards", 5, "LayoutOutlined", "Board settings"),
        MenuSeed("Roles", "/admin/system/roles", 6, "SafetyCertificateOutlined", "Role and permission management"),
    )),
    MenuSeed("Contents", "/admin/contents", 3, "FileTextOutlined", "Content management"),
)

POPUP_MENU = MenuSeed("Popups", "/admin/popups", 4, "NotificationOutlined", "Popup management")

POST_SUB_MENUS: tuple[MenuSeed, ...] = (
    MenuSeed("Notices", "/admin/posts/notice", 1, "FileTextOutlined", "Notice management"),
    MenuSeed("FAQ", "/admin/posts/faq", 2, "FileTextOutlined", "FAQ management"),
    MenuSeed("Free board", "/admin/posts/free", 3, "FileTextOutlined", "Free board management"),
    MenuSeed("Quote requests", "/admin/posts/qna", 4, "FileTextOutlined", "Quote request management"),
)

INTERIOR_MENU = MenuSeed("Interior management", None, 3, "PictureOutlined", "Interior management", children=(
    MenuSeed("On-site work", "/admin/interiors/onsite", 1, "PictureOutlined", "On-site work management"),
    MenuSeed("Self-build tips", "/admin/interiors/self-tip", 2, "PictureOutlined", "Self-build tip management"),
    MenuSeed("Interior stories", "/admin/interiors/story", 3, "PictureOutlined", "Interior story management"),
))


@dataclass
class SeedReport:
    """What a seeding run inserted."""

    permissions: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)
    grants: int = 0
    menus: List[str] = field(default_factory=list)
    admin_created: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.permissions or self.roles or self.grants or self.menus or self.admin_created)


def seed_database(
    db: Session,
    *,
    admin_login_id: str = "admin",
    admin_password: str = "1234",
    admin_name: str = "Administrator",
    password_hasher: Callable[[str], str] = get_password_hash,
) -> SeedReport:
    """
    Run every seeding step in order. The caller owns the transaction.

    Args:
        db: Database session
        admin_login_id: Login id of the bootstrap admin account
        admin_password: Initial password of the bootstrap admin account
        admin_name: Display name of the bootstrap admin account
        password_hasher: Turns the plain password into the stored hash

    Returns:
        SeedReport describing the inserted rows
    """
    report = SeedReport()

    seed_roles_and_permissions(db, report)
    seed_admin_account(db, report, admin_login_id, admin_password, admin_name, password_hasher)
    seed_admin_menus(db, report)

    # Rows added after the first release
    supplement_permission(db, report, MENU_POPUP_DEF)
    _ensure_menu_tree(db, report, [POPUP_MENU])
    supplement_post_sub_menus(db, report)
    supplement_permission(db, report, MENU_INTERIOR_DEF)
    supplement_interior_menus(db, report)

    db.flush()
    if report.changed:
        logger.info(
            "Seed complete: %d permissions, %d roles, %d grants, %d menus, admin created=%s",
            len(report.permissions), len(report.roles), report.grants,
            len(report.menus), report.admin_created,
        )
    else:
        logger.info("Seed complete: nothing to insert")
    return report


def seed_roles_and_permissions(db: Session, report: SeedReport) -> dict[str, Role]:
    """Create missing baseline permissions and roles, granting defaults to new rows."""
    new_permissions = {}
    permissions = {}
    for definition in BASELINE_PERMISSIONS:
        permission, created = _get_or_create_permission(db, definition)
        permissions[definition.code] = permission
        if created:
            new_permissions[definition.code] = permission
            report.permissions.append(definition.code)

    roles = {}
    for role_code, role_config in DEFAULT_ROLES.items():
        role = db.query(Role).filter(Role.role_code == role_code).first()
        created = role is None
        if created:
            role = Role(
                role_code=role_code,
                role_name=role_config["name"],
                description=role_config["description"],
                sort_order=role_config["sort_order"],
                use_yn="Y",
            )
            stamp_created(role, SEED_ACTOR)
            db.add(role)
            db.flush()
            report.roles.append(role_code)
            logger.info("Created role: %s", role_code)
        roles[role_code] = role

        # New roles get their whole default set; existing roles only new permissions.
        candidates = role_config["permissions"] if created else [
            code for code in role_config["permissions"] if code in new_permissions
        ]
        report.grants += _grant(db, role, (permissions[code] for code in candidates))

    db.flush()
    return roles


def seed_admin_account(
    db: Session,
    report: SeedReport,
    login_id: str,
    password: str,
    name: str,
    password_hasher: Callable[[str], str] = get_password_hash,
) -> Optional[Member]:
    """Create the bootstrap admin account with SYSTEM_ADMIN if it does not exist."""
    existing = db.query(Member).filter(Member.login_id == login_id).first()
    if existing:
        logger.info("Admin account already exists")
        return existing

    role = db.query(Role).filter(Role.role_code == SYSTEM_ADMIN).first()
    if role is None:
        raise RuntimeError(f"{SYSTEM_ADMIN} role not found")

    admin = Member(
        login_id=login_id,
        password=password_hasher(password),
        name=name,
        email=None,
        use_yn="Y",
        role_id=role.id,
    )
    stamp_created(admin, SEED_ACTOR)
    db.add(admin)
    db.flush()
    report.admin_created = True
    logger.info("Admin account created - loginId: %s", login_id)
    return admin


def seed_admin_menus(db: Session, report: SeedReport) -> None:
    """Create the baseline ADMIN menu tree."""
    _ensure_menu_tree(db, report, BASELINE_ADMIN_MENUS)


def supplement_permission(db: Session, report: SeedReport, definition: PermissionDef) -> Optional[Permission]:
    """Add a permission introduced after the first release and grant it to the supplement grantees."""
    permission, created = _get_or_create_permission(db, definition)
    if not created:
        return permission

    report.permissions.append(definition.code)
    logger.info("Supplemented missing permission: %s", definition.code)
    for role_code in SUPPLEMENT_GRANTEES:
        role = db.query(Role).filter(Role.role_code == role_code).first()
        if role is None:
            continue
        report.grants += _grant(db, role, [permission])
        logger.info("Mapped %s to %s", definition.code, role_code)
    return permission


def supplement_post_sub_menus(db: Session, report: SeedReport) -> None:
    """Add the post board sub-menus under the posts menu, when the posts menu exists."""
    parent = _find_menu(db, "/admin/posts", None)
    if parent is None:
        return
    for seed in POST_SUB_MENUS:
        _ensure_menu(db, report, seed, parent)


def supplement_interior_menus(db: Session, report: SeedReport) -> None:
    """Add the interior group with its children unless a group already exists."""
    existing = (
        db.query(Menu)
        .filter(
            Menu.menu_type == MenuType.ADMIN.value,
            (Menu.menu_url == "/admin/interiors") | (Menu.menu_name == INTERIOR_MENU.name),
        )
        .first()
    )
    if existing:
        return
    _ensure_menu_tree(db, report, [INTERIOR_MENU])


# -- Helpers -----------------------------------------------------------------

def _get_or_create_permission(db: Session, definition: PermissionDef) -> tuple[Permission, bool]:
    permission = db.query(Permission).filter(Permission.perm_code == definition.code).first()
    if permission:
        return permission, False

    permission = Permission(
        perm_code=definition.code,
        perm_name=definition.name,
        perm_group=definition.group.value,
        description=definition.description,
        sort_order=definition.sort_order,
        use_yn="Y",
    )
    stamp_created(permission, SEED_ACTOR)
    db.add(permission)
    db.flush()
    return permission, True


def _grant(db: Session, role: Role, permissions: Iterable[Permission]) -> int:
    granted = 0
    for permission in permissions:
        exists = (
            db.query(RolePermission.id)
            .filter(RolePermission.role_id == role.id, RolePermission.perm_id == permission.id)
            .first()
        )
        if exists:
            continue
        db.add(RolePermission(role_id=role.id, perm_id=permission.id))
        granted += 1
    db.flush()
    return granted


def _find_menu(db: Session, url: Optional[str], name: Optional[str]) -> Optional[Menu]:
    query = db.query(Menu).filter(Menu.menu_type == MenuType.ADMIN.value)
    if url is not None:
        query = query.filter(Menu.menu_url == url)
    else:
        query = query.filter(Menu.menu_url.is_(None), Menu.menu_name == name)
    return query.order_by(Menu.id).first()


def _ensure_menu(db: Session, report: SeedReport, seed: MenuSeed, parent: Optional[Menu]) -> Menu:
    menu = _find_menu(db, seed.url, seed.name)
    if menu:
        return menu

    menu = Menu(
        menu_type=MenuType.ADMIN.value,
        menu_name=seed.name,
        menu_url=seed.url,
        parent_id=parent.id if parent else None,
        depth=parent.depth + 1 if parent else 1,
        sort_order=seed.sort_order,
        icon=seed.icon,
        description=seed.description,
        use_yn="Y",
    )
    stamp_created(menu, SEED_ACTOR)
    db.add(menu)
    db.flush()
    report.menus.append(seed.url or seed.name)
    logger.info("Created menu: %s", seed.url or seed.name)
    return menu


def _ensure_menu_tree(
    db: Session,
    report: SeedReport,
    seeds: Iterable[MenuSeed],
    parent: Optional[Menu] = None,
) -> None:
    for seed in seeds:
        menu = _ensure_menu(db, report, seed, parent)
        if seed.children:
            _ensure_menu_tree(db, report, seed.children, menu)
