"""Tests for bootstrap seeding."""

from backoffice.core.rbac import resolve_permissions
from backoffice.db.models import Member, Menu, Permission, Role, RolePermission
from backoffice.db.seed import seed_database
from backoffice.services import RoleService

from tests.conftest import fake_hash


def counts(db):
    return (
        db.query(Role).count(),
        db.query(Permission).count(),
        db.query(RolePermission).count(),
        db.query(Menu).count(),
        db.query(Member).count(),
    )


def menu_by_url(db, url):
    return db.query(Menu).filter(Menu.menu_url == url).one()


class TestSeedDatabase:

    def test_empty_database(self, db_session):
        report = seed_database(db_session, password_hasher=fake_hash)

        assert report.roles == ["USER", "SYSTEM_ADMIN", "OPERATION_ADMIN", "GENERAL_ADMIN"]
        assert len(report.permissions) == 16
        assert report.admin_created
        # 14 + 8 + 5 baseline grants, plus popup and interior for two roles each
        assert report.grants == 31
        # 12 baseline, popups, 4 post sub-menus, interior group with 3 children
        assert len(report.menus) == 21

    def test_second_run_inserts_nothing(self, db_session):
        seed_database(db_session, password_hasher=fake_hash)
        before = counts(db_session)

        report = seed_database(db_session, password_hasher=fake_hash)

        assert not report.changed
        assert counts(db_session) == before

    def test_role_grants(self, seeded_session):
        assert len(resolve_permissions(seeded_session, "SYSTEM_ADMIN")) == 16
        operation = resolve_permissions(seeded_session, "OPERATION_ADMIN")
        assert len(operation) == 10
        assert {"MENU_POPUP", "MENU_INTERIOR", "MENU_CONTENT"} <= operation
        assert "MENU_POPUP" not in resolve_permissions(seeded_session, "GENERAL_ADMIN")
        assert resolve_permissions(seeded_session, "USER") == set()

    def test_admin_account(self, seeded_session):
        admin = seeded_session.query(Member).filter(Member.login_id == "admin").one()
        assert admin.role_code == "SYSTEM_ADMIN"
        assert admin.password == "hashed:1234"
        assert admin.audit.created_by == "system"

    def test_admin_account_from_settings(self, db_session):
        seed_database(db_session, admin_login_id="root", admin_password="s3cret", password_hasher=fake_hash)
        admin = db_session.query(Member).one()
        assert admin.login_id == "root"
        assert admin.password == "hashed:s3cret"

    def test_admin_menu_tree(self, seeded_session):
        system = seeded_session.query(Menu).filter(Menu.menu_name == "System").one()
        assert system.menu_url is None
        children = (
            seeded_session.query(Menu)
            .filter(Menu.parent_id == system.id)
            .order_by(Menu.sort_order)
            .all()
        )
        assert [c.menu_url for c in children] == [
            "/admin/system/menus",
            "/admin/system/admins",
            "/admin/system/ips",
            "/admin/system/codes",
            "/admin/system/boards",
            "/admin/system/roles",
        ]
        assert all(c.depth == 2 for c in children)

    def test_post_sub_menus(self, seeded_session):
        posts = menu_by_url(seeded_session, "/admin/posts")
        notice = menu_by_url(seeded_session, "/admin/posts/notice")
        assert notice.parent_id == posts.id
        assert notice.depth == 2

    def test_interior_group(self, seeded_session):
        group = seeded_session.query(Menu).filter(Menu.menu_name == "Interior management").one()
        assert group.menu_url is None
        assert group.sort_order == 3
        story = menu_by_url(seeded_session, "/admin/interiors/story")
        assert story.parent_id == group.id

    def test_popup_menu(self, seeded_session):
        popup = menu_by_url(seeded_session, "/admin/popups")
        assert popup.parent_id is None
        assert popup.sort_order == 4

    def test_existing_rows_are_not_modified(self, seeded_session):
        role = seeded_session.query(Role).filter(Role.role_code == "GENERAL_ADMIN").one()
        role.role_name = "Customized"
        dashboard = menu_by_url(seeded_session, "/admin")
        dashboard.menu_name = "Home"
        seeded_session.commit()

        seed_database(seeded_session, password_hasher=fake_hash)

        assert role.role_name == "Customized"
        assert dashboard.menu_name == "Home"

    def test_revoked_grant_stays_revoked(self, seeded_session):
        role = RoleService(seeded_session).get_role_by_code("OPERATION_ADMIN")
        RoleService(seeded_session).update_role(role.id, role.role_name, permission_codes=["MENU_DASHBOARD"])
        seeded_session.commit()

        seed_database(seeded_session, password_hasher=fake_hash)

        assert resolve_permissions(seeded_session, "OPERATION_ADMIN") == {"MENU_DASHBOARD"}

    def test_supplements_existing_installation(self, db_session):
        seed_database(db_session, password_hasher=fake_hash)
        # Simulate an installation provisioned before popups existed
        popup = db_session.query(Permission).filter(Permission.perm_code == "MENU_POPUP").one()
        db_session.query(RolePermission).filter(RolePermission.perm_id == popup.id).delete()
        db_session.delete(popup)
        db_session.delete(menu_by_url(db_session, "/admin/popups"))
        db_session.flush()

        report = seed_database(db_session, password_hasher=fake_hash)

        assert report.permissions == ["MENU_POPUP"]
        assert report.menus == ["/admin/popups"]
        assert report.grants == 2
        assert "MENU_POPUP" in resolve_permissions(db_session, "OPERATION_ADMIN")
        assert "MENU_POPUP" not in resolve_permissions(db_session, "GENERAL_ADMIN")

    def test_after_role_migration_grants_are_created(self, db_session):
        """Roles inserted by the migration have no grants; the seeder fills them in."""
        for code, sort_order in [("USER", 4), ("SYSTEM_ADMIN", 1), ("OPERATION_ADMIN", 2), ("GENERAL_ADMIN", 3)]:
            db_session.add(Role(role_code=code, role_name=code, sort_order=sort_order, use_yn="Y"))
        db_session.flush()

        report = seed_database(db_session, password_hasher=fake_hash)

        assert report.roles == []
        assert len(resolve_permissions(db_session, "SYSTEM_ADMIN")) == 16
        assert len(resolve_permissions(db_session, "GENERAL_ADMIN")) == 5
