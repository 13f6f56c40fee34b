"""Pytest configuration and shared fixtures.

Every test gets its own SQLite database file, so schema changes made by the
role migration never leak between tests.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from backoffice.api.main import create_app
from backoffice.core.config import Settings
from backoffice.core.security import create_access_token
from backoffice.db.base import Base
from backoffice.db.seed import seed_database
from backoffice.db.session import create_session_factory

from tests import factories


def fake_hash(password: str) -> str:
    """Stand-in for bcrypt so seeding stays fast in unit tests."""
    return f"hashed:{password}"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'backoffice.db'}",
        migration_lock_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def engine(test_settings):
    """Engine on an empty database; no tables are created."""
    engine = create_engine(test_settings.database_url)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Session on a database with the current schema and no rows."""
    Base.metadata.create_all(bind=engine)
    session = create_session_factory(engine)()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def seeded_session(db_session):
    """Session on a database with the baseline roles, permissions and menus."""
    seed_database(db_session, password_hasher=fake_hash)
    db_session.commit()
    return db_session


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def role_factory(db_session):
    def _create(**kwargs):
        return factories.create_role(db_session, **kwargs)
    return _create


@pytest.fixture
def permission_factory(db_session):
    def _create(**kwargs):
        return factories.create_permission(db_session, **kwargs)
    return _create


@pytest.fixture
def member_factory(db_session):
    def _create(**kwargs):
        return factories.create_member(db_session, **kwargs)
    return _create


@pytest.fixture
def menu_factory(db_session):
    def _create(**kwargs):
        return factories.create_menu(db_session, **kwargs)
    return _create


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@pytest.fixture
def client(test_settings, engine):
    """Test client; entering it runs the startup phase against the test database."""
    app = create_app(settings=test_settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(role_code: str, subject: str = "tester") -> dict:
    token = create_access_token(subject, role_code)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return auth_headers("SYSTEM_ADMIN", subject="admin")


@pytest.fixture
def operator_headers():
    return auth_headers("OPERATION_ADMIN", subject="operator")


@pytest.fixture
def user_headers():
    return auth_headers("USER", subject="member")
