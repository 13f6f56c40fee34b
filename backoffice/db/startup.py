"""Startup phase: migrate, sync the schema, seed.

Runs once per process before the API accepts requests.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from backoffice.core.config import Settings, get_settings
from backoffice.db.base import Base
from backoffice.db.migrations import MigrationReport, MigrationStatus, RoleMigration
from backoffice.db.seed import SeedReport, seed_database
from backoffice.db.session import create_session_factory

logger = logging.getLogger(__name__)


def run_role_migration(engine: Engine, settings: Settings) -> MigrationReport:
    """Run the role migration unless it is switched off in settings."""
    if not settings.migration_enabled:
        logger.info("[RoleMigration] Disabled by configuration")
        return MigrationReport(status=MigrationStatus.DISABLED)

    migration = RoleMigration(
        engine,
        admin_login_ids=[settings.admin_login_id],
        lock_enabled=settings.migration_lock_enabled,
        lock_key=settings.migration_lock_key,
        lock_name=settings.migration_lock_name,
        lock_timeout=settings.migration_lock_timeout,
    )
    return migration.run()


def sync_schema(engine: Engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    Base.metadata.create_all(bind=engine)


def seed(engine: Engine, settings: Settings) -> SeedReport:
    session_factory = create_session_factory(engine)
    db = session_factory()
    try:
        report = seed_database(
            db,
            admin_login_id=settings.admin_login_id,
            admin_password=settings.admin_initial_password,
            admin_name=settings.admin_name,
        )
        db.commit()
        return report
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def prepare_database(engine: Engine, settings: Optional[Settings] = None) -> MigrationReport:
    """
    Bring the database up to date before serving requests.

    Order matters: the role migration must see the legacy schema before
    ``create_all`` adds anything, and seeding needs the final schema.

    After a failed migration the members table may still be in its legacy
    shape, so seeding errors are logged instead of raised.

    Returns:
        The migration report; migration failures do not abort startup.
    """
    settings = settings or get_settings()

    report = run_role_migration(engine, settings)
    if report.degraded:
        logger.error("Role migration failed, continuing startup: %s", report.error)

    sync_schema(engine)
    try:
        seed(engine, settings)
    except SQLAlchemyError as e:
        if not report.degraded:
            raise
        report.warnings.append(f"seed skipped: {e}")
        logger.error("Seeding skipped after failed role migration: %s", e)
    return report
