"""Role column migration: ``members.role`` (varchar) -> ``members.role_id`` (FK).

Older installations stored the role as a free-text code on the member row.
This migration normalizes that into the ``roles`` table and a foreign key,
and runs on every startup before anything else touches the database:

1. No ``members`` table: fresh install, nothing to do.
2. ``members`` without the legacy ``role`` column: already migrated. Repair
   orphaned ``role_id`` values and make sure ``fk_members_role`` exists.
3. Legacy column present: create the RBAC tables, insert the baseline roles,
   add and backfill ``role_id``, tighten it to NOT NULL, add the foreign key,
   drop the legacy column.

Every step checks the live schema before acting, so a run interrupted
half-way resumes on the next boot. Failures are logged and reported through
``MigrationReport``; they never stop the process from starting.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Column, column, exists, insert, inspect, or_, select, table, update
from sqlalchemy.engine import Connection, Engine

from backoffice.core.rbac.roles import (
    DEFAULT_ROLES,
    USER,
    SYSTEM_ADMIN,
    OPERATION_ADMIN,
    GENERAL_ADMIN,
)
from backoffice.db.base import Base, IdType
from backoffice.db.models import MEMBER_ROLE_FK_NAME
from .locks import migration_lock

logger = logging.getLogger(__name__)

MEMBERS_TABLE = "members"
ROLES_TABLE = "roles"
LEGACY_ROLE_COLUMN = "role"
ROLE_ID_COLUMN = "role_id"

# Created in dependency order
RBAC_TABLES = ("roles", "permissions", "role_permissions")
BASELINE_ROLE_CODES = (USER, SYSTEM_ADMIN, OPERATION_ADMIN, GENERAL_ADMIN)

MIGRATION_ACTOR = "system:role-migration"


class MigrationStatus(str, Enum):
    """Outcome of a migration run, surfaced by the readiness probe."""

    PENDING = "pending"
    DISABLED = "disabled"
    FRESH_INSTALL = "fresh_install"
    ALREADY_MIGRATED = "already_migrated"
    MIGRATED = "migrated"
    FAILED = "failed"


@dataclass
class MigrationReport:
    status: MigrationStatus = MigrationStatus.PENDING
    steps: List[str] = field(default_factory=list)
    repaired_members: int = 0
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def degraded(self) -> bool:
        """True when the schema may still be in its legacy or partial shape."""
        return self.status == MigrationStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "degraded": self.degraded,
            "steps": list(self.steps),
            "repaired_members": self.repaired_members,
            "warnings": list(self.warnings),
            "error": self.error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


# Schema-agnostic clauses: which of these columns exist depends on the run.
_members = table(
    MEMBERS_TABLE,
    column("id"),
    column("login_id"),
    column(LEGACY_ROLE_COLUMN),
    column(ROLE_ID_COLUMN),
)
_roles = table(ROLES_TABLE, column("id"), column("role_code"))


class RoleMigration:
    """
    Migrates the legacy member role column and keeps the role foreign key healthy.

    Usage:
        report = RoleMigration(engine, admin_login_ids=["admin"]).run()
        if report.degraded:
            ...
    """

    def __init__(
        self,
        engine: Engine,
        *,
        admin_login_ids: Iterable[str] = ("admin",),
        lock_enabled: bool = True,
        lock_key: int = 7241001,
        lock_name: str = "cms_role_migration",
        lock_timeout: int = 60,
    ):
        """
        Args:
            engine: Engine for the target database
            admin_login_ids: Login ids whose orphaned role is repaired to SYSTEM_ADMIN
            lock_enabled: Wrap the run in a database advisory lock where supported
            lock_key: PostgreSQL advisory lock key
            lock_name: MySQL named lock
            lock_timeout: Seconds to wait for the MySQL lock
        """
        self.engine = engine
        self.admin_login_ids = {login_id.lower() for login_id in admin_login_ids}
        self.lock_enabled = lock_enabled
        self.lock_key = lock_key
        self.lock_name = lock_name
        self.lock_timeout = lock_timeout

    # -- Entry point ---------------------------------------------------------

    def run(self) -> MigrationReport:
        """Run the migration. Never raises; failures end up in the report."""
        report = MigrationReport(started_at=datetime.utcnow())
        try:
            with migration_lock(
                self.engine,
                key=self.lock_key,
                name=self.lock_name,
                timeout=self.lock_timeout,
                enabled=self.lock_enabled,
            ):
                self._run(report)
        except Exception as e:
            logger.error("[RoleMigration] Migration error: %s", e, exc_info=True)
            report.status = MigrationStatus.FAILED
            report.error = str(e)
        finally:
            report.finished_at = datetime.utcnow()
        return report

    def _run(self, report: MigrationReport) -> None:
        with self.engine.connect() as conn:
            has_members = inspect(conn).has_table(MEMBERS_TABLE)
            has_legacy = has_members and self._has_column(conn, MEMBERS_TABLE, LEGACY_ROLE_COLUMN)

        if not has_members:
            logger.info("[RoleMigration] %s not found - fresh install, skipping", MEMBERS_TABLE)
            report.status = MigrationStatus.FRESH_INSTALL
            return

        if not has_legacy:
            logger.info("[RoleMigration] Legacy '%s' column not found - already migrated", LEGACY_ROLE_COLUMN)
            self.ensure_foreign_key(report)
            report.status = MigrationStatus.ALREADY_MIGRATED
            return

        logger.info("[RoleMigration] Starting migration: %s.%s -> %s FK",
                    MEMBERS_TABLE, LEGACY_ROLE_COLUMN, ROLE_ID_COLUMN)
        self._create_rbac_tables(report)
        self._insert_baseline_roles(report)
        self._add_role_id_column(report)
        self._backfill_role_ids(report)
        self._assign_fallback_role(report)
        self._tighten_role_id(report)
        self._add_foreign_key(report)
        self._drop_legacy_column(report)

        report.status = MigrationStatus.MIGRATED
        logger.info("[RoleMigration] Migration completed successfully")

    # -- Legacy path ---------------------------------------------------------

    def _create_rbac_tables(self, report: MigrationReport) -> None:
        with self.engine.begin() as conn:
            for name in RBAC_TABLES:
                if inspect(conn).has_table(name):
                    continue
                Base.metadata.tables[name].create(conn)
                report.steps.append(f"create_table:{name}")
                logger.info("[RoleMigration] Created %s", name)

    def _insert_baseline_roles(self, report: MigrationReport) -> None:
        roles = Base.metadata.tables[ROLES_TABLE]
        now = datetime.utcnow()
        with self.engine.begin() as conn:
            for code in BASELINE_ROLE_CODES:
                existing = conn.execute(
                    select(roles.c.id).where(roles.c.role_code == code)
                ).first()
                if existing:
                    continue
                definition = DEFAULT_ROLES[code]
                conn.execute(
                    insert(roles).values(
                        role_code=code,
                        role_name=definition["name"],
                        description=definition["description"],
                        sort_order=definition["sort_order"],
                        use_yn="Y",
                        reg_dt=now,
                        reg_no=MIGRATION_ACTOR,
                        mod_dt=now,
                        mod_no=MIGRATION_ACTOR,
                    )
                )
                report.steps.append(f"insert_role:{code}")
                logger.info("[RoleMigration] Created role: %s", code)

    def _add_role_id_column(self, report: MigrationReport) -> None:
        with self.engine.begin() as conn:
            if self._has_column(conn, MEMBERS_TABLE, ROLE_ID_COLUMN):
                return
            self._operations(conn).add_column(
                MEMBERS_TABLE, Column(ROLE_ID_COLUMN, IdType, nullable=True)
            )
        report.steps.append("add_column:role_id")
        logger.info("[RoleMigration] Added %s column", ROLE_ID_COLUMN)

    def _backfill_role_ids(self, report: MigrationReport) -> None:
        matching_role = (
            select(_roles.c.id)
            .where(_roles.c.role_code == _members.c.role)
            .scalar_subquery()
        )
        stmt = (
            update(_members)
            .where(
                _members.c.role_id.is_(None),
                _members.c.role.is_not(None),
                exists().where(_roles.c.role_code == _members.c.role),
            )
            .values(role_id=matching_role)
        )
        with self.engine.begin() as conn:
            updated = conn.execute(stmt).rowcount
        report.steps.append("backfill_role_id")
        logger.info("[RoleMigration] Mapped %d members from legacy role codes", updated)

    def _assign_fallback_role(self, report: MigrationReport) -> None:
        with self.engine.begin() as conn:
            user_role_id = self._role_id(conn, USER)
            if user_role_id is None:
                report.warnings.append("USER role missing, members without a role left unset")
                logger.warning("[RoleMigration] USER role not found, cannot assign fallback role")
                return
            updated = conn.execute(
                update(_members)
                .where(_members.c.role_id.is_(None))
                .values(role_id=user_role_id)
            ).rowcount
        report.steps.append("fallback_role_id")
        if updated:
            logger.info("[RoleMigration] Assigned USER role to %d unmapped members", updated)

    def _tighten_role_id(self, report: MigrationReport) -> None:
        # Best-effort; on failure the column stays nullable.
        try:
            with self.engine.begin() as conn:
                info = self._column_info(conn, MEMBERS_TABLE, ROLE_ID_COLUMN)
                if info is None or not info["nullable"]:
                    return
                with self._operations(conn).batch_alter_table(MEMBERS_TABLE) as batch_op:
                    batch_op.alter_column(
                        ROLE_ID_COLUMN, existing_type=info["type"], nullable=False
                    )
            report.steps.append("not_null:role_id")
        except Exception as e:
            report.warnings.append(f"NOT NULL constraint: {e}")
            logger.warning("[RoleMigration] NOT NULL constraint: %s", e)

    def _add_foreign_key(self, report: MigrationReport) -> None:
        with self.engine.begin() as conn:
            if MEMBER_ROLE_FK_NAME in self._role_fk_names(conn):
                return
            with self._operations(conn).batch_alter_table(MEMBERS_TABLE) as batch_op:
                batch_op.create_foreign_key(
                    MEMBER_ROLE_FK_NAME, ROLES_TABLE, [ROLE_ID_COLUMN], ["id"]
                )
        report.steps.append(f"add_fk:{MEMBER_ROLE_FK_NAME}")
        logger.info("[RoleMigration] Added FK constraint %s", MEMBER_ROLE_FK_NAME)

    def _drop_legacy_column(self, report: MigrationReport) -> None:
        with self.engine.begin() as conn:
            if not self._has_column(conn, MEMBERS_TABLE, LEGACY_ROLE_COLUMN):
                return
            logger.info("[RoleMigration] Dropping legacy '%s' column...", LEGACY_ROLE_COLUMN)
            with self._operations(conn).batch_alter_table(MEMBERS_TABLE) as batch_op:
                batch_op.drop_column(LEGACY_ROLE_COLUMN)
        report.steps.append("drop_column:role")

    # -- Post-migration safety net -------------------------------------------

    def ensure_foreign_key(self, report: MigrationReport) -> None:
        """Repair orphaned role references and (re)create the fixed-name FK."""
        with self.engine.connect() as conn:
            ready = (
                self._has_column(conn, MEMBERS_TABLE, ROLE_ID_COLUMN)
                and inspect(conn).has_table(ROLES_TABLE)
            )
        if not ready:
            logger.info("[RoleMigration] No %s.%s or %s table, nothing to ensure",
                        MEMBERS_TABLE, ROLE_ID_COLUMN, ROLES_TABLE)
            return

        try:
            report.repaired_members = self.repair_orphans()
            if report.repaired_members:
                report.steps.append("repair_orphans")
        except Exception as e:
            report.warnings.append(f"Orphan check: {e}")
            logger.warning("[RoleMigration] Orphan check error: %s", e)

        try:
            with self.engine.begin() as conn:
                fk_names = self._role_fk_names(conn)
                if MEMBER_ROLE_FK_NAME in fk_names:
                    return
                stale = [name for name in fk_names if name]
                with self._operations(conn).batch_alter_table(MEMBERS_TABLE) as batch_op:
                    for name in stale:
                        batch_op.drop_constraint(name, type_="foreignkey")
                        logger.info("[RoleMigration] Dropped old FK: %s", name)
                    batch_op.create_foreign_key(
                        MEMBER_ROLE_FK_NAME, ROLES_TABLE, [ROLE_ID_COLUMN], ["id"]
                    )
            report.steps.append(f"add_fk:{MEMBER_ROLE_FK_NAME}")
            logger.info("[RoleMigration] Added FK constraint %s (post-migration)", MEMBER_ROLE_FK_NAME)
        except Exception as e:
            report.warnings.append(f"FK creation: {e}")
            logger.warning("[RoleMigration] FK creation failed: %s", e)

    def repair_orphans(self) -> int:
        """
        Point members with a NULL, zero or dangling ``role_id`` at a real role.

        Members whose login id is a configured admin identifier get
        SYSTEM_ADMIN (when that role exists); everyone else gets USER.

        Returns:
            Number of member rows updated
        """
        with self.engine.begin() as conn:
            has_login_id = self._has_column(conn, MEMBERS_TABLE, "login_id")
            login_col = _members.c.login_id if has_login_id else None

            columns = [_members.c.id, _members.c.role_id]
            if login_col is not None:
                columns.append(login_col)
            orphans = conn.execute(
                select(*columns)
                .select_from(_members.outerjoin(_roles, _members.c.role_id == _roles.c.id))
                .where(or_(_roles.c.id.is_(None), _members.c.role_id == 0))
            ).mappings().all()

            if not orphans:
                return 0

            logger.warning("[RoleMigration] Found %d members with invalid role_id:", len(orphans))
            for row in orphans:
                logger.warning("[RoleMigration]   member id=%s, loginId=%s, role_id=%s",
                               row["id"], row.get("login_id"), row["role_id"])

            user_role_id = self._role_id(conn, USER)
            admin_role_id = self._role_id(conn, SYSTEM_ADMIN)
            if user_role_id is None:
                logger.warning("[RoleMigration] USER role not found, orphans left as is")
                return 0

            admin_ids = []
            user_ids = []
            for row in orphans:
                if admin_role_id is not None and self._is_admin_identifier(row.get("login_id")):
                    admin_ids.append(row["id"])
                else:
                    user_ids.append(row["id"])

            repaired = 0
            for role_id, member_ids in ((admin_role_id, admin_ids), (user_role_id, user_ids)):
                if not member_ids:
                    continue
                repaired += conn.execute(
                    update(_members)
                    .where(_members.c.id.in_(member_ids))
                    .values(role_id=role_id)
                ).rowcount

        logger.info("[RoleMigration] Fixed %d orphan members (%d -> %s, %d -> %s)",
                    repaired, len(admin_ids), SYSTEM_ADMIN, len(user_ids), USER)
        return repaired

    # -- Helpers -------------------------------------------------------------

    def _is_admin_identifier(self, login_id: Optional[str]) -> bool:
        return bool(login_id) and login_id.lower() in self.admin_login_ids

    @staticmethod
    def _operations(conn: Connection) -> Operations:
        return Operations(MigrationContext.configure(conn))

    @staticmethod
    def _column_info(conn: Connection, table_name: str, column_name: str) -> Optional[dict]:
        for info in inspect(conn).get_columns(table_name):
            if info["name"].lower() == column_name:
                return info
        return None

    @classmethod
    def _has_column(cls, conn: Connection, table_name: str, column_name: str) -> bool:
        if not inspect(conn).has_table(table_name):
            return False
        return cls._column_info(conn, table_name, column_name) is not None

    @staticmethod
    def _role_fk_names(conn: Connection) -> List[Optional[str]]:
        """Names of foreign keys from members.role_id to roles."""
        return [
            fk["name"]
            for fk in inspect(conn).get_foreign_keys(MEMBERS_TABLE)
            if fk["referred_table"] == ROLES_TABLE
            and [c.lower() for c in fk["constrained_columns"]] == [ROLE_ID_COLUMN]
        ]

    @staticmethod
    def _role_id(conn: Connection, role_code: str) -> Optional[int]:
        return conn.execute(
            select(_roles.c.id).where(_roles.c.role_code == role_code)
        ).scalar()
