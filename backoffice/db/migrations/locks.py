"""Advisory lock around the startup migration.

Several instances booting at once would otherwise race through the same DDL.
PostgreSQL and MySQL/MariaDB get a server-side advisory lock; other dialects
(SQLite in tests and single-node setups) run unlocked.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class MigrationLockError(RuntimeError):
    """The advisory lock could not be acquired in time."""


@contextmanager
def migration_lock(
    engine: Engine,
    *,
    key: int,
    name: str,
    timeout: int = 60,
    enabled: bool = True,
) -> Iterator[None]:
    """
    Hold a database advisory lock for the duration of the block.

    Args:
        engine: Engine the migration runs against
        key: Lock key for ``pg_advisory_lock``
        name: Lock name for MySQL ``GET_LOCK``
        timeout: Seconds MySQL waits for the lock
        enabled: When False the block runs without locking
    """
    dialect = engine.dialect.name
    if not enabled or dialect not in ("postgresql", "mysql", "mariadb"):
        yield
        return

    with engine.connect() as conn:
        if dialect == "postgresql":
            conn.execute(text("SELECT pg_advisory_lock(:key)"), {"key": key})
        else:
            acquired = conn.execute(
                text("SELECT GET_LOCK(:name, :timeout)"),
                {"name": name, "timeout": timeout},
            ).scalar()
            if acquired != 1:
                raise MigrationLockError(f"Timed out waiting for migration lock {name!r}")
        # Session-level locks outlive the transaction; don't sit idle in one.
        conn.commit()
        logger.info("[RoleMigration] Acquired migration lock (%s)", dialect)

        try:
            yield
        finally:
            if dialect == "postgresql":
                conn.execute(text("SELECT pg_advisory_unlock(:key)"), {"key": key})
            else:
                conn.execute(text("SELECT RELEASE_LOCK(:name)"), {"name": name})
            conn.commit()
            logger.info("[RoleMigration] Released migration lock")
