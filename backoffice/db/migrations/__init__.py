"""Startup schema migrations that run before the ORM touches the database."""

from .role_migration import MigrationReport, MigrationStatus, RoleMigration
from .locks import MigrationLockError, migration_lock

__all__ = [
    "MigrationReport",
    "MigrationStatus",
    "RoleMigration",
    "MigrationLockError",
    "migration_lock",
]
