"""Audit metadata carried by every RBAC entity.

Entities embed an ``AuditInfo`` value (a SQLAlchemy composite over their
``reg_dt``/``reg_no``/``mod_dt``/``mod_no`` columns). Write paths stamp it
explicitly with the acting identifier they were given.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass
class AuditInfo:
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    modified_at: Optional[datetime] = None
    modified_by: Optional[str] = None

    def __composite_values__(self):
        return self.created_at, self.created_by, self.modified_at, self.modified_by


def stamp_created(entity, actor: Optional[str], now: Optional[datetime] = None) -> None:
    """Fill creation and modification metadata on a new entity."""
    now = now or datetime.utcnow()
    entity.audit = AuditInfo(
        created_at=now,
        created_by=actor,
        modified_at=now,
        modified_by=actor,
    )


def stamp_modified(entity, actor: Optional[str], now: Optional[datetime] = None) -> None:
    """Record a modification; creation metadata is left as is."""
    now = now or datetime.utcnow()
    # Composites are replaced, never mutated in place, so the change is tracked.
    entity.audit = replace(entity.audit or AuditInfo(), modified_at=now, modified_by=actor)
