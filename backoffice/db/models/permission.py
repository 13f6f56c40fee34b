from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import composite, relationship

from backoffice.db.audit import AuditInfo
from backoffice.db.base import Base, IdType


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(IdType, primary_key=True, autoincrement=True)
    perm_code = Column(String(50), nullable=False, unique=True)
    perm_name = Column(String(100), nullable=False)
    perm_group = Column(String(30), nullable=False)
    description = Column(String(200))
    sort_order = Column(Integer, nullable=False, default=0)
    use_yn = Column(String(1), nullable=False, default="Y")
    reg_dt = Column(DateTime)
    reg_no = Column(String(100))
    mod_dt = Column(DateTime)
    mod_no = Column(String(100))

    audit = composite(AuditInfo, reg_dt, reg_no, mod_dt, mod_no)

    @property
    def is_active(self) -> bool:
        return self.use_yn == "Y"


class RolePermission(Base):
    """One grant of a permission to a role. Replaced in bulk, never edited."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "perm_id", name="uk_role_perm"),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    role_id = Column(IdType, ForeignKey("roles.id", name="fk_rp_role"), nullable=False)
    perm_id = Column(IdType, ForeignKey("permissions.id", name="fk_rp_perm"), nullable=False)

    # Relationships
    role = relationship("Role")
    permission = relationship("Permission")
