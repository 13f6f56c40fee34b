from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import composite, relationship

from backoffice.db.audit import AuditInfo
from backoffice.db.base import Base, IdType

# Roles that can never be deactivated or deleted
PROTECTED_ROLE_CODES = frozenset({"USER", "SYSTEM_ADMIN"})


class Role(Base):
    __tablename__ = "roles"

    id = Column(IdType, primary_key=True, autoincrement=True)
    role_code = Column(String(30), nullable=False, unique=True)
    role_name = Column(String(50), nullable=False)
    description = Column(String(200))
    sort_order = Column(Integer, nullable=False, default=0)
    use_yn = Column(String(1), nullable=False, default="Y")
    reg_dt = Column(DateTime)
    reg_no = Column(String(100))
    mod_dt = Column(DateTime)
    mod_no = Column(String(100))

    audit = composite(AuditInfo, reg_dt, reg_no, mod_dt, mod_no)

    # Relationships
    members = relationship("Member", back_populates="role")

    @property
    def is_active(self) -> bool:
        return self.use_yn == "Y"

    @property
    def is_protected(self) -> bool:
        return self.role_code in PROTECTED_ROLE_CODES

    def activate(self) -> None:
        self.use_yn = "Y"

    def deactivate(self) -> None:
        self.use_yn = "N"
