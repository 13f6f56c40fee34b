from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import composite, relationship

from backoffice.db.audit import AuditInfo
from backoffice.db.base import Base, IdType

# Fixed name so the role migration can find (and re-create) the constraint.
MEMBER_ROLE_FK_NAME = "fk_members_role"


class Member(Base):
    """The slice of the member account the RBAC core cares about."""

    __tablename__ = "members"

    id = Column(IdType, primary_key=True, autoincrement=True)
    login_id = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String(255))
    name = Column(String(50))
    email = Column(String(100))
    use_yn = Column(String(1), nullable=False, default="Y")
    role_id = Column(IdType, ForeignKey("roles.id", name=MEMBER_ROLE_FK_NAME), nullable=False)
    reg_dt = Column(DateTime)
    reg_no = Column(String(100))
    mod_dt = Column(DateTime)
    mod_no = Column(String(100))

    audit = composite(AuditInfo, reg_dt, reg_no, mod_dt, mod_no)

    # Relationships
    role = relationship("Role", back_populates="members")

    @property
    def role_code(self):
        return self.role.role_code if self.role else None
