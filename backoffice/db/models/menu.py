from enum import Enum

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import composite

from backoffice.db.audit import AuditInfo
from backoffice.db.base import Base, IdType


class MenuType(str, Enum):
    """Disjoint menu trees."""

    ADMIN = "ADMIN"   # back-office navigation
    USER = "USER"     # public site navigation


class Menu(Base):
    __tablename__ = "menus"
    __table_args__ = (
        Index("ix_menus_parent_id", "parent_id"),
        Index("ix_menus_menu_type", "menu_type"),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    menu_type = Column(String(20), nullable=False)
    menu_name = Column(String(100), nullable=False)
    menu_url = Column(String(200))  # NULL for pure grouping nodes
    parent_id = Column(IdType, ForeignKey("menus.id", name="fk_menus_parent"))
    depth = Column(Integer, nullable=False, default=1)
    sort_order = Column(Integer, nullable=False, default=0)
    icon = Column(String(50))
    description = Column(String(500))
    use_yn = Column(String(1), nullable=False, default="Y")
    reg_dt = Column(DateTime)
    reg_no = Column(String(100))
    mod_dt = Column(DateTime)
    mod_no = Column(String(100))

    audit = composite(AuditInfo, reg_dt, reg_no, mod_dt, mod_no)

    @property
    def is_active(self) -> bool:
        return self.use_yn == "Y"

    def activate(self) -> None:
        self.use_yn = "Y"

    def deactivate(self) -> None:
        self.use_yn = "N"
