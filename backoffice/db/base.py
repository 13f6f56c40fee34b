from sqlalchemy import BigInteger, Integer, MetaData
from sqlalchemy.orm import declarative_base

# Constraint names must be stable across dialects: the role migration looks
# constraints up by name.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# BIGINT ids everywhere except SQLite, where only INTEGER PRIMARY KEY autoincrements.
IdType = BigInteger().with_variant(Integer(), "sqlite")

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))
