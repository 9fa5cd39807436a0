# passwatch/app/db/base.py
"""
SQLAlchemy declarative base for every PassWatch table.

The engine, session factory and `get_db` dependency live in db/session.py
and are re-exported here so endpoints import everything DB-related from
one place.
"""
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Stable constraint names keep the (user_id, ip_address) unique constraint
# addressable across SQLite and PostgreSQL.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Usage:
        class LoginIp(Base):
            __tablename__ = "login_ips"
            ...
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


from passwatch.app.db.session import (  # noqa: E402
    engine,
    AsyncSessionLocal,
    get_db,
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionLocal",
    "get_db",
]
