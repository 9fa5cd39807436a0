# passwatch/app/models/user.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func

from passwatch.app.db.base import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    # String UUID: the id doubles as the key for the audit value codec
    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)

    hashed_password = Column(String(255), nullable=False)

    # PIN login is enabled while a PIN hash is set
    pin_hash = Column(String(255), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def pin_enabled(self) -> bool:
        return self.pin_hash is not None
