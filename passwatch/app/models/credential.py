# passwatch/app/models/credential.py
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from passwatch.app.db.base import Base
from passwatch.app.models.user import new_uuid


class Credential(Base):
    """A stored login (site name, username, secret) owned by one user."""
    __tablename__ = "credentials"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Display name shown in the list, e.g. "GitHub"
    name = Column(String(100), nullable=False)
    username = Column(String(255), nullable=True)

    # --- SECRET DATA ---
    # Returned to clients only through the re-verified reveal endpoint
    password = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)

    favorite = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )
