# passwatch/app/models/login_ip.py
"""
ORM model for the per-user table of observed login origins.

One row per (user, IP address). A row is created the first time a user
logs in from an address and is untrusted until the user marks it trusted.
Rows disappear only through the user cascade.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint

from passwatch.app.db.base import Base
from passwatch.app.models.user import new_uuid


class LoginIp(Base):
    """Trust metadata for one (user, IP address) pair."""
    __tablename__ = "login_ips"
    __table_args__ = (
        UniqueConstraint("user_id", "ip_address"),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # 45 chars fits the longest textual IPv6 form (IPv4-mapped)
    ip_address = Column(String(45), nullable=False)

    # Best-effort user agent; written once, never overwritten
    device_info = Column(String(255), nullable=True)

    is_trusted = Column(Boolean, nullable=False, default=False)

    # Both timestamps come from the service clock, not the database
    first_seen = Column(DateTime(timezone=True), nullable=False)
    last_seen = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<LoginIp(id={self.id}, user_id={self.user_id}, "
            f"ip_address={self.ip_address}, is_trusted={self.is_trusted})>"
        )
