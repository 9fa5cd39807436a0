# passwatch/app/models/password_log.py
"""
ORM model for the credential change history.

Append-only: an entry is written once per observed change and never
updated. When `contains_sensitive_data` is set, `previous_value` and
`new_value` only ever hold the redaction placeholder; the real values live
in the `encrypted_*` columns, obfuscated with the owner's key
(see security/codec.py).
"""
import enum

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum

from passwatch.app.db.base import Base
from passwatch.app.models.user import new_uuid


class ActionType(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class PasswordLog(Base):
    """One field-level (or whole-record) change to a stored credential."""
    __tablename__ = "password_logs"

    id = Column(String(36), primary_key=True, default=new_uuid)

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Plain reference, not a foreign key: history outlives the credential
    credential_id = Column(String(36), nullable=False)

    # Name snapshot at the time of the action
    credential_name = Column(String(100), nullable=False)

    action_type = Column(
        Enum(
            ActionType,
            name="password_log_action",
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        nullable=False,
    )

    # None for whole-record create/delete
    field_changed = Column(String(50), nullable=True)

    previous_value = Column(String(255), nullable=True)
    new_value = Column(String(255), nullable=True)

    encrypted_previous_value = Column(Text, nullable=True)
    encrypted_new_value = Column(Text, nullable=True)

    contains_sensitive_data = Column(Boolean, nullable=False, default=False)

    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<PasswordLog(id={self.id}, credential_id={self.credential_id}, "
            f"action_type={self.action_type}, field_changed={self.field_changed})>"
        )
