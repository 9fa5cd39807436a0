# passwatch/app/services/audit.py
"""
Credential change history.

Entries are written by the credential service through the helpers at the
bottom of this module:

- create: one entry carrying the initial name
- update: one entry per field whose value actually changed
- delete: one entry carrying the final name as previous value

Which fields are tracked, and which of them are sensitive, is declared
once in CREDENTIAL_FIELDS. Sensitive fields store the redaction placeholder
in the readable columns and the real values, obfuscated with the owner's
id, in the encrypted columns.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.core.clock import Clock, system_clock
from passwatch.app.core.config import settings
from passwatch.app.core.errors import persistence_errors
from passwatch.app.models.credential import Credential
from passwatch.app.models.password_log import ActionType, PasswordLog
from passwatch.app.schemas.password_log import PasswordLogResponse
from passwatch.app.security import codec
from passwatch.app.services import users
from passwatch.app.services.auth_gate import AuthGate

logger = logging.getLogger(__name__)

DISPLAY_VALUE_MAX_LENGTH = 255


def display_value(value: Any) -> Optional[str]:
    """Readable form of a field value for the plain audit columns."""
    if value is None:
        return None
    if isinstance(value, bool):
        return settings.AUDIT_TRUE_LABEL if value else settings.AUDIT_FALSE_LABEL
    return str(value)[:DISPLAY_VALUE_MAX_LENGTH]


@dataclass(frozen=True)
class AuditedField:
    """A credential attribute whose changes are written to the history."""
    name: str
    sensitive: bool = False

    def read(self, credential: Credential) -> Any:
        return getattr(credential, self.name)


CREDENTIAL_FIELDS = (
    AuditedField("name"),
    AuditedField("username"),
    AuditedField("password", sensitive=True),
    AuditedField("notes", sensitive=True),
    AuditedField("favorite"),
)


def snapshot(credential: Credential) -> Dict[str, Any]:
    """Field values to diff against after an update."""
    return {field.name: field.read(credential) for field in CREDENTIAL_FIELDS}


class AuditLog:
    """Append-only access to the password_logs table."""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    async def record(
        self,
        user_id: str,
        credential_id: str,
        credential_name: str,
        action_type: ActionType,
        field_changed: Optional[str] = None,
        previous_value: Optional[str] = None,
        new_value: Optional[str] = None,
        sensitive: bool = False,
        actual_previous: Optional[str] = None,
        actual_new: Optional[str] = None,
        commit: bool = True,
    ) -> PasswordLog:
        """
        Append one history entry.

        For sensitive entries the caller passes the redaction placeholder as
        `previous_value`/`new_value` and the real values as
        `actual_previous`/`actual_new`; only the latter are obfuscated and
        stored. Nothing is redacted on the caller's behalf.

        With `commit=False` the entry joins the caller's transaction.

        Raises:
            UserNotFound: if the user id does not resolve
            PersistenceFailure: if the store fails
        """
        await users.require_user(self.db, user_id)

        entry = PasswordLog(
            user_id=user_id,
            credential_id=credential_id,
            credential_name=credential_name[:100],
            action_type=ActionType(action_type),
            field_changed=field_changed,
            previous_value=previous_value or None,
            new_value=new_value or None,
            encrypted_previous_value=codec.encrypt(actual_previous, user_id) if sensitive else None,
            encrypted_new_value=codec.encrypt(actual_new, user_id) if sensitive else None,
            contains_sensitive_data=sensitive,
            timestamp=self.clock.now(),
        )

        with persistence_errors("create password log"):
            self.db.add(entry)
            if commit:
                await self.db.commit()
            else:
                await self.db.flush()
        return entry

    async def list(self, user_id: str, limit: Optional[int] = None) -> List[PasswordLog]:
        """Newest entries first. Sensitive values show the placeholder."""
        with persistence_errors("list password logs"):
            result = await self.db.execute(
                select(PasswordLog)
                .where(PasswordLog.user_id == user_id)
                .order_by(PasswordLog.timestamp.desc())
                .limit(settings.AUDIT_LIST_LIMIT if limit is None else limit)
            )
            return list(result.scalars().all())

    async def list_with_sensitive(
        self,
        user_id: str,
        password: str,
        limit: Optional[int] = None,
    ) -> List[PasswordLogResponse]:
        """
        Same entries as `list`, with real values for sensitive entries.

        The decrypted values exist only in the returned objects; stored rows
        keep the placeholder.

        Raises:
            UserNotFound: if the user id does not resolve
            InvalidCredentials: if `password` is wrong
        """
        await AuthGate(self.db).require(user_id, password)

        views = []
        for entry in await self.list(user_id, limit):
            view = PasswordLogResponse.model_validate(entry)
            if entry.contains_sensitive_data:
                view = view.model_copy(update=self._revealed_values(entry))
            views.append(view)
        return views

    def _revealed_values(self, entry: PasswordLog) -> Dict[str, Optional[str]]:
        revealed = {}
        try:
            if entry.encrypted_previous_value:
                revealed["previous_value"] = codec.decrypt(entry.encrypted_previous_value, entry.user_id)
            if entry.encrypted_new_value:
                revealed["new_value"] = codec.decrypt(entry.encrypted_new_value, entry.user_id)
        except ValueError as e:
            logger.error(
                f"Could not decode stored audit value: {e}",
                extra={"event": "password_log_decode_failed", "log_id": entry.id},
            )
            return {}
        return revealed

    async def clear(self, user_id: str, action_type: Optional[ActionType] = None) -> int:
        """
        Delete the user's entries, optionally only one action type.

        Returns:
            Number of deleted entries

        Raises:
            UserNotFound: if the user id does not resolve
        """
        await users.require_user(self.db, user_id)
        if action_type is not None:
            action_type = ActionType(action_type)

        stmt = delete(PasswordLog).where(PasswordLog.user_id == user_id)
        if action_type is not None:
            stmt = stmt.where(PasswordLog.action_type == action_type)

        with persistence_errors("clear password logs"):
            result = await self.db.execute(stmt)
            await self.db.commit()

        logger.info(
            "Password logs cleared",
            extra={
                "event": "password_logs_cleared",
                "user_id": user_id,
                "action_type": action_type.value if action_type else "all",
                "count": result.rowcount,
            },
        )
        return result.rowcount


async def log_created(audit: AuditLog, credential: Credential) -> PasswordLog:
    return await audit.record(
        credential.user_id,
        credential.id,
        credential.name,
        ActionType.CREATE,
        new_value=credential.name,
        commit=False,
    )


async def log_changes(
    audit: AuditLog,
    credential: Credential,
    before: Dict[str, Any],
) -> List[PasswordLog]:
    """Write one update entry per field that differs from `before`."""
    placeholder = settings.AUDIT_REDACTION_PLACEHOLDER
    entries = []

    for field in CREDENTIAL_FIELDS:
        old = before.get(field.name)
        new = field.read(credential)
        if old == new:
            continue

        if field.sensitive:
            entry = await audit.record(
                credential.user_id,
                credential.id,
                credential.name,
                ActionType.UPDATE,
                field_changed=field.name,
                previous_value=placeholder if old is not None else None,
                new_value=placeholder if new is not None else None,
                sensitive=True,
                actual_previous=None if old is None else str(old),
                actual_new=None if new is None else str(new),
                commit=False,
            )
        else:
            entry = await audit.record(
                credential.user_id,
                credential.id,
                credential.name,
                ActionType.UPDATE,
                field_changed=field.name,
                previous_value=display_value(old),
                new_value=display_value(new),
                commit=False,
            )
        entries.append(entry)

    return entries


async def log_deleted(audit: AuditLog, credential: Credential) -> PasswordLog:
    return await audit.record(
        credential.user_id,
        credential.id,
        credential.name,
        ActionType.DELETE,
        previous_value=credential.name,
        commit=False,
    )
