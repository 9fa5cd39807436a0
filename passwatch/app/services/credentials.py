# passwatch/app/services/credentials.py
"""
Credential mutations, each committed together with its history entries.

Only the operations the history observes live here (create, update,
delete) plus the re-verified password reveal.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.core.clock import Clock, system_clock
from passwatch.app.core.errors import RecordNotFound, persistence_errors
from passwatch.app.models.credential import Credential
from passwatch.app.services import audit
from passwatch.app.services.auth_gate import AuthGate

logger = logging.getLogger(__name__)


class CredentialService:
    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.audit = audit.AuditLog(db, clock=clock)

    async def _get_owned(self, user_id: str, credential_id: str) -> Credential:
        with persistence_errors("look up credential"):
            result = await self.db.execute(
                select(Credential).where(
                    Credential.id == credential_id,
                    Credential.user_id == user_id,
                )
            )
            credential = result.scalars().first()
        if credential is None:
            raise RecordNotFound("Credential not found")
        return credential

    async def list(self, user_id: str) -> List[Credential]:
        with persistence_errors("list credentials"):
            result = await self.db.execute(
                select(Credential)
                .where(Credential.user_id == user_id)
                .order_by(Credential.created_at.desc())
            )
            return list(result.scalars().all())

    async def create(self, user_id: str, data: Dict[str, Any]) -> Credential:
        credential = Credential(user_id=user_id, **data)
        with persistence_errors("create credential"):
            self.db.add(credential)
            await self.db.flush()
            await audit.log_created(self.audit, credential)
            await self.db.commit()
            await self.db.refresh(credential)
        return credential

    async def update(self, user_id: str, credential_id: str, changes: Dict[str, Any]) -> Credential:
        """
        Apply `changes` (only the keys present) and log each changed field.

        Raises:
            RecordNotFound: if the credential does not belong to the user
        """
        credential = await self._get_owned(user_id, credential_id)
        before = audit.snapshot(credential)

        for key, value in changes.items():
            setattr(credential, key, value)

        with persistence_errors("update credential"):
            entries = await audit.log_changes(self.audit, credential, before)
            await self.db.commit()
            await self.db.refresh(credential)

        logger.info(
            "Credential updated",
            extra={
                "event": "credential_updated",
                "user_id": user_id,
                "credential_id": credential_id,
                "fields": [entry.field_changed for entry in entries],
            },
        )
        return credential

    async def delete(self, user_id: str, credential_id: str) -> None:
        credential = await self._get_owned(user_id, credential_id)
        with persistence_errors("delete credential"):
            await audit.log_deleted(self.audit, credential)
            await self.db.delete(credential)
            await self.db.commit()

    async def reveal_password(self, user_id: str, credential_id: str, account_password: str) -> str:
        """
        Raises:
            InvalidCredentials: if `account_password` is wrong
            RecordNotFound: if the credential does not belong to the user
        """
        await AuthGate(self.db).require(user_id, account_password)
        credential = await self._get_owned(user_id, credential_id)
        return credential.password
