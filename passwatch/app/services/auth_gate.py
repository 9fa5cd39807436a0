# passwatch/app/services/auth_gate.py
"""
Password re-verification for sensitive actions.

Used before revealing a stored credential's password, before viewing the
audit history with real values, and by the verify-password endpoint the
client calls before changing the account password.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.core.errors import InvalidCredentials
from passwatch.app.security import hashing
from passwatch.app.services import users


class AuthGate:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def verify(self, user_id: str, candidate_password: str) -> bool:
        """
        Raises:
            UserNotFound: if the user id does not resolve
        """
        user = await users.require_user(self.db, user_id)
        return hashing.verify_password(candidate_password, user.hashed_password)

    async def require(self, user_id: str, candidate_password: str) -> None:
        """Like `verify`, but raises InvalidCredentials on a mismatch."""
        if not await self.verify(user_id, candidate_password):
            raise InvalidCredentials()
