# passwatch/app/services/users.py
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.core.errors import UserNotFound, persistence_errors
from passwatch.app.models.user import User


async def find_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    with persistence_errors("look up user"):
        return await db.get(User, user_id)


async def find_by_email(db: AsyncSession, email: str) -> Optional[User]:
    with persistence_errors("look up user"):
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalars().first()


async def require_user(db: AsyncSession, user_id: str) -> User:
    """Resolve a user id or raise UserNotFound."""
    user = await find_by_id(db, user_id)
    if user is None:
        raise UserNotFound()
    return user
