# passwatch/app/api/deps.py
from typing import Optional, Set

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.core.clock import Clock
from passwatch.app.core.config import settings
from passwatch.app.db.base import get_db
from passwatch.app.models.user import User
from passwatch.app.schemas.user import TokenPayload
from passwatch.app.security.jwt import decode_access_token
from passwatch.app.services import users
from passwatch.app.services.background import BackgroundRunner
from passwatch.app.services.login_ip import LoginAlertNotifier

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login"
)


async def get_current_user(
        db: AsyncSession = Depends(get_db),
        token: str = Depends(reusable_oauth2)
) -> User:
    try:
        payload = decode_access_token(token)
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    user = await users.find_by_id(db, token_data.sub) if token_data.sub else None
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    return user


def get_client_ip(request: Request, trusted_proxies: Optional[Set[str]] = None) -> str:
    """
    Address the login came from.

    The direct peer is the client unless it is one of the configured
    reverse proxies. Only then are X-Forwarded-For / X-Real-IP read: the
    forwarded chain is walked from the right and the first hop that is not
    itself a trusted proxy wins, so a value the client prepended never does.
    """
    if trusted_proxies is None:
        trusted_proxies = settings.trusted_proxies

    peer = request.client.host if request.client else None
    if peer is None:
        return "unknown"
    if peer not in trusted_proxies:
        return peer

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        for hop in reversed(hops):
            if hop not in trusted_proxies:
                return hop

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return peer


def get_device_info(request: Request) -> Optional[str]:
    return request.headers.get("User-Agent") or None


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide components, built once in main.py and kept on app.state
# ─────────────────────────────────────────────────────────────────────────────
def get_background_runner(request: Request) -> BackgroundRunner:
    return request.app.state.background


def get_login_notifier(request: Request) -> LoginAlertNotifier:
    return request.app.state.login_notifier


def get_session_factory(request: Request):
    return request.app.state.session_factory


def get_clock(request: Request) -> Clock:
    return request.app.state.clock
