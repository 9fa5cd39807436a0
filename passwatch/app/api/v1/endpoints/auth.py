# passwatch/app/api/v1/endpoints/auth.py
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.api import deps
from passwatch.app.core.config import settings
from passwatch.app.core.errors import InvalidCredentials, persistence_errors
from passwatch.app.db.base import get_db
from passwatch.app.models.user import User
from passwatch.app.schemas.common import OperationResult
from passwatch.app.schemas.user import (
    PasswordCheckRequest,
    PinLoginRequest,
    PinSetupRequest,
    Token,
    UserCreate,
    UserResponse,
)
from passwatch.app.security import hashing, jwt
from passwatch.app.services import users
from passwatch.app.services.auth_gate import AuthGate
from passwatch.app.services.background import BackgroundRunner
from passwatch.app.services.login_ip import LoginAlertNotifier, track_login

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user: User, mode: str) -> Token:
    access_token = jwt.create_access_token(
        data={"sub": user.id, "mode": mode},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return Token(access_token=access_token, user_id=user.id)


def _spawn_login_tracking(
        request: Request,
        user: User,
        runner: BackgroundRunner,
        notifier: LoginAlertNotifier,
        session_factory,
) -> None:
    # Not awaited: the token goes back to the client immediately
    runner.spawn(
        track_login,
        session_factory,
        notifier,
        user.id,
        deps.get_client_ip(request),
        deps.get_device_info(request),
        name=f"track_login:{user.id}",
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    email = user_in.email.strip().lower()
    if await users.find_by_email(db, email):
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = User(
        name=user_in.name,
        email=email,
        hashed_password=hashing.get_password_hash(user_in.password),
    )
    with persistence_errors("create user"):
        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)
    return new_user


@router.post("/login", response_model=Token)
async def login(
        request: Request,
        form_data: OAuth2PasswordRequestForm = Depends(),
        db: AsyncSession = Depends(get_db),
        runner: BackgroundRunner = Depends(deps.get_background_runner),
        notifier: LoginAlertNotifier = Depends(deps.get_login_notifier),
        session_factory=Depends(deps.get_session_factory),
):
    # OAuth2 form field is called "username"; it carries the email
    user = await users.find_by_email(db, form_data.username)

    if not user or not hashing.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    token = _issue_token(user, mode="password")
    _spawn_login_tracking(request, user, runner, notifier, session_factory)

    logger.info("User logged in", extra={"event": "user_login", "user_id": user.id})
    return token


@router.post("/pin-login", response_model=Token)
async def pin_login(
        request: Request,
        body: PinLoginRequest,
        db: AsyncSession = Depends(get_db),
        runner: BackgroundRunner = Depends(deps.get_background_runner),
        notifier: LoginAlertNotifier = Depends(deps.get_login_notifier),
        session_factory=Depends(deps.get_session_factory),
):
    user = await users.find_by_email(db, body.email)

    if not user or not user.pin_enabled or not hashing.verify_password(body.pin, user.pin_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="PIN login failed",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    token = _issue_token(user, mode="pin")
    _spawn_login_tracking(request, user, runner, notifier, session_factory)

    logger.info("User logged in with PIN", extra={"event": "user_pin_login", "user_id": user.id})
    return token


@router.post("/pin", response_model=OperationResult)
async def set_pin(
        body: PinSetupRequest,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    """Enable, change or (with `pin=null`) disable PIN login. Needs the account password."""
    await AuthGate(db).require(current_user.id, body.password)

    current_user.pin_hash = hashing.get_password_hash(body.pin) if body.pin else None
    with persistence_errors("update PIN"):
        db.add(current_user)
        await db.commit()

    return OperationResult(
        success=True,
        message="PIN login enabled" if body.pin else "PIN login disabled",
    )


@router.post("/verify-password", response_model=OperationResult)
async def verify_password(
        body: PasswordCheckRequest,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    """Re-verification step the client runs before sensitive account changes."""
    if not await AuthGate(db).verify(current_user.id, body.password):
        raise InvalidCredentials()
    return OperationResult(success=True, message="Password verified")
