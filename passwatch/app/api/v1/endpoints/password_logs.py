# passwatch/app/api/v1/endpoints/password_logs.py
"""
Credential change history.

- GET    /password-logs/            redacted history (newest 50)
- POST   /password-logs/sensitive   same history with real values, needs the account password
- DELETE /password-logs/            clear everything
- DELETE /password-logs/{type}      clear one action type ("all" clears everything)
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.api import deps
from passwatch.app.db.base import get_db
from passwatch.app.models.password_log import ActionType
from passwatch.app.models.user import User
from passwatch.app.schemas.password_log import (
    ClearLogsResponse,
    PasswordLogList,
    PasswordLogResponse,
    SensitiveLogsRequest,
)
from passwatch.app.services.audit import AuditLog

router = APIRouter()

CLEAR_ALL = "all"


@router.get("/", response_model=PasswordLogList)
async def read_password_logs(
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    entries = await AuditLog(db).list(current_user.id)
    return PasswordLogList(logs=[PasswordLogResponse.model_validate(e) for e in entries])


@router.post("/sensitive", response_model=PasswordLogList)
async def read_password_logs_with_sensitive(
        body: SensitiveLogsRequest,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    # InvalidCredentials → 401 through the app-level handler
    views = await AuditLog(db).list_with_sensitive(current_user.id, body.password)
    return PasswordLogList(logs=views)


@router.delete("/", response_model=ClearLogsResponse)
async def clear_password_logs(
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    deleted = await AuditLog(db).clear(current_user.id)
    return ClearLogsResponse(message="Password logs cleared", deleted=deleted)


@router.delete("/{action_type}", response_model=ClearLogsResponse)
async def clear_password_logs_by_type(
        action_type: str,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    if action_type == CLEAR_ALL:
        deleted = await AuditLog(db).clear(current_user.id)
        return ClearLogsResponse(message="Password logs cleared", deleted=deleted)

    try:
        action = ActionType(action_type)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid type. Use: all, create, update or delete",
        )

    deleted = await AuditLog(db).clear(current_user.id, action)
    return ClearLogsResponse(message=f"Password logs of type {action.value} cleared", deleted=deleted)
