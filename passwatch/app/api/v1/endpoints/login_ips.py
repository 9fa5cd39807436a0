# passwatch/app/api/v1/endpoints/login_ips.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.api import deps
from passwatch.app.core.clock import Clock
from passwatch.app.db.base import get_db
from passwatch.app.models.user import User
from passwatch.app.schemas.login_ip import (
    LoginIpList,
    LoginIpResponse,
    TrustUpdate,
    TrustUpdateResponse,
)
from passwatch.app.services.login_ip import LoginIpTracker

router = APIRouter()


@router.get("/", response_model=LoginIpList)
async def list_login_ips(
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    """Every origin the account has logged in from, most recently seen first."""
    ips = await LoginIpTracker(db).list_ips(current_user.id)
    return LoginIpList(ips=[LoginIpResponse.model_validate(ip) for ip in ips])


@router.put("/{record_id}", response_model=TrustUpdateResponse)
async def update_trust(
        record_id: str,
        body: TrustUpdate,
        db: AsyncSession = Depends(get_db),
        clock: Clock = Depends(deps.get_clock),
        current_user: User = Depends(deps.get_current_user),
):
    record = await LoginIpTracker(db, clock=clock).set_trust(current_user.id, record_id, body.is_trusted)
    return TrustUpdateResponse(
        message=f"IP marked as {'trusted' if body.is_trusted else 'untrusted'}",
        ip=LoginIpResponse.model_validate(record),
    )
