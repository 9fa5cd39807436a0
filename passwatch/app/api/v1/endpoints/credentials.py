# passwatch/app/api/v1/endpoints/credentials.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.api import deps
from passwatch.app.core.clock import Clock
from passwatch.app.db.base import get_db
from passwatch.app.models.user import User
from passwatch.app.schemas.common import OperationResult
from passwatch.app.schemas.credential import (
    CredentialCreate,
    CredentialResponse,
    CredentialUpdate,
    RevealRequest,
    RevealResponse,
)
from passwatch.app.services.credentials import CredentialService

router = APIRouter()

# Columns that may be cleared with an explicit null
NULLABLE_FIELDS = {"username", "notes"}


@router.get("/", response_model=List[CredentialResponse])
async def read_credentials(
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    return await CredentialService(db).list(current_user.id)


@router.post("/", response_model=CredentialResponse, status_code=status.HTTP_201_CREATED)
async def create_credential(
        item_in: CredentialCreate,
        db: AsyncSession = Depends(get_db),
        clock: Clock = Depends(deps.get_clock),
        current_user: User = Depends(deps.get_current_user),
):
    return await CredentialService(db, clock=clock).create(current_user.id, item_in.model_dump())


@router.put("/{credential_id}", response_model=CredentialResponse)
async def update_credential(
        credential_id: str,
        item_in: CredentialUpdate,
        db: AsyncSession = Depends(get_db),
        clock: Clock = Depends(deps.get_clock),
        current_user: User = Depends(deps.get_current_user),
):
    changes = {
        key: value
        for key, value in item_in.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    return await CredentialService(db, clock=clock).update(current_user.id, credential_id, changes)


@router.delete("/{credential_id}", response_model=OperationResult)
async def delete_credential(
        credential_id: str,
        db: AsyncSession = Depends(get_db),
        clock: Clock = Depends(deps.get_clock),
        current_user: User = Depends(deps.get_current_user),
):
    await CredentialService(db, clock=clock).delete(current_user.id, credential_id)
    return OperationResult(success=True, message="Credential deleted")


@router.post("/{credential_id}/reveal", response_model=RevealResponse)
async def reveal_credential_password(
        credential_id: str,
        body: RevealRequest,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(deps.get_current_user),
):
    password = await CredentialService(db).reveal_password(current_user.id, credential_id, body.password)
    return RevealResponse(id=credential_id, password=password)
