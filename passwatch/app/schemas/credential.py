# passwatch/app/schemas/credential.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CredentialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: Optional[str] = Field(None, max_length=255)
    password: str = Field(..., min_length=1)
    notes: Optional[str] = None
    favorite: bool = False


class CredentialUpdate(BaseModel):
    """Only the fields present in the request body are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    username: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    favorite: Optional[bool] = None


class CredentialResponse(BaseModel):
    # The secret is not included; use the reveal endpoint
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    username: Optional[str] = None
    favorite: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RevealRequest(BaseModel):
    password: str = Field(..., min_length=1, description="Account password, not the credential's")


class RevealResponse(BaseModel):
    success: bool = True
    id: str
    password: str
