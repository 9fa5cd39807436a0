# passwatch/app/schemas/user.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)


# Never includes the password hash
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    is_active: bool
    pin_enabled: bool


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    mode: str = "password"  # "pin" for PIN logins


class PinSetupRequest(BaseModel):
    """Send `pin=None` to disable PIN login."""
    password: str = Field(..., min_length=1)
    pin: Optional[str] = Field(None, min_length=4, max_length=12, pattern=r"^\d+$")


class PinLoginRequest(BaseModel):
    email: EmailStr
    pin: str = Field(..., min_length=4, max_length=12)


class PasswordCheckRequest(BaseModel):
    password: str = Field(..., min_length=1)
