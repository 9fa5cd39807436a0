# passwatch/app/schemas/login_ip.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class LoginIpResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    ip_address: str
    device_info: Optional[str] = None
    is_trusted: bool
    first_seen: datetime
    last_seen: datetime


class LoginIpList(BaseModel):
    success: bool = True
    ips: List[LoginIpResponse]


class TrustUpdate(BaseModel):
    is_trusted: bool


class TrustUpdateResponse(BaseModel):
    success: bool = True
    message: str
    ip: LoginIpResponse
