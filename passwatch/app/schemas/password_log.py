# passwatch/app/schemas/password_log.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from passwatch.app.models.password_log import ActionType


class PasswordLogResponse(BaseModel):
    # Encrypted columns are never part of a response
    model_config = ConfigDict(from_attributes=True)

    id: str
    credential_id: str
    credential_name: str
    action_type: ActionType
    field_changed: Optional[str] = None
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    contains_sensitive_data: bool
    timestamp: datetime


class PasswordLogList(BaseModel):
    success: bool = True
    logs: List[PasswordLogResponse]


class SensitiveLogsRequest(BaseModel):
    """Account password, re-entered to unlock real values."""
    password: str = Field(..., min_length=1)


class ClearLogsResponse(BaseModel):
    success: bool = True
    message: str
    deleted: int
