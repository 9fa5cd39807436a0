# passwatch/app/schemas/common.py
from typing import Optional

from pydantic import BaseModel


class OperationResult(BaseModel):
    """Generic success/failure body. Failures carry `error` instead of `message`."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
