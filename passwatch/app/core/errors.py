# passwatch/app/core/errors.py
"""
Domain errors raised by the service layer.

Every error carries the HTTP status and the public message the API layer
renders as a structured failure body ({"success": false, "error": ...}).
Internal details (e.g. the wrapped database error) are kept on the exception
for logging only and never reach the client.
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError


class PassWatchError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Could not complete the operation"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message


class UserNotFound(PassWatchError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "User not found"


class RecordNotFound(PassWatchError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Record not found"


class InvalidCredentials(PassWatchError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Incorrect password"


class PersistenceFailure(PassWatchError):
    """A store operation failed. The original error is kept for diagnostics."""

    def __init__(self, operation: str, original: Exception):
        super().__init__()
        self.operation = operation
        self.original = original
        self.public_message = f"Could not {operation}"

    def __str__(self) -> str:
        return f"{self.operation} failed: {self.original}"


class NotificationDeliveryFailure(PassWatchError):
    """Raised by the mail sender; always caught by the notification dispatcher."""

    def __init__(self, recipient: str, original: Exception):
        super().__init__(f"Could not deliver notification to {recipient}")
        self.recipient = recipient
        self.original = original


@contextmanager
def persistence_errors(operation: str) -> Iterator[None]:
    """Re-raise any SQLAlchemy error inside the block as PersistenceFailure."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise PersistenceFailure(operation, exc) from exc
