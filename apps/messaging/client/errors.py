# apps/messaging/client/errors.py
"""
Typed failures raised by the messaging client. The server's ``{"error"}``
body becomes the exception message; the HTTP status picks the class.
"""
from __future__ import annotations

from typing import Dict, Optional, Type

from apps.messaging.slots import InvalidRole

__all__ = [
    "MessagingError",
    "Unauthenticated",
    "BadRequest",
    "Forbidden",
    "NotFound",
    "Conflict",
    "Internal",
    "InvalidResponse",
    "InvalidRole",
    "error_for_status",
]


class MessagingError(Exception):
    default_message = "Something went wrong"
    status_code: Optional[int] = None

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class Unauthenticated(MessagingError):
    # Callers should prompt for login, not retry.
    default_message = "Please sign in"
    status_code = 401


class BadRequest(MessagingError):
    default_message = "Please try again"
    status_code = 400


class Forbidden(MessagingError):
    default_message = "You are not allowed to do that"
    status_code = 403


class NotFound(MessagingError):
    default_message = "Not found"
    status_code = 404


class Conflict(MessagingError):
    default_message = "Conflict, please retry"
    status_code = 409


class Internal(MessagingError):
    default_message = "Something went wrong on our side"
    status_code = 500


class InvalidResponse(MessagingError):
    """The server answered 2xx but the payload does not have the expected shape."""
    default_message = "Invalid response format"


_BY_STATUS: Dict[int, Type[MessagingError]] = {
    400: BadRequest,
    401: Unauthenticated,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
}


def error_for_status(status_code: int, message: str = "") -> MessagingError:
    cls = _BY_STATUS.get(status_code)
    if cls is None:
        cls = Internal if status_code >= 500 else BadRequest
    return cls(message, status_code=status_code)
