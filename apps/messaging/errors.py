# apps/messaging/errors.py
"""
Error taxonomy for the messaging endpoint and the handler that turns any
exception into the ``{"error": "..."}`` body the clients expect.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class MessagingError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed."
    default_code = "messaging_error"


class Unauthenticated(MessagingError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthenticated"
    default_code = "unauthenticated"


class BadRequest(MessagingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"
    default_code = "bad_request"


class Forbidden(MessagingError):
    # Always the same text: callers never learn which check failed.
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"
    default_code = "forbidden"

    def __init__(self, reason: str = ""):
        super().__init__()
        self.reason = reason


class RoleMismatch(Forbidden):
    default_code = "role_mismatch"


class NotFound(MessagingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"
    default_code = "not_found"


class Conflict(MessagingError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict, please retry"
    default_code = "conflict"


class Internal(MessagingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
    default_code = "internal"


_GENERIC_BY_STATUS = {
    status.HTTP_401_UNAUTHORIZED: Unauthenticated.default_detail,
    status.HTTP_403_FORBIDDEN: Forbidden.default_detail,
    status.HTTP_500_INTERNAL_SERVER_ERROR: Internal.default_detail,
}


def _first_error(data) -> str:
    """Flatten DRF error payloads ({"field": ["msg"]}, ["msg"], "msg") to one line."""
    if isinstance(data, dict):
        if "detail" in data:
            return _first_error(data["detail"])
        for field, value in data.items():
            msg = _first_error(value)
            if field == "non_field_errors":
                return msg
            return f"{field}: {msg}"
        return BadRequest.default_detail
    if isinstance(data, (list, tuple)):
        return _first_error(data[0]) if data else BadRequest.default_detail
    return str(data)


def messaging_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "messaging view",
            exc_info=exc,
        )
        return Response({"error": Internal.default_detail}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, Forbidden) and exc.reason:
        logger.warning("Denied messaging request: %s", exc.reason)

    message = _GENERIC_BY_STATUS.get(response.status_code) or _first_error(response.data)
    response.data = {"error": message}
    return response
