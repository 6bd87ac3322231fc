# apps/messaging/client/transport.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import Internal, InvalidResponse, error_for_status

logger = logging.getLogger(__name__)


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        # Our endpoint says {"error"}; DRF defaults elsewhere say {"detail"}.
        return str(body.get("error") or body.get("detail") or "")
    return ""


def request_json(
    http: httpx.Client,
    method: str,
    path: str,
    *,
    token: Optional[str] = None,
    json: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Perform one HTTP call and return the decoded JSON object.

    Raises the typed error matching the status for non-2xx answers,
    ``Internal`` for transport failures and ``InvalidResponse`` when a 2xx
    body is not a JSON object. Never retries.
    """
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        response = http.request(method, path, json=json, headers=headers)
    except httpx.HTTPError as e:
        logger.warning("%s %s failed: %s", method, path, e)
        raise Internal() from e

    if response.is_error:
        message = _error_text(response)
        logger.info("%s %s -> %s %s", method, path, response.status_code, message)
        raise error_for_status(response.status_code, message)

    try:
        body = response.json()
    except ValueError as e:
        raise InvalidResponse() from e
    if not isinstance(body, dict):
        raise InvalidResponse()
    return body
