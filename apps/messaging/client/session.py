# apps/messaging/client/session.py
"""
Session handling for the messaging client: obtain a JWT pair, remember the
signed-in user, and look up profiles through the accounts API.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

import httpx

from .errors import InvalidResponse, Unauthenticated
from .models import ParticipantProfile
from .transport import request_json

logger = logging.getLogger(__name__)

TOKEN_PATH = "/api/token/"
WHOAMI_PATH = "/api/v1/accounts/whoami/"
PROFILE_PATH = "/api/v1/accounts/profiles/{user_id}/"


@dataclass(frozen=True)
class Session:
    user_id: int
    access_token: str
    role: Optional[str] = None
    username: str = ""
    display_name: str = ""


class SessionStore:
    def __init__(self, http: httpx.Client):
        self.http = http
        self._session: Optional[Session] = None

    def get_current_session(self) -> Optional[Session]:
        return self._session

    def sign_in(self, username: str, password: str) -> Session:
        tokens = request_json(
            self.http, "POST", TOKEN_PATH, json={"username": username, "password": password}
        )
        access = tokens.get("access")
        if not access:
            raise InvalidResponse("Token response has no access token")
        self._session = self._whoami(access)
        logger.info("Signed in as user %s (%s)", self._session.user_id, self._session.role or "no role")
        return self._session

    def sign_out(self) -> None:
        self._session = None

    def refresh(self) -> Session:
        """Re-read identity and role from the server; the stored role may be stale."""
        if self._session is None:
            raise Unauthenticated()
        self._session = self._whoami(self._session.access_token)
        return self._session

    def fetch_profile(self, user_id: int) -> ParticipantProfile:
        session = self._session
        if session is None:
            raise Unauthenticated()
        body = request_json(
            self.http, "GET", PROFILE_PATH.format(user_id=user_id), token=session.access_token
        )
        return ParticipantProfile(
            id=body.get("id") or user_id,
            full_name=str(body.get("full_name") or ""),
            role=body.get("role"),
        )

    def _whoami(self, access_token: str) -> Session:
        body = request_json(self.http, "GET", WHOAMI_PATH, token=access_token)
        if not body.get("is_authenticated"):
            raise Unauthenticated()
        if body.get("user_id") is None:
            raise InvalidResponse("whoami response has no user_id")
        session = Session(
            user_id=body["user_id"],
            access_token=access_token,
            role=body.get("role"),
            username=body.get("username", ""),
            display_name=body.get("display_name", ""),
        )
        if self._session is not None and self._session.user_id == session.user_id:
            return replace(self._session, role=session.role, display_name=session.display_name)
        return session
