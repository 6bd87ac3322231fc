# apps/messaging/client/api.py
"""
Blocking wrapper around ``POST /api/v1/messages/``.

Every call takes the current session from the ``SessionStore`` and sends its
bearer token; without a session the call fails with ``Unauthenticated``
before touching the network. Nothing here trusts its own checks: the server
re-derives identity, role and slot membership on every request.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from apps.messaging.slots import resolve_slots

from .errors import BadRequest, InvalidResponse, MessagingError, Unauthenticated
from .models import ConversationSummary, Message
from .session import Session, SessionStore
from .transport import request_json

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/api/v1/messages/"


class MessagingApi:
    def __init__(self, http: httpx.Client, sessions: SessionStore):
        self.http = http
        self.sessions = sessions

    def _session(self) -> Session:
        session = self.sessions.get_current_session()
        if session is None:
            raise Unauthenticated()
        return session

    def _call(self, action: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        session = self._session()
        body: Dict[str, Any] = {"action": action}
        if data is not None:
            body["data"] = data
        return request_json(self.http, "POST", MESSAGES_PATH, token=session.access_token, json=body)

    def start_conversation(self, target_user_id: int) -> str:
        """
        Return the id of the conversation with ``target_user_id``, creating it
        on first contact. Calling it again (from either side) returns the same id.
        """
        self._session()
        try:
            target_user_id = int(target_user_id)
        except (TypeError, ValueError):
            raise BadRequest("Invalid user id")
        # Role is re-read so a profile edit since sign-in is honoured.
        session = self.sessions.refresh()
        if target_user_id == session.user_id:
            raise BadRequest("You cannot message yourself")

        # Raises InvalidRole for an unset role; there is no fallback slot.
        slots = resolve_slots(session.user_id, session.role, target_user_id)

        result = self._call(
            "createConversation",
            {"farmer_id": slots.farmer_slot_id, "laborer_id": slots.laborer_slot_id},
        )
        conversation = result.get("conversation")
        if not isinstance(conversation, dict) or not conversation.get("id"):
            raise InvalidResponse()
        return str(conversation["id"])

    def send_message(self, conversation_id: str, content: str) -> Message:
        self._session()
        text = (content or "").strip()
        if not text:
            raise BadRequest("Message cannot be empty")

        result = self._call(
            "sendMessage",
            {"conversation_id": conversation_id, "content": text, "message_type": "text"},
        )
        raw = result.get("message")
        if not isinstance(raw, dict):
            raise InvalidResponse()
        return Message.from_json(raw)

    def load_conversations(self) -> List[ConversationSummary]:
        result = self._call("getConversations")
        raw = result.get("conversations")
        if not isinstance(raw, list):
            raise InvalidResponse()
        return [ConversationSummary.from_json(item) for item in raw]

    def mark_as_read(self, message_id: str) -> bool:
        """True when the server accepted the call. Other failures are only logged."""
        self._session()
        try:
            self._call("markAsRead", {"message_id": message_id})
        except MessagingError as e:
            logger.warning("Error marking message %s as read: %s", message_id, e.message)
            return False
        return True
