# apps/messaging/client/models.py
"""
Client-side records built from the endpoint's JSON.

Parsing is strict about structure: a missing id or a non-list ``messages``
raises ``InvalidResponse`` instead of leaking half-built objects to the UI.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from django.utils.dateparse import parse_datetime

from .errors import InvalidResponse


def _require(data: Any, key: str) -> Any:
    if not isinstance(data, dict) or data.get(key) in (None, ""):
        raise InvalidResponse(f"Invalid response format: missing '{key}'")
    return data[key]


def _timestamp(data: Dict[str, Any], key: str, *, required: bool = True) -> Optional[datetime]:
    raw = data.get(key)
    if raw in (None, ""):
        if required:
            raise InvalidResponse(f"Invalid response format: missing '{key}'")
        return None
    try:
        value = parse_datetime(str(raw))
    except ValueError:
        value = None
    if value is None:
        raise InvalidResponse(f"Invalid response format: bad timestamp in '{key}'")
    return value


@dataclass(frozen=True)
class Message:
    id: str
    conversation_id: str
    sender_id: int
    content: str
    created_at: datetime
    message_type: str = "text"
    read_at: Optional[datetime] = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=str(_require(data, "id")),
            conversation_id=str(_require(data, "conversation_id")),
            sender_id=_require(data, "sender_id"),
            content=str(data.get("content") or ""),
            message_type=str(data.get("message_type") or "text"),
            created_at=_timestamp(data, "created_at"),
            read_at=_timestamp(data, "read_at", required=False),
        )


@dataclass(frozen=True)
class ParticipantProfile:
    id: int
    full_name: str
    role: Optional[str]

    @classmethod
    def from_json(cls, data: Any, fallback_id: int, fallback_role: str) -> "ParticipantProfile":
        if not isinstance(data, dict):
            return cls(id=fallback_id, full_name="", role=fallback_role)
        return cls(
            id=data.get("id") or fallback_id,
            full_name=str(data.get("full_name") or ""),
            role=data.get("role") or fallback_role,
        )


@dataclass(frozen=True)
class ConversationSummary:
    """
    A conversation as the list and chat views see it. ``tentative`` marks a
    local optimistic edit (new message appended, ``updated_at`` bumped) that
    the next reload from the server replaces.
    """
    id: str
    farmer_id: int
    laborer_id: int
    created_at: datetime
    updated_at: datetime
    farmer_profile: ParticipantProfile
    laborer_profile: ParticipantProfile
    messages: Tuple[Message, ...] = field(default_factory=tuple)
    tentative: bool = False

    @property
    def last_message(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None

    def other_participant(self, current_user_id: int) -> ParticipantProfile:
        if current_user_id == self.farmer_id:
            return self.laborer_profile
        return self.farmer_profile

    def unread_count(self, current_user_id: int) -> int:
        return sum(1 for m in self.messages if m.sender_id != current_user_id and not m.is_read)

    def with_message(self, message: Message, now: datetime) -> "ConversationSummary":
        return replace(self, messages=self.messages + (message,), updated_at=now, tentative=True)

    def with_read(self, message_id: str, read_at: datetime) -> "ConversationSummary":
        if not any(m.id == message_id for m in self.messages):
            return self
        messages = tuple(
            replace(m, read_at=read_at) if m.id == message_id and m.read_at is None else m
            for m in self.messages
        )
        return replace(self, messages=messages)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ConversationSummary":
        farmer_id = _require(data, "farmer_id")
        laborer_id = _require(data, "laborer_id")
        raw_messages = data.get("messages", [])
        if not isinstance(raw_messages, list):
            raise InvalidResponse("Invalid response format: 'messages' is not a list")
        return cls(
            id=str(_require(data, "id")),
            farmer_id=farmer_id,
            laborer_id=laborer_id,
            created_at=_timestamp(data, "created_at"),
            updated_at=_timestamp(data, "updated_at"),
            farmer_profile=ParticipantProfile.from_json(data.get("farmer_profile"), farmer_id, "farmer"),
            laborer_profile=ParticipantProfile.from_json(data.get("laborer_profile"), laborer_id, "laborer"),
            messages=tuple(Message.from_json(m) for m in raw_messages),
        )
