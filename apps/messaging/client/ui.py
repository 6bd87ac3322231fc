# apps/messaging/client/ui.py
"""
Plain-text views over ``MessagingState``. They only read the cache; every
action goes back through ``Messenger``.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, NamedTuple, Optional, Tuple

from django.utils import timezone
from django.utils.timesince import timesince

from .models import ConversationSummary, Message
from .state import MessagingState

PREVIEW_LENGTH = 40


def relative_time(when: Optional[datetime], now: Optional[datetime] = None) -> str:
    if when is None:
        return ""
    now = now or timezone.now()
    if (now - when).total_seconds() < 60:
        return "just now"
    # timesince gives "2 hours, 5 minutes"; the first unit is enough here.
    return f"{timesince(when, now, depth=1)} ago".replace("\xa0", " ")


def _preview(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[: PREVIEW_LENGTH - 1] + "…"


class ConversationRow(NamedTuple):
    index: int
    conversation_id: str
    title: str
    role: str
    preview: str
    when: str
    unread: int
    is_active: bool


class ConversationListView:
    empty_text = "No conversations yet"

    def __init__(self, state: MessagingState, current_user_id: int):
        self.state = state
        self.current_user_id = current_user_id

    def rows(self, now: Optional[datetime] = None) -> List[ConversationRow]:
        # Server order (most recent first) is kept as-is.
        rows = []
        for index, conversation in enumerate(self.state.conversations, start=1):
            other = conversation.other_participant(self.current_user_id)
            last = conversation.last_message
            rows.append(
                ConversationRow(
                    index=index,
                    conversation_id=conversation.id,
                    title=other.full_name or f"User {other.id}",
                    role=other.role or "",
                    preview=_preview(last.content) if last else "No messages yet",
                    when=relative_time(last.created_at if last else conversation.updated_at, now),
                    unread=conversation.unread_count(self.current_user_id),
                    is_active=conversation.id == self.state.active_conversation_id,
                )
            )
        return rows

    def render(self, now: Optional[datetime] = None) -> str:
        if self.state.is_loading and not self.state.conversations:
            return "Loading conversations…"
        rows = self.rows(now)
        if not rows:
            return self.empty_text
        lines = []
        for row in rows:
            marker = ">" if row.is_active else " "
            badge = f" ({row.unread} new)" if row.unread else ""
            role = f" [{row.role}]" if row.role else ""
            lines.append(f"{marker} {row.index}. {row.title}{role}{badge}  {row.when}")
            lines.append(f"     {row.preview}")
        return "\n".join(lines)

    def conversation_at(self, index: int) -> Optional[ConversationSummary]:
        if 1 <= index <= len(self.state.conversations):
            return self.state.conversations[index - 1]
        return None


class ChatView:
    empty_text = "No messages yet"
    placeholder = "Select a conversation"

    def __init__(self, state: MessagingState, current_user_id: int):
        self.state = state
        self.current_user_id = current_user_id
        self._rendered: Optional[Tuple[Optional[str], Tuple[str, ...]]] = None

    def can_send(self, draft: str) -> bool:
        return bool((draft or "").strip()) and not self.state.is_sending

    def should_scroll(self) -> bool:
        """True when the message list changed since the last render."""
        return self._fingerprint() != self._rendered

    def _fingerprint(self):
        return self.state.active_conversation_id, tuple(m.id for m in self.state.messages)

    def _line(self, message: Message, other_name: str, now: Optional[datetime]) -> str:
        mine = message.sender_id == self.current_user_id
        who = "You" if mine else other_name
        tick = " ✓" if mine and message.is_read else ""
        return f"[{relative_time(message.created_at, now)}] {who}: {message.content}{tick}"

    def render(self, now: Optional[datetime] = None) -> str:
        conversation = self.state.active_conversation
        if conversation is None:
            self._rendered = self._fingerprint()
            return self.placeholder

        other = conversation.other_participant(self.current_user_id)
        other_name = other.full_name or f"User {other.id}"
        header = f"== {other_name}" + (f" ({other.role})" if other.role else "") + " =="

        scroll = self.should_scroll()
        messages = self.state.messages
        if messages:
            # Array order is already chronological.
            body = [self._line(m, other_name, now) for m in messages]
        else:
            body = [self.empty_text]
        if scroll and messages:
            body.append("↓ latest")
        if self.state.is_sending:
            body.append("Sending…")

        self._rendered = self._fingerprint()
        return "\n".join([header, *body])
