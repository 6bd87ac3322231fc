# apps/messaging/client/state.py
"""
In-memory cache of the signed-in user's conversations.

``messages`` is never stored on its own: it is read off the active
conversation every time, so the flattened view and ``conversations`` cannot
drift apart. Responses are tagged with the active conversation and the
session generation they were requested under; anything that comes back
after either changed is dropped.
"""
from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional

from django.utils import timezone

from .models import ConversationSummary, Message

logger = logging.getLogger(__name__)


class RequestTag(NamedTuple):
    generation: int
    active_conversation_id: Optional[str]


class MessagingState:
    def __init__(self):
        self.conversations: List[ConversationSummary] = []
        self.active_conversation_id: Optional[str] = None
        self.is_loading = False
        self.is_sending = False
        self._generation = 0

    @property
    def messages(self) -> List[Message]:
        conversation = self.active_conversation
        return list(conversation.messages) if conversation else []

    @property
    def active_conversation(self) -> Optional[ConversationSummary]:
        if self.active_conversation_id is None:
            return None
        return self.get(self.active_conversation_id)

    def get(self, conversation_id: str) -> Optional[ConversationSummary]:
        for conversation in self.conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def set_active(self, conversation_id: Optional[str]) -> None:
        self.active_conversation_id = conversation_id

    # ---- stale-response guard ----

    def tag(self) -> RequestTag:
        return RequestTag(self._generation, self.active_conversation_id)

    def is_current(self, tag: RequestTag) -> bool:
        return tag == self.tag()

    # ---- updates ----

    def update_conversations(self, conversations: List[ConversationSummary], tag: Optional[RequestTag] = None) -> bool:
        """Replace the list with a server snapshot. Returns False if ``tag`` is stale."""
        if tag is not None and not self.is_current(tag):
            logger.debug("Discarding stale conversation list (issued for %s)", tag.active_conversation_id)
            return False
        # Snapshots from the server carry no tentative entries.
        self.conversations = list(conversations)
        return True

    def add_message_to_conversation(self, conversation_id: str, message: Message, now=None) -> None:
        now = now or timezone.now()
        self.conversations = [
            c.with_message(message, now) if c.id == conversation_id else c
            for c in self.conversations
        ]

    def update_message_read_status(self, message_id: str, read_at=None) -> None:
        # The active thread view is derived from these same records.
        read_at = read_at or timezone.now()
        self.conversations = [c.with_read(message_id, read_at) for c in self.conversations]

    def clear(self) -> None:
        self.conversations = []
        self.active_conversation_id = None
        self.is_loading = False
        self.is_sending = False
        self._generation += 1
