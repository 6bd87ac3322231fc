# apps/messaging/client/controller.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from .api import MessagingApi
from .errors import InvalidRole, MessagingError
from .models import Message
from .session import Session, SessionStore
from .state import MessagingState

logger = logging.getLogger(__name__)

ERROR = "error"
SUCCESS = "success"

Notify = Callable[[str, str], None]


def _log_notification(level: str, text: str) -> None:
    logger.log(logging.WARNING if level == ERROR else logging.INFO, "%s", text)


class Messenger:
    """
    Turns user intents into client API calls and keeps ``state`` in step.
    Failures become transient notifications through ``notify(level, text)``;
    nothing here raises to the caller except sign-in errors.
    """

    def __init__(
        self,
        api: MessagingApi,
        sessions: SessionStore,
        state: Optional[MessagingState] = None,
        notify: Optional[Notify] = None,
    ):
        self.api = api
        self.sessions = sessions
        self.state = state if state is not None else MessagingState()
        self.notify = notify if notify is not None else _log_notification

    @property
    def session(self) -> Optional[Session]:
        return self.sessions.get_current_session()

    # ---- session ----

    def sign_in(self, username: str, password: str) -> Session:
        self.state.clear()
        session = self.sessions.sign_in(username, password)
        self.load_conversations()
        return session

    def logout(self) -> None:
        self.sessions.sign_out()
        self.state.clear()

    # ---- intents ----

    def select(self, conversation_id: Optional[str]) -> None:
        self.state.set_active(conversation_id)

    def start_conversation(self, target_user_id: int) -> Optional[str]:
        if self.session is None:
            self.notify(ERROR, "You must be logged in to start a conversation")
            return None

        self.state.is_loading = True
        try:
            conversation_id = self.api.start_conversation(target_user_id)
        except InvalidRole:
            self.notify(ERROR, "Finish your profile (pick farmer or laborer) before messaging")
            return None
        except MessagingError as e:
            logger.info("Error creating conversation: %s", e.message)
            self.notify(ERROR, e.message or "Failed to create conversation")
            return None
        finally:
            self.state.is_loading = False

        self.state.set_active(conversation_id)
        self.load_conversations()
        return conversation_id

    def send_message(self, conversation_id: str, content: str) -> Optional[Message]:
        if self.session is None:
            self.notify(ERROR, "You must be logged in to send messages")
            return None
        if not (content or "").strip():
            self.notify(ERROR, "Please enter a message")
            return None

        self.state.is_sending = True
        try:
            message = self.api.send_message(conversation_id, content)
        except MessagingError as e:
            logger.info("Error sending message: %s", e.message)
            self.notify(ERROR, e.message or "Failed to send message")
            return None
        finally:
            self.state.is_sending = False

        # Tentative until the next reload replaces it.
        self.state.add_message_to_conversation(conversation_id, message)
        self.notify(SUCCESS, "Message sent successfully")
        return message

    def load_conversations(self) -> bool:
        if self.session is None:
            return False

        tag = self.state.tag()
        self.state.is_loading = True
        try:
            conversations = self.api.load_conversations()
        except MessagingError as e:
            logger.info("Error loading conversations: %s", e.message)
            self.notify(ERROR, "Failed to load conversations. Please try again.")
            return False
        finally:
            self.state.is_loading = False

        return self.state.update_conversations(conversations, tag)

    def mark_as_read(self, message_id: str) -> None:
        if self.session is None:
            return
        if self.api.mark_as_read(message_id):
            self.state.update_message_read_status(message_id)

    def mark_active_as_read(self) -> int:
        """Mark every unread message from the other participant in the open thread."""
        session = self.session
        if session is None:
            return 0
        unread = [m.id for m in self.state.messages if m.sender_id != session.user_id and not m.is_read]
        for message_id in unread:
            self.mark_as_read(message_id)
        return len(unread)
