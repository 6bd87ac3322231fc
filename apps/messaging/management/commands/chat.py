# apps/messaging/management/commands/chat.py
import getpass

import httpx
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.messaging.client import MessagingApi, Messenger, SessionStore
from apps.messaging.client.controller import ERROR
from apps.messaging.client.errors import MessagingError
from apps.messaging.client.ui import ChatView, ConversationListView

HELP_TEXT = """\
Commands:
  list              show conversations (most recent first)
  open <n>          open conversation number n from the list
  new <user_id>     start (or reopen) a conversation with a user
  send <text>       send a message in the open conversation
  refresh           reload conversations from the server
  help              show this help
  quit              sign out and exit
Anything else is sent as a message to the open conversation."""


class Command(BaseCommand):
    help = "Interactive terminal chat against the messaging API."

    def add_arguments(self, parser):
        parser.add_argument(
            "--base-url",
            default=getattr(settings, "MESSAGING_API_BASE_URL", "http://127.0.0.1:8000"),
            help="Root URL of the API server",
        )
        parser.add_argument("--username", help="Account to sign in with")
        parser.add_argument("--password", help="Password (prompted if omitted)")
        parser.add_argument("--timeout", type=float, default=15.0, help="HTTP timeout in seconds")

    def handle(self, *args, **opts):
        username = opts["username"] or input("Username: ").strip()
        password = opts["password"] or getpass.getpass("Password: ")

        with httpx.Client(base_url=opts["base_url"], timeout=opts["timeout"]) as http:
            sessions = SessionStore(http)
            messenger = Messenger(MessagingApi(http, sessions), sessions, notify=self._notify)
            try:
                session = messenger.sign_in(username, password)
            except MessagingError as e:
                raise CommandError(f"Sign-in failed: {e.message}")

            self.stdout.write(self.style.SUCCESS(
                f"Signed in as {session.display_name or session.username} ({session.role or 'no role'})"
            ))
            self.conversations = ConversationListView(messenger.state, session.user_id)
            self.chat = ChatView(messenger.state, session.user_id)
            self.stdout.write(self.conversations.render())
            self.stdout.write(HELP_TEXT)

            try:
                self._loop(messenger)
            finally:
                messenger.logout()
                self.stdout.write("Signed out.")

    def _notify(self, level, text):
        style = self.style.ERROR if level == ERROR else self.style.SUCCESS
        self.stdout.write(style(text))

    def _show_chat(self, messenger):
        self.stdout.write(self.chat.render())
        messenger.mark_active_as_read()

    def _loop(self, messenger):
        while True:
            try:
                line = input("> ").strip()
            except (EOFError, KeyboardInterrupt):
                self.stdout.write("")
                return
            if not line:
                continue

            command, _, arg = line.partition(" ")
            arg = arg.strip()

            if command in ("quit", "exit"):
                return
            elif command == "help":
                self.stdout.write(HELP_TEXT)
            elif command == "list":
                self.stdout.write(self.conversations.render())
            elif command == "refresh":
                messenger.load_conversations()
                self.stdout.write(self.conversations.render())
            elif command == "open":
                conversation = self.conversations.conversation_at(int(arg)) if arg.isdigit() else None
                if conversation is None:
                    self.stdout.write(self.style.ERROR("No such conversation"))
                    continue
                messenger.select(conversation.id)
                self._show_chat(messenger)
            elif command == "new":
                if not arg.isdigit():
                    self.stdout.write(self.style.ERROR("Usage: new <user_id>"))
                    continue
                if messenger.start_conversation(int(arg)):
                    self._show_chat(messenger)
            else:
                text = arg if command == "send" else line
                conversation_id = messenger.state.active_conversation_id
                if conversation_id is None:
                    self.stdout.write(self.style.ERROR("Open a conversation first"))
                    continue
                if not self.chat.can_send(text):
                    self.stdout.write(self.style.ERROR("Please enter a message"))
                    continue
                if messenger.send_message(conversation_id, text):
                    # Replace the optimistic entry with the server's view.
                    messenger.load_conversations()
                    self.stdout.write(self.chat.render())
