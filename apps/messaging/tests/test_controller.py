import httpx
import pytest

from apps.messaging.client import MessagingApi, MessagingState, Messenger, SessionStore
from apps.messaging.client.controller import ERROR, SUCCESS
from apps.messaging.models import Message

pytestmark = pytest.mark.django_db


class Notes(list):
    def __call__(self, level, text):
        self.append((level, text))

    def errors(self):
        return [text for level, text in self if level == ERROR]


@pytest.fixture
def messenger_for(wsgi_http, password):
    def _make(user):
        notes = Notes()
        sessions = SessionStore(wsgi_http)
        messenger = Messenger(MessagingApi(wsgi_http, sessions), sessions, notify=notes)
        messenger.sign_in(user.username, password)
        return messenger, notes

    return _make


def test_start_conversation_selects_and_reloads(messenger_for, farmer, laborer):
    messenger, notes = messenger_for(farmer)

    conversation_id = messenger.start_conversation(laborer.pk)

    assert messenger.state.active_conversation_id == conversation_id
    assert [c.id for c in messenger.state.conversations] == [conversation_id]
    assert messenger.state.messages == []
    assert messenger.state.is_loading is False
    assert notes.errors() == []


def test_send_appends_optimistically_then_reload_confirms(messenger_for, farmer, laborer):
    messenger, notes = messenger_for(farmer)
    conversation_id = messenger.start_conversation(laborer.pk)

    sent = messenger.send_message(conversation_id, "Can you start Monday?")

    assert sent is not None
    assert [m.content for m in messenger.state.messages] == ["Can you start Monday?"]
    assert messenger.state.active_conversation.tentative is True
    assert messenger.state.is_sending is False
    assert (SUCCESS, "Message sent successfully") in notes

    assert messenger.load_conversations() is True
    assert messenger.state.active_conversation.tentative is False
    assert [m.id for m in messenger.state.messages] == [sent.id]


def test_blank_send_is_refused_with_a_notice(messenger_for, farmer, laborer):
    messenger, notes = messenger_for(farmer)
    conversation_id = messenger.start_conversation(laborer.pk)

    assert messenger.send_message(conversation_id, "   ") is None
    assert notes.errors() == ["Please enter a message"]
    assert Message.objects.count() == 0


def test_forbidden_send_is_reported(messenger_for, farmer, laborer, other_farmer):
    owner, _ = messenger_for(farmer)
    conversation_id = owner.start_conversation(laborer.pk)

    outsider, notes = messenger_for(other_farmer)
    assert outsider.send_message(conversation_id, "hi") is None
    assert notes.errors() == ["Forbidden"]


def test_unset_role_gets_a_notice(messenger_for, make_user, laborer):
    messenger, notes = messenger_for(make_user("newcomer"))
    assert messenger.start_conversation(laborer.pk) is None
    assert len(notes.errors()) == 1
    assert messenger.state.active_conversation_id is None


def test_opening_a_thread_marks_incoming_messages_read(messenger_for, farmer, laborer):
    farmer_side, _ = messenger_for(farmer)
    conversation_id = farmer_side.start_conversation(laborer.pk)
    farmer_side.send_message(conversation_id, "hello")
    farmer_side.send_message(conversation_id, "are you there?")

    laborer_side, _ = messenger_for(laborer)
    laborer_side.select(conversation_id)
    assert laborer_side.mark_active_as_read() == 2

    assert all(m.is_read for m in laborer_side.state.messages)
    assert not Message.objects.filter(read_at__isnull=True).exists()
    # nothing left to mark
    assert laborer_side.mark_active_as_read() == 0


def test_logout_clears_state(messenger_for, farmer, laborer):
    messenger, _ = messenger_for(farmer)
    messenger.start_conversation(laborer.pk)

    messenger.logout()

    assert messenger.session is None
    assert messenger.state.conversations == []
    assert messenger.state.active_conversation_id is None
    assert messenger.load_conversations() is False


def test_start_without_session_notifies(wsgi_http):
    notes = Notes()
    sessions = SessionStore(wsgi_http)
    messenger = Messenger(MessagingApi(wsgi_http, sessions), sessions, notify=notes)
    assert messenger.start_conversation(2) is None
    assert notes.errors() == ["You must be logged in to start a conversation"]


# ---- stubbed server ---------------------------------------------------------

def stub_messenger(on_messages):
    notes = Notes()
    holder = {}

    def handler(request):
        if request.url.path == "/api/token/":
            return httpx.Response(200, json={"access": "tok"})
        if request.url.path == "/api/v1/accounts/whoami/":
            return httpx.Response(200, json={"is_authenticated": True, "user_id": 1, "role": "farmer"})
        return on_messages(holder["messenger"], request)

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://testserver")
    sessions = SessionStore(http)
    sessions.sign_in("someone", "secret")
    messenger = Messenger(MessagingApi(http, sessions), sessions, notify=notes)
    holder["messenger"] = messenger
    return messenger, notes


CONVERSATION = {
    "id": "c1",
    "farmer_id": 1,
    "laborer_id": 2,
    "created_at": "2026-03-01T09:00:00Z",
    "updated_at": "2026-03-01T09:00:00Z",
    "messages": [],
}


def test_list_arriving_after_selection_changed_is_dropped():
    def respond(messenger, request):
        # the user opens another thread while the list is in flight
        messenger.select("c-other")
        return httpx.Response(200, json={"conversations": [CONVERSATION]})

    messenger, notes = stub_messenger(respond)
    assert messenger.load_conversations() is False
    assert messenger.state.conversations == []
    assert messenger.state.is_loading is False
    assert notes.errors() == []


def test_load_failure_is_reported():
    messenger, notes = stub_messenger(lambda m, r: httpx.Response(500, json={"error": "Internal server error"}))
    assert messenger.load_conversations() is False
    assert notes.errors() == ["Failed to load conversations. Please try again."]
    assert messenger.state.is_loading is False


def test_mark_as_read_failure_is_silent():
    messenger, notes = stub_messenger(lambda m, r: httpx.Response(403, json={"error": "Forbidden"}))
    messenger.mark_as_read("m1")
    assert notes == []


def test_empty_notify_and_state_are_kept(wsgi_http):
    # an empty collector is falsy but still the callback to use
    notes = Notes()
    state = MessagingState()
    sessions = SessionStore(wsgi_http)
    messenger = Messenger(MessagingApi(wsgi_http, sessions), sessions, state=state, notify=notes)
    assert messenger.notify is notes
    assert messenger.state is state


def test_send_without_session_asks_to_sign_in(wsgi_http):
    notes = Notes()
    sessions = SessionStore(wsgi_http)
    messenger = Messenger(MessagingApi(wsgi_http, sessions), sessions, notify=notes)
    assert messenger.send_message("c1", "hello") is None
    assert notes.errors() == ["You must be logged in to send messages"]
    assert Message.objects.count() == 0
