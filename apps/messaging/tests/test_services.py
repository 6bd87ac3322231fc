import uuid
from unittest import mock

import pytest

from apps.accounts.models import Profile
from apps.audit.models import AuditEvent
from apps.messaging import services
from apps.messaging.errors import BadRequest, Conflict, Forbidden, NotFound, RoleMismatch
from apps.messaging.models import Conversation, Message

pytestmark = pytest.mark.django_db


# ---- createConversation -----------------------------------------------------

def test_create_conversation_is_idempotent_from_either_side(farmer, laborer):
    first, created_first = services.create_conversation(farmer, farmer.pk, laborer.pk)
    second, created_second = services.create_conversation(laborer, farmer.pk, laborer.pk)

    assert created_first is True
    assert created_second is False
    assert first.pk == second.pk
    assert Conversation.objects.count() == 1
    assert first.created_at == first.updated_at
    assert AuditEvent.objects.filter(action="conv.create").count() == 1


def test_create_conversation_race_falls_back_to_existing_row(farmer, laborer):
    existing = Conversation.objects.create(farmer=farmer, laborer=laborer)
    real_find = services._find_conversation
    calls = []

    def find_misses_first_time(farmer_id, laborer_id):
        # the pre-check runs before the concurrent insert lands
        calls.append((farmer_id, laborer_id))
        return None if len(calls) == 1 else real_find(farmer_id, laborer_id)

    with mock.patch.object(services, "_find_conversation", side_effect=find_misses_first_time):
        conversation, created = services.create_conversation(farmer, farmer.pk, laborer.pk)

    assert created is False
    assert conversation.pk == existing.pk
    assert Conversation.objects.count() == 1


def test_create_conversation_conflict_when_refetch_also_fails(farmer, laborer):
    Conversation.objects.create(farmer=farmer, laborer=laborer)
    with mock.patch.object(services, "_find_conversation", return_value=None):
        with pytest.raises(Conflict):
            services.create_conversation(farmer, farmer.pk, laborer.pk)


@pytest.mark.parametrize("farmer_id,laborer_id", [(None, 1), (1, None), (None, None)])
def test_create_conversation_requires_both_ids(farmer, farmer_id, laborer_id):
    with pytest.raises(BadRequest):
        services.create_conversation(farmer, farmer_id, laborer_id)


def test_create_conversation_rejects_self(farmer):
    with pytest.raises(BadRequest):
        services.create_conversation(farmer, farmer.pk, farmer.pk)


def test_create_conversation_caller_must_be_a_participant(farmer, laborer, other_farmer):
    with pytest.raises(Forbidden):
        services.create_conversation(other_farmer, farmer.pk, laborer.pk)
    assert not Conversation.objects.exists()


def test_create_conversation_without_profile_is_not_found(farmer, laborer):
    Profile.objects.filter(user=farmer).delete()
    with pytest.raises(NotFound):
        services.create_conversation(farmer, farmer.pk, laborer.pk)


def test_create_conversation_role_must_match_slot(farmer, laborer):
    # a farmer trying to sit in the laborer slot
    with pytest.raises(RoleMismatch):
        services.create_conversation(farmer, laborer.pk, farmer.pk)
    assert not Conversation.objects.exists()


def test_create_conversation_with_unset_role_is_role_mismatch(make_user, laborer):
    newcomer = make_user("newcomer")
    with pytest.raises(RoleMismatch):
        services.create_conversation(newcomer, newcomer.pk, laborer.pk)


def test_create_conversation_other_user_must_exist(farmer):
    with pytest.raises(NotFound):
        services.create_conversation(farmer, farmer.pk, 999999)


def test_counterparty_role_is_not_checked(farmer, other_farmer):
    conversation, created = services.create_conversation(farmer, farmer.pk, other_farmer.pk)
    assert created is True
    assert conversation.laborer_id == other_farmer.pk


# ---- sendMessage ------------------------------------------------------------

@pytest.fixture
def conversation(farmer, laborer):
    conv, _ = services.create_conversation(farmer, farmer.pk, laborer.pk)
    return conv


def test_send_message_bumps_conversation_to_message_time(farmer, conversation):
    message = services.send_message(farmer, conversation.pk, "  Can you start Monday?  ")

    conversation.refresh_from_db()
    assert message.content == "Can you start Monday?"
    assert message.sender_id == farmer.pk
    assert message.read_at is None
    assert message.message_type == Message.TYPE_TEXT
    assert conversation.updated_at == message.created_at
    assert AuditEvent.objects.filter(action="msg.send", object_id=str(message.pk)).exists()


def test_most_recent_conversation_is_listed_first(farmer, laborer, make_user):
    second_laborer = make_user("laborer2", "laborer")
    older, _ = services.create_conversation(farmer, farmer.pk, laborer.pk)
    newer, _ = services.create_conversation(farmer, farmer.pk, second_laborer.pk)

    services.send_message(farmer, newer.pk, "first")
    services.send_message(farmer, older.pk, "second")

    ids = [c.pk for c in services.get_conversations(farmer)]
    assert ids == [older.pk, newer.pk]
    # the laborer only sees their own conversation
    assert [c.pk for c in services.get_conversations(laborer)] == [older.pk]


def test_send_message_non_participant_is_forbidden(other_farmer, conversation):
    with pytest.raises(Forbidden):
        services.send_message(other_farmer, conversation.pk, "hi")
    assert conversation.messages.count() == 0


@pytest.mark.parametrize("content", ["", "   ", "\n\t", None])
def test_send_message_blank_content_fails_before_store_access(
    farmer, conversation, content, django_assert_num_queries
):
    with django_assert_num_queries(0):
        with pytest.raises(BadRequest):
            services.send_message(farmer, conversation.pk, content)


def test_send_message_missing_conversation_id(farmer):
    with pytest.raises(BadRequest):
        services.send_message(farmer, None, "hello")


def test_send_message_too_long(farmer, conversation, settings):
    settings.MESSAGE_MAX_LENGTH = 10
    with pytest.raises(BadRequest):
        services.send_message(farmer, conversation.pk, "x" * 11)
    assert services.send_message(farmer, conversation.pk, "x" * 10).content == "x" * 10


def test_send_message_unknown_type(farmer, conversation):
    with pytest.raises(BadRequest):
        services.send_message(farmer, conversation.pk, "hello", "image")


def test_send_message_malformed_and_unknown_ids(farmer):
    with pytest.raises(BadRequest):
        services.send_message(farmer, "not-a-uuid", "hello")
    with pytest.raises(NotFound):
        services.send_message(farmer, uuid.uuid4(), "hello")


# ---- markAsRead -------------------------------------------------------------

def test_mark_as_read_is_monotonic(farmer, laborer, conversation):
    message = services.send_message(farmer, conversation.pk, "hello")

    assert services.mark_as_read(laborer, message.pk) is True
    message.refresh_from_db()
    first_read_at = message.read_at
    assert first_read_at is not None

    assert services.mark_as_read(laborer, str(message.pk)) is False
    message.refresh_from_db()
    assert message.read_at == first_read_at
    assert AuditEvent.objects.filter(action="msg.read").count() == 1


def test_mark_as_read_checks_membership(farmer, other_farmer, conversation):
    message = services.send_message(farmer, conversation.pk, "hello")
    with pytest.raises(Forbidden):
        services.mark_as_read(other_farmer, message.pk)
    message.refresh_from_db()
    assert message.read_at is None


def test_mark_as_read_unknown_message(farmer):
    with pytest.raises(NotFound):
        services.mark_as_read(farmer, uuid.uuid4())
    with pytest.raises(BadRequest):
        services.mark_as_read(farmer, "")
