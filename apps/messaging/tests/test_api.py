from unittest import mock

import pytest
from django.urls import reverse

from apps.messaging.models import Conversation, Message

pytestmark = pytest.mark.django_db

URL = reverse("messaging_api:actions")


def post(client, action, data=None):
    body = {"action": action}
    if data is not None:
        body["data"] = data
    return client.post(URL, body, format="json")


def test_missing_token_is_unauthenticated(api_client_for):
    res = post(api_client_for(), "getConversations")
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthenticated"}


def test_garbage_token_gets_the_same_answer(api_client_for):
    client = api_client_for()
    client.credentials(HTTP_AUTHORIZATION="Bearer not.a.jwt")
    res = post(client, "getConversations")
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthenticated"}


def test_unknown_action(api_client_for, farmer):
    res = post(api_client_for(farmer), "deleteEverything")
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid action"}


def test_missing_action_is_bad_request(api_client_for, farmer):
    res = api_client_for(farmer).post(URL, {"data": {}}, format="json")
    assert res.status_code == 400
    assert set(res.json()) == {"error"}


def test_null_data_is_treated_as_empty(api_client_for, farmer):
    res = api_client_for(farmer).post(URL, {"action": "getConversations", "data": None}, format="json")
    assert res.status_code == 200, res.content
    assert res.json() == {"conversations": []}


def test_get_is_not_allowed(api_client_for, farmer):
    res = api_client_for(farmer).get(URL)
    assert res.status_code == 405
    assert "error" in res.json()


def test_unexpected_failure_is_generic_500(api_client_for, farmer):
    with mock.patch("apps.messaging.services.get_conversations", side_effect=RuntimeError("db password is hunter2")):
        res = post(api_client_for(farmer), "getConversations")
    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error"}


def test_forbidden_does_not_say_why(api_client_for, farmer, laborer):
    # farmer asking for the laborer slot
    res = post(api_client_for(farmer), "createConversation", {"farmer_id": laborer.pk, "laborer_id": farmer.pk})
    assert res.status_code == 403
    assert res.json() == {"error": "Forbidden"}


def test_non_integer_ids_are_bad_request(api_client_for, farmer):
    res = post(api_client_for(farmer), "createConversation", {"farmer_id": "abc", "laborer_id": 2})
    assert res.status_code == 400
    assert "farmer_id" in res.json()["error"]


# ---- end-to-end scenarios ---------------------------------------------------

@pytest.fixture
def c1(api_client_for, farmer, laborer):
    res = post(api_client_for(farmer), "createConversation", {"farmer_id": farmer.pk, "laborer_id": laborer.pk})
    assert res.status_code == 200, res.content
    return res.json()["conversation"]["id"]


def test_scenario_both_sides_get_the_same_conversation(api_client_for, farmer, laborer, c1):
    res = post(api_client_for(laborer), "createConversation", {"farmer_id": farmer.pk, "laborer_id": laborer.pk})
    assert res.status_code == 200
    conversation = res.json()["conversation"]
    assert conversation["id"] == c1
    assert conversation["farmer_profile"] == {"id": farmer.pk, "full_name": "Fiona Field", "role": "farmer"}
    assert conversation["laborer_profile"]["full_name"] == "Luis Lopez"
    assert conversation["messages"] == []
    assert Conversation.objects.count() == 1


def test_scenario_message_shows_up_for_the_other_side(api_client_for, farmer, laborer, c1):
    res = post(api_client_for(farmer), "sendMessage", {"conversation_id": c1, "content": "Can you start Monday?"})
    assert res.status_code == 200, res.content
    message = res.json()["message"]
    assert message["sender_id"] == farmer.pk
    assert message["conversation_id"] == c1
    assert message["read_at"] is None

    res = post(api_client_for(laborer), "getConversations")
    conversations = res.json()["conversations"]
    assert [c["id"] for c in conversations] == [c1]
    assert conversations[0]["messages"][-1]["content"] == "Can you start Monday?"
    assert conversations[0]["updated_at"] == message["created_at"]


def test_scenario_outsider_cannot_post(api_client_for, other_farmer, c1):
    res = post(api_client_for(other_farmer), "sendMessage", {"conversation_id": c1, "content": "hi"})
    assert res.status_code == 403
    assert res.json() == {"error": "Forbidden"}
    assert Message.objects.filter(conversation_id=c1).count() == 0


def test_scenario_whitespace_message_rejected(api_client_for, laborer, c1):
    res = post(api_client_for(laborer), "sendMessage", {"conversation_id": c1, "content": "   "})
    assert res.status_code == 400
    assert "error" in res.json()
    assert Message.objects.count() == 0


def test_mark_as_read_answers_success(api_client_for, farmer, laborer, c1):
    sent = post(api_client_for(farmer), "sendMessage", {"conversation_id": c1, "content": "hello"}).json()["message"]

    res = post(api_client_for(laborer), "markAsRead", {"message_id": sent["id"]})
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert Message.objects.get(pk=sent["id"]).read_at is not None

    # second call is a no-op but still succeeds
    assert post(api_client_for(laborer), "markAsRead", {"message_id": sent["id"]}).json() == {"success": True}


def test_unknown_conversation_is_not_found(api_client_for, farmer):
    res = post(
        api_client_for(farmer),
        "sendMessage",
        {"conversation_id": "5f0c6a9e-0000-4000-8000-000000000000", "content": "hello"},
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Conversation not found"}
