# apps/messaging/schemas.py
# Swagger/OpenAPI examples and response shapes for the action endpoint.
from drf_spectacular.utils import OpenApiExample, inline_serializer
from rest_framework import serializers

from .serializers import ConversationSerializer, MessageSerializer

ErrorResponse = inline_serializer(
    name="MessagingError",
    fields={"error": serializers.CharField()},
)

ActionResponse = inline_serializer(
    name="MessagingActionResponse",
    fields={
        "conversations": ConversationSerializer(many=True, required=False),
        "conversation": ConversationSerializer(required=False),
        "message": MessageSerializer(required=False),
        "success": serializers.BooleanField(required=False),
    },
)

GetConversationsExample = OpenApiExample(
    "List my conversations",
    value={"action": "getConversations"},
    request_only=True,
)

CreateConversationExample = OpenApiExample(
    "Start a conversation (caller must occupy the slot matching their role)",
    value={"action": "createConversation", "data": {"farmer_id": 1, "laborer_id": 2}},
    request_only=True,
)

SendMessageExample = OpenApiExample(
    "Send a message",
    value={
        "action": "sendMessage",
        "data": {
            "conversation_id": "7a0b3a52-0f52-4f43-b4c1-0b1d2f1d8e11",
            "content": "Can you start Monday?",
            "message_type": "text",
        },
    },
    request_only=True,
)

MarkAsReadExample = OpenApiExample(
    "Mark a message as read",
    value={"action": "markAsRead", "data": {"message_id": "0c3e8a9d-7d7e-4d1b-9a55-3c8f0b6f2a40"}},
    request_only=True,
)
