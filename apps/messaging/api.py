# apps/messaging/api.py
from __future__ import annotations

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import extend_schema

from . import services
from .errors import BadRequest, messaging_exception_handler
from .schemas import (
    ActionResponse,
    CreateConversationExample,
    ErrorResponse,
    GetConversationsExample,
    MarkAsReadExample,
    SendMessageExample,
)
from .serializers import (
    ActionRequestSerializer,
    ConversationSerializer,
    CreateConversationSerializer,
    MarkAsReadSerializer,
    MessageSerializer,
    SendMessageSerializer,
)


@extend_schema(
    summary="Messaging actions",
    description=(
        "Single bearer-authenticated endpoint for conversations and messages. "
        "Body is `{action, data}`; actions: `getConversations`, `createConversation`, "
        "`sendMessage`, `markAsRead`. Errors always come back as `{error}`."
    ),
    request=ActionRequestSerializer,
    examples=[GetConversationsExample, CreateConversationExample, SendMessageExample, MarkAsReadExample],
    responses={
        200: ActionResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        403: ErrorResponse,
        404: ErrorResponse,
        500: ErrorResponse,
    },
)
class MessagingActionView(APIView):
    """
    I authenticate the bearer token myself on every call (no session auth,
    no CSRF) and dispatch to the messaging services.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    actions = {
        "getConversations": "get_conversations",
        "createConversation": "create_conversation",
        "sendMessage": "send_message",
        "markAsRead": "mark_as_read",
    }

    def get_exception_handler(self):
        return messaging_exception_handler

    def post(self, request):
        user = services.authenticate(request)

        envelope = ActionRequestSerializer(data=request.data)
        envelope.is_valid(raise_exception=True)
        handler_name = self.actions.get(envelope.validated_data["action"])
        if handler_name is None:
            raise BadRequest("Invalid action")

        handler = getattr(self, handler_name)
        return handler(request, user, envelope.validated_data.get("data") or {})

    # ---- actions ----

    def get_conversations(self, request, user, data):
        conversations = services.get_conversations(user)
        return Response({"conversations": ConversationSerializer(conversations, many=True).data})

    def create_conversation(self, request, user, data):
        ser = CreateConversationSerializer(data=data)
        ser.is_valid(raise_exception=True)
        conversation, _created = services.create_conversation(
            user,
            ser.validated_data.get("farmer_id"),
            ser.validated_data.get("laborer_id"),
            request=request,
        )
        return Response({"conversation": ConversationSerializer(conversation).data})

    def send_message(self, request, user, data):
        ser = SendMessageSerializer(data=data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        message = services.send_message(
            user,
            vd.get("conversation_id"),
            vd.get("content"),
            vd.get("message_type"),
            request=request,
        )
        return Response({"message": MessageSerializer(message).data})

    def mark_as_read(self, request, user, data):
        ser = MarkAsReadSerializer(data=data)
        ser.is_valid(raise_exception=True)
        services.mark_as_read(user, ser.validated_data.get("message_id"), request=request)
        return Response({"success": True})
