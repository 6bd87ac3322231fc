# apps/messaging/serializers.py
from __future__ import annotations

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import serializers

from .models import Conversation, Message


class MessageSerializer(serializers.ModelSerializer):
    conversation_id = serializers.UUIDField(read_only=True)
    sender_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sender_id",
            "content",
            "message_type",
            "read_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ConversationSerializer(serializers.ModelSerializer):
    farmer_id = serializers.IntegerField(read_only=True)
    laborer_id = serializers.IntegerField(read_only=True)
    messages = MessageSerializer(many=True, read_only=True)
    farmer_profile = serializers.SerializerMethodField()
    laborer_profile = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = [
            "id",
            "farmer_id",
            "laborer_id",
            "created_at",
            "updated_at",
            "messages",
            "farmer_profile",
            "laborer_profile",
        ]
        read_only_fields = fields

    @staticmethod
    def _participant(user, slot_role: str):
        # Users without a profile still show up, labelled by their slot.
        try:
            profile = user.profile
        except ObjectDoesNotExist:
            profile = None
        return {
            "id": user.pk,
            "full_name": profile.display_name if profile else str(user),
            "role": (profile.role if profile and profile.role else slot_role),
        }

    def get_farmer_profile(self, obj: Conversation):
        return self._participant(obj.farmer, "farmer")

    def get_laborer_profile(self, obj: Conversation):
        return self._participant(obj.laborer, "laborer")


# ---- request bodies --------------------------------------------------------

class ActionRequestSerializer(serializers.Serializer):
    action = serializers.CharField()
    data = serializers.DictField(required=False, allow_null=True, default=dict)


class CreateConversationSerializer(serializers.Serializer):
    # Presence is checked by the service so the error order stays fixed.
    farmer_id = serializers.IntegerField(required=False, allow_null=True)
    laborer_id = serializers.IntegerField(required=False, allow_null=True)


class SendMessageSerializer(serializers.Serializer):
    conversation_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    content = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)
    message_type = serializers.CharField(required=False, allow_blank=True, default=Message.TYPE_TEXT)


class MarkAsReadSerializer(serializers.Serializer):
    message_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
