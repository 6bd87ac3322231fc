# apps/messaging/models.py
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class ConversationQuerySet(models.QuerySet):
    def for_user(self, user_id) -> "ConversationQuerySet":
        return self.filter(Q(farmer_id=user_id) | Q(laborer_id=user_id))

    def for_pair(self, farmer_id, laborer_id) -> "ConversationQuerySet":
        return self.filter(farmer_id=farmer_id, laborer_id=laborer_id)


class Conversation(models.Model):
    """
    Two-party thread between the user in the farmer slot and the user in the
    laborer slot. At most one row per (farmer, laborer) pair; rows are never
    deleted. ``updated_at`` is written by the send path, not auto_now, so it
    can match the newest message's ``created_at`` exactly.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    farmer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="farmer_conversations",
    )
    laborer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="laborer_conversations",
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now)

    objects = ConversationQuerySet.as_manager()

    class Meta:
        ordering = ["-updated_at", "id"]
        indexes = [
            models.Index(fields=["farmer", "-updated_at"], name="messaging_c_farmer__5d3a1e_idx"),
            models.Index(fields=["laborer", "-updated_at"], name="messaging_c_laborer_8b2f4c_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                name="uniq_conversation_pair",
                fields=["farmer", "laborer"],
            ),
            models.CheckConstraint(
                name="conversation_not_with_self",
                condition=~Q(farmer=F("laborer")),
            ),
        ]

    def __str__(self) -> str:
        return f"Conversation {self.farmer_id} ↔ {self.laborer_id}"

    def has_participant(self, user_id) -> bool:
        return user_id is not None and user_id in (self.farmer_id, self.laborer_id)


class Message(models.Model):
    TYPE_TEXT = "text"
    TYPE_CHOICES = [
        (TYPE_TEXT, "Text"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sent_messages",
    )
    content = models.TextField()
    message_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_TEXT)
    # null until a participant opens it; set once, never cleared
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["conversation", "created_at"], name="messaging_m_convers_9e1c7a_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                name="message_content_not_empty",
                condition=~Q(content=""),
            ),
        ]

    def __str__(self) -> str:
        preview = self.content[:40]
        return f"{self.sender_id}: {preview}"

    @property
    def is_read(self) -> bool:
        return self.read_at is not None
