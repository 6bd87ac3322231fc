# apps/messaging/services.py
"""
Server-side checks and writes for conversations and messages.

Every function takes the authenticated user explicitly; identity, role and
slot membership are re-derived from the database on each call and nothing
the client puts in the request body is trusted for authorization.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Prefetch
from django.utils import timezone

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken

from apps.accounts.models import Profile
from apps.audit.utils import log_event

from .errors import BadRequest, Conflict, Forbidden, NotFound, RoleMismatch, Unauthenticated
from .models import Conversation, Message
from .slots import InvalidRole, Slots, resolve_slots

logger = logging.getLogger(__name__)

MESSAGE_TYPES = {choice for choice, _label in Message.TYPE_CHOICES}


def _max_length() -> int:
    return int(getattr(settings, "MESSAGE_MAX_LENGTH", 5000))


def _as_uuid(value, label: str) -> uuid.UUID:
    if value in (None, ""):
        raise BadRequest(f"{label} is required")
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise BadRequest(f"Invalid {label}")


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def authenticate(request):
    """Resolve the bearer token on ``request`` to an active user, or raise Unauthenticated."""
    try:
        result = JWTAuthentication().authenticate(request)
    except (InvalidToken, AuthenticationFailed) as e:
        logger.info("Rejected bearer token (%s)", e.__class__.__name__)
        raise Unauthenticated()
    if result is None:
        raise Unauthenticated()
    user, _token = result
    return user


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def conversations_queryset():
    return Conversation.objects.select_related(
        "farmer__profile", "laborer__profile"
    ).prefetch_related(
        Prefetch("messages", queryset=Message.objects.order_by("created_at", "id"))
    )


def get_conversations(user) -> List[Conversation]:
    """The caller's conversations, most recently active first."""
    return list(
        conversations_queryset()
        .for_user(user.pk)
        .order_by("-updated_at", "-created_at", "id")
    )


def _find_conversation(farmer_id, laborer_id) -> Optional[Conversation]:
    return conversations_queryset().for_pair(farmer_id, laborer_id).first()


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def create_conversation(user, farmer_id, laborer_id, *, request=None) -> Tuple[Conversation, bool]:
    """
    Return the conversation for (farmer_id, laborer_id), creating it if needed.
    The boolean is True only when this call inserted the row.
    """
    if not farmer_id or not laborer_id:
        raise BadRequest("farmer_id and laborer_id are required")
    if farmer_id == laborer_id:
        raise BadRequest("A conversation needs two different participants")

    if user.pk not in (farmer_id, laborer_id):
        raise Forbidden(f"user {user.pk} is not a participant of ({farmer_id}, {laborer_id})")

    profile = Profile.objects.filter(user_id=user.pk).only("role").first()
    if profile is None:
        raise NotFound("Profile not found")

    other_id = laborer_id if user.pk == farmer_id else farmer_id
    try:
        expected = resolve_slots(user.pk, profile.role, other_id)
    except InvalidRole:
        raise RoleMismatch(f"user {user.pk} has no usable role ({profile.role!r})")
    if expected != Slots(farmer_id, laborer_id):
        raise RoleMismatch(f"user {user.pk} with role {profile.role} cannot hold that slot")

    if not get_user_model().objects.filter(pk=other_id, is_active=True).exists():
        raise NotFound("User not found")

    existing = _find_conversation(farmer_id, laborer_id)
    if existing is not None:
        return existing, False

    now = timezone.now()
    try:
        with transaction.atomic():
            conversation = Conversation.objects.create(
                farmer_id=farmer_id,
                laborer_id=laborer_id,
                created_at=now,
                updated_at=now,
            )
    except IntegrityError:
        # Lost a race with a concurrent create for the same pair.
        logger.info("Conversation (%s, %s) created concurrently; using existing row", farmer_id, laborer_id)
        existing = _find_conversation(farmer_id, laborer_id)
        if existing is None:
            raise Conflict()
        return existing, False

    log_event(request, "conv.create", "Conversation", conversation.pk, actor=user)
    logger.debug("Created conversation %s", conversation.pk)
    return _find_conversation(farmer_id, laborer_id) or conversation, True


def send_message(user, conversation_id, content, message_type: str = Message.TYPE_TEXT, *, request=None) -> Message:
    text = content.strip() if isinstance(content, str) else ""
    if not conversation_id or not text:
        raise BadRequest("conversation_id and content are required")
    if len(text) > _max_length():
        raise BadRequest(f"Message too long (max {_max_length()} characters)")
    message_type = message_type or Message.TYPE_TEXT
    if message_type not in MESSAGE_TYPES:
        raise BadRequest("Unsupported message type")
    conversation_pk = _as_uuid(conversation_id, "conversation_id")

    with transaction.atomic():
        # Row lock serializes sends on one conversation so updated_at tracks the newest insert.
        conversation = Conversation.objects.select_for_update().filter(pk=conversation_pk).first()
        if conversation is None:
            raise NotFound("Conversation not found")
        if not conversation.has_participant(user.pk):
            raise Forbidden(f"user {user.pk} is not a participant of conversation {conversation.pk}")

        now = timezone.now()
        message = Message.objects.create(
            conversation=conversation,
            sender=user,
            content=text,
            message_type=message_type,
            created_at=now,
        )
        Conversation.objects.filter(pk=conversation.pk).update(updated_at=now)

    log_event(request, "msg.send", "Message", message.pk, actor=user)
    return message


def mark_as_read(user, message_id, *, request=None) -> bool:
    """Stamp ``read_at`` once. Returns False when the message was already read."""
    message_pk = _as_uuid(message_id, "message_id")

    message = Message.objects.select_related("conversation").filter(pk=message_pk).first()
    if message is None:
        raise NotFound("Message not found")
    if not message.conversation.has_participant(user.pk):
        raise Forbidden(f"user {user.pk} cannot read message {message.pk}")

    now = timezone.now()
    updated = Message.objects.filter(pk=message.pk, read_at__isnull=True).update(read_at=now, updated_at=now)
    if updated:
        log_event(request, "msg.read", "Message", message.pk, actor=user)
    return bool(updated)
