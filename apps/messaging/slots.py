# apps/messaging/slots.py
"""
Slot assignment for two-party conversations.

A conversation has one farmer slot and one laborer slot. Which user lands in
which slot depends only on the initiating user's role, so both participants
compute the same pair no matter who starts the chat.
"""
from __future__ import annotations

from typing import NamedTuple, Optional

FARMER = "farmer"
LABORER = "laborer"


class InvalidRole(ValueError):
    """The user's role is unset or not one of farmer/laborer."""


class Slots(NamedTuple):
    farmer_slot_id: int
    laborer_slot_id: int


def resolve_slots(current_user_id: int, current_user_role: Optional[str], other_user_id: int) -> Slots:
    if current_user_role == FARMER:
        return Slots(farmer_slot_id=current_user_id, laborer_slot_id=other_user_id)
    if current_user_role == LABORER:
        return Slots(farmer_slot_id=other_user_id, laborer_slot_id=current_user_id)
    raise InvalidRole(f"Cannot assign conversation slots for role {current_user_role!r}")
