import pytest

from apps.messaging.slots import InvalidRole, Slots, resolve_slots


def test_farmer_takes_farmer_slot():
    assert resolve_slots(1, "farmer", 2) == Slots(farmer_slot_id=1, laborer_slot_id=2)


def test_laborer_takes_laborer_slot():
    assert resolve_slots(2, "laborer", 1) == Slots(farmer_slot_id=1, laborer_slot_id=2)


@pytest.mark.parametrize("farmer_id,laborer_id", [(1, 2), (7, 3), (100, 99)])
def test_both_sides_agree_on_the_pair(farmer_id, laborer_id):
    from_farmer = resolve_slots(farmer_id, "farmer", laborer_id)
    from_laborer = resolve_slots(laborer_id, "laborer", farmer_id)
    assert from_farmer == from_laborer


@pytest.mark.parametrize("role", [None, "", "admin", "Farmer"])
def test_unknown_role_is_a_hard_stop(role):
    with pytest.raises(InvalidRole):
        resolve_slots(1, role, 2)
