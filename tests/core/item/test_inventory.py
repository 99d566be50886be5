"""Inventory 엔진 테스트: 겹치기, 제거, 이동, 사용, 장비, 스냅샷"""

from __future__ import annotations

from typing import Optional

import pytest

from src.core.item.inventory import AddResult, Inventory, SlotIndexError
from src.core.item.models import (
    EquipmentSlot,
    InventoryItem,
    ItemAction,
    ItemDefinition,
    ItemType,
)


def _item(
    item_id: str,
    item_type: ItemType = ItemType.MISC,
    default_action: ItemAction = ItemAction.USE,
    max_stack: Optional[int] = None,
) -> ItemDefinition:
    return ItemDefinition(
        id=item_id,
        name=item_id.title(),
        description=f"{item_id} description",
        type=item_type,
        icon="*",
        default_action=default_action,
        available_actions=(default_action, ItemAction.DROP),
        max_stack=max_stack,
    )


POTION = _item("potion", ItemType.CONSUMABLE, ItemAction.DRINK, max_stack=3)
BREAD = _item("bread", ItemType.CONSUMABLE, ItemAction.EAT, max_stack=5)
SWORD = _item("sword", ItemType.WEAPON, ItemAction.EQUIP)
AXE = _item("axe", ItemType.WEAPON, ItemAction.EQUIP)
ARMOR = _item("armor", ItemType.ARMOR, ItemAction.EQUIP)
TORCH = _item("torch")
KEY = _item("key", default_action=ItemAction.EXAMINE)

DEFINITIONS = {d.id: d for d in (POTION, BREAD, SWORD, AXE, ARMOR, TORCH, KEY)}


def _units(inv: Inventory) -> list[Optional[int]]:
    return [s.units if s is not None else None for s in inv.slots]


# ── 생성/조회 ─────────────────────────────────────────────────


class TestInventoryBasics:
    def test_default_size(self) -> None:
        inv = Inventory()
        assert inv.size == 20
        assert inv.free_slots() == 20
        assert all(s is None for s in inv.slots)

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            Inventory(0, 5)

    def test_out_of_range_slot(self) -> None:
        inv = Inventory(2, 2)
        with pytest.raises(SlotIndexError):
            inv.get_slot(4)
        with pytest.raises(SlotIndexError):
            inv.get_slot(-1)

    def test_slot_index_error_is_index_error(self) -> None:
        assert issubclass(SlotIndexError, IndexError)

    def test_slots_is_copy(self) -> None:
        inv = Inventory(2, 2)
        inv.slots[0] = InventoryItem(TORCH)
        assert inv.get_slot(0) is None


# ── 추가 ──────────────────────────────────────────────────────


class TestAddItem:
    def test_stack_fills_existing_first(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(POTION, 2)
        result = inv.add_item(POTION, 2)
        assert result == AddResult(added=2, dropped=0)
        assert _units(inv) == [3, 1, None, None]

    def test_stack_splits_by_max(self) -> None:
        inv = Inventory(2, 2)
        result = inv.add_item(POTION, 7)
        assert result.complete
        assert _units(inv) == [3, 3, 1, None]
        assert inv.count_item("potion") == 7

    def test_non_stackable_one_per_slot(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(SWORD, 2)
        assert [s.id if s else None for s in inv.slots] == ["sword", "sword", None, None]
        assert inv.get_slot(0).quantity is None

    def test_overflow_reported(self) -> None:
        inv = Inventory(1, 2)
        result = inv.add_item(POTION, 8)
        assert result.added == 6
        assert result.dropped == 2
        assert not result.complete
        assert inv.count_item("potion") == 6

    def test_full_inventory_drops_all(self) -> None:
        inv = Inventory(1, 1)
        inv.add_item(TORCH)
        result = inv.add_item(SWORD)
        assert result == AddResult(added=0, dropped=1)

    def test_zero_quantity_noop(self) -> None:
        inv = Inventory(2, 2)
        assert inv.add_item(POTION, 0) == AddResult(0, 0)
        assert inv.free_slots() == 4

    def test_stack_conservation(self) -> None:
        """넣은 수량 = 보유 증가분 + dropped"""
        inv = Inventory(2, 2)
        inv.add_item(TORCH)
        before = inv.count_item("bread")
        result = inv.add_item(BREAD, 17)
        assert inv.count_item("bread") - before + result.dropped == 17


# ── 제거/이동/버리기 ──────────────────────────────────────────


class TestRemoveItem:
    def test_remove_partial(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(POTION, 3)
        assert inv.remove_item(0, 2) == 2
        assert inv.get_slot(0).units == 1

    def test_remove_whole_stack(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(POTION, 2)
        assert inv.remove_item(0, 5) == 2
        assert inv.get_slot(0) is None

    def test_remove_empty_slot(self) -> None:
        assert Inventory(2, 2).remove_item(1) == 0

    def test_remove_by_id_partial_stacks_first(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(POTION, 3)
        inv.add_item(TORCH)
        inv.add_item(POTION, 1)  # 슬롯 0은 가득, 새 스택 생성
        assert _units(inv) == [3, 1, 1, None]
        # 슬롯 2가 덜 찬 스택
        assert inv.get_slot(2).id == "potion"

        removed = inv.remove_by_id("potion", 2)
        assert removed == 2
        assert inv.get_slot(2) is None
        assert inv.get_slot(0).units == 2

    def test_remove_by_id_more_than_owned(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(SWORD, 2)
        assert inv.remove_by_id("sword", 5) == 2
        assert inv.count_item("sword") == 0


class TestMoveAndDrop:
    def test_move_swaps(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(TORCH)
        inv.add_item(SWORD)
        inv.move_item(0, 1)
        assert inv.get_slot(0).id == "sword"
        assert inv.get_slot(1).id == "torch"

    def test_move_to_empty(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(TORCH)
        inv.move_item(0, 3)
        assert inv.get_slot(0) is None
        assert inv.get_slot(3).id == "torch"

    def test_move_out_of_range(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(TORCH)
        with pytest.raises(SlotIndexError):
            inv.move_item(0, 10)
        assert inv.get_slot(0).id == "torch"

    def test_drop_clears_whole_stack(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(POTION, 3)
        dropped = inv.drop_item(0)
        assert dropped.units == 3
        assert inv.get_slot(0) is None

    def test_drop_empty(self) -> None:
        assert Inventory(2, 2).drop_item(0) is None


# ── 사용 ──────────────────────────────────────────────────────


class TestUseItem:
    def test_drink_consumes_one(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(POTION, 2)
        assert inv.use_item(0) == ItemAction.DRINK
        assert inv.get_slot(0).units == 1
        inv.use_item(0)
        assert inv.get_slot(0) is None

    def test_eat_consumes_one(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(BREAD, 1)
        assert inv.use_item(0) == ItemAction.EAT
        assert inv.get_slot(0) is None

    def test_use_returns_action_without_change(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(TORCH)
        assert inv.use_item(0) == ItemAction.USE
        assert inv.get_slot(0).id == "torch"

    def test_examine_default(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(KEY)
        assert inv.use_item(0) == ItemAction.EXAMINE
        assert inv.get_slot(0).id == "key"

    def test_equip_default_moves_item(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(SWORD)
        assert inv.use_item(0) == ItemAction.EQUIP
        assert inv.get_slot(0) is None
        assert inv.get_equipped(EquipmentSlot.WEAPON).id == "sword"

    def test_use_empty_slot(self) -> None:
        assert Inventory(2, 2).use_item(0) is None


# ── 장비 ──────────────────────────────────────────────────────


class TestEquipment:
    def test_equip_swaps_with_previous(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(SWORD)
        inv.add_item(AXE)
        inv.equip_from_slot(0)
        assert inv.equip_from_slot(1) is True
        assert inv.get_equipped(EquipmentSlot.WEAPON).id == "axe"
        assert inv.get_slot(1).id == "sword"

    def test_equip_non_equipment_rejected(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(TORCH)
        assert inv.equip_from_slot(0) is False
        assert inv.get_slot(0).id == "torch"

    def test_armor_goes_to_armor_slot(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(ARMOR)
        inv.equip_from_slot(0)
        assert inv.get_equipped(EquipmentSlot.ARMOR).id == "armor"
        assert inv.get_equipped(EquipmentSlot.WEAPON) is None

    def test_unequip_to_first_empty(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(TORCH)
        inv.add_item(SWORD)
        inv.equip_from_slot(1)
        assert inv.unequip_to_inventory(EquipmentSlot.WEAPON) is True
        assert inv.get_slot(1).id == "sword"
        assert inv.get_equipped(EquipmentSlot.WEAPON) is None

    def test_unequip_fails_when_full(self) -> None:
        inv = Inventory(1, 1)
        inv.add_item(SWORD)
        inv.equip_from_slot(0)
        inv.add_item(TORCH)
        assert inv.unequip_to_inventory(EquipmentSlot.WEAPON) is False
        assert inv.get_equipped(EquipmentSlot.WEAPON).id == "sword"

    def test_unequip_empty_slot(self) -> None:
        assert Inventory(2, 2).unequip_to_inventory(EquipmentSlot.ARMOR) is False

    def test_raw_equip_and_unequip(self) -> None:
        inv = Inventory(2, 2)
        sword = InventoryItem(SWORD)
        assert inv.equip_item(sword, EquipmentSlot.WEAPON) is None
        assert inv.unequip_item(EquipmentSlot.WEAPON) is sword
        assert inv.get_equipped(EquipmentSlot.WEAPON) is None


# ── 스냅샷 ────────────────────────────────────────────────────


class TestInventorySnapshot:
    def test_round_trip(self) -> None:
        inv = Inventory(2, 2)
        inv.add_item(POTION, 2)
        inv.add_item(SWORD)
        inv.add_item(ARMOR)
        inv.equip_from_slot(2)

        restored = Inventory.from_dict(inv.to_dict(), DEFINITIONS.get, 2, 2)
        assert restored.to_dict() == inv.to_dict()

    def test_unknown_item_skipped(self) -> None:
        data = {"slots": [{"id": "ghost"}, {"id": "torch"}, None, None]}
        inv = Inventory.from_dict(data, DEFINITIONS.get, 2, 2)
        assert inv.get_slot(0) is None
        assert inv.get_slot(1).id == "torch"

    def test_quantity_clamped(self) -> None:
        data = {"slots": [{"id": "potion", "quantity": 99}]}
        inv = Inventory.from_dict(data, DEFINITIONS.get, 2, 2)
        assert inv.get_slot(0).units == POTION.max_stack

    def test_extra_slots_dropped(self) -> None:
        data = {"slots": [None, None, None, None, {"id": "torch"}]}
        inv = Inventory.from_dict(data, DEFINITIONS.get, 2, 2)
        assert inv.count_item("torch") == 0

    def test_unknown_equipment_slot_ignored(self) -> None:
        data = {"slots": [], "equipment": {"ring": {"id": "sword"}}}
        inv = Inventory.from_dict(data, DEFINITIONS.get, 2, 2)
        assert all(v is None for v in inv.equipment.values())

    def test_zero_quantity_restores_empty(self) -> None:
        data = {"slots": [{"id": "potion", "quantity": 0}, {"id": "potion"}]}
        inv = Inventory.from_dict(data, DEFINITIONS.get, 2, 2)
        assert inv.get_slot(0) is None
        assert inv.get_slot(1).units == 1
        assert inv.count_item("potion") == 1
