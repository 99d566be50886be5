"""인벤토리 엔진 - 고정 크기 그리드 + 장비 슬롯

규칙:
- 그리드 크기(width × height)는 생성 시 고정, 이후 변경 불가
- 슬롯 접근은 전부 범위 검사 (범위 밖 → SlotIndexError)
- 겹치기 가능한 아이템은 기존 스택부터 채우고, 남으면 빈 슬롯 할당
- 공간이 없어 못 넣은 수량은 AddResult.dropped로 보고
- 장착은 이동 방식: 슬롯에서 빠져 장비 슬롯으로 들어간다
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .models import EquipmentSlot, InventoryItem, ItemAction, ItemDefinition

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 4
DEFAULT_HEIGHT = 5

# 먹기/마시기는 1개 소모
_CONSUME_ACTIONS = (ItemAction.EAT, ItemAction.DRINK)


class SlotIndexError(IndexError):
    """그리드 범위를 벗어난 슬롯 인덱스 (호출자 버그)"""


@dataclass(frozen=True)
class AddResult:
    """add_item 결과. added + dropped == 요청 수량."""

    added: int
    dropped: int

    @property
    def complete(self) -> bool:
        return self.dropped == 0


class Inventory:
    """플레이어 인벤토리.

    사용 패턴:
        inv = Inventory(4, 5)
        inv.add_item(catalog.get("health_potion"), 3)
        inv.use_item(0)
    """

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid grid size: {width}x{height}")
        self.width = width
        self.height = height
        self._slots: list[Optional[InventoryItem]] = [None] * (width * height)
        self._equipment: dict[EquipmentSlot, Optional[InventoryItem]] = {
            slot: None for slot in EquipmentSlot
        }

    # === 조회 ===

    @property
    def size(self) -> int:
        return len(self._slots)

    @property
    def slots(self) -> list[Optional[InventoryItem]]:
        """슬롯 목록 사본 (읽기 전용 접근)"""
        return list(self._slots)

    @property
    def equipment(self) -> dict[EquipmentSlot, Optional[InventoryItem]]:
        return dict(self._equipment)

    def get_slot(self, index: int) -> Optional[InventoryItem]:
        self._check_index(index)
        return self._slots[index]

    def get_equipped(self, slot: EquipmentSlot) -> Optional[InventoryItem]:
        return self._equipment[EquipmentSlot(slot)]

    def count_item(self, item_id: str) -> int:
        """해당 id의 총 보유 수량 (quantity 미추적 아이템은 1개씩)."""
        return sum(s.units for s in self._slots if s is not None and s.id == item_id)

    def free_slots(self) -> int:
        return sum(1 for s in self._slots if s is None)

    def first_empty_slot(self) -> Optional[int]:
        for i, slot in enumerate(self._slots):
            if slot is None:
                return i
        return None

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool):
            raise SlotIndexError(f"Slot index must be int, got {index!r}")
        if not 0 <= index < len(self._slots):
            raise SlotIndexError(
                f"Slot index {index} out of range [0, {len(self._slots)})"
            )

    # === 추가/제거 ===

    def add_item(self, definition: ItemDefinition, quantity: int = 1) -> AddResult:
        """아이템 추가.

        겹치기 가능: 같은 id의 기존 스택을 왼쪽부터 max_stack까지 채운 뒤
        빈 슬롯마다 max_stack 단위로 나눠 넣는다.
        겹치기 불가: 1개당 빈 슬롯 1칸.
        남는 수량은 버려지고 dropped로 보고된다.
        """
        if quantity <= 0:
            return AddResult(added=0, dropped=0)

        remaining = quantity
        if definition.stackable:
            max_stack = definition.max_stack
            for slot in self._slots:
                if remaining <= 0:
                    break
                if slot is None or slot.id != definition.id:
                    continue
                room = max_stack - slot.units
                if room <= 0:
                    continue
                moved = min(room, remaining)
                slot.quantity = slot.units + moved
                remaining -= moved

            for i, slot in enumerate(self._slots):
                if remaining <= 0:
                    break
                if slot is None:
                    placed = min(max_stack, remaining)
                    self._slots[i] = InventoryItem(definition, quantity=placed)
                    remaining -= placed
        else:
            for i, slot in enumerate(self._slots):
                if remaining <= 0:
                    break
                if slot is None:
                    self._slots[i] = InventoryItem(definition)
                    remaining -= 1

        added = quantity - remaining
        if remaining > 0:
            logger.warning(
                "Inventory full: dropped %d x %s (added %d)",
                remaining,
                definition.id,
                added,
            )
        else:
            logger.debug("Added %d x %s", added, definition.id)
        return AddResult(added=added, dropped=remaining)

    def remove_item(self, slot_index: int, quantity: int = 1) -> int:
        """한 슬롯에서 quantity만큼 제거. 반환: 실제 제거 수량."""
        item = self.get_slot(slot_index)
        if item is None or quantity <= 0:
            return 0
        if item.quantity is None or quantity >= item.units:
            self._slots[slot_index] = None
            return item.units
        item.quantity -= quantity
        return quantity

    def remove_by_id(self, item_id: str, quantity: int) -> int:
        """id 기준으로 quantity만큼 제거. 반환: 실제 제거 수량.

        덜 찬 스택을 먼저, 그다음 가득 찬 스택/겹치기 불가 아이템 순.
        각 단계 안에서는 슬롯 인덱스 오름차순.
        """
        remaining = quantity

        def _is_partial(item: InventoryItem) -> bool:
            max_stack = item.definition.max_stack
            return max_stack is not None and item.units < max_stack

        passes: tuple[Callable[[InventoryItem], bool], ...] = (
            _is_partial,
            lambda item: not _is_partial(item),
        )
        for matches in passes:
            for i, item in enumerate(self._slots):
                if remaining <= 0:
                    break
                if item is None or item.id != item_id or not matches(item):
                    continue
                remaining -= self.remove_item(i, remaining)

        return quantity - max(remaining, 0)

    def move_item(self, from_index: int, to_index: int) -> None:
        """두 슬롯 교환. 빈 슬롯도 허용."""
        self._check_index(from_index)
        self._check_index(to_index)
        self._slots[from_index], self._slots[to_index] = (
            self._slots[to_index],
            self._slots[from_index],
        )

    def drop_item(self, slot_index: int) -> Optional[InventoryItem]:
        """슬롯 통째로 비움. 버린 아이템은 어디에도 반환되지 않는다."""
        item = self.get_slot(slot_index)
        self._slots[slot_index] = None
        if item is not None:
            logger.debug("Dropped %s from slot %d", item.id, slot_index)
        return item

    # === 사용 ===

    def use_item(self, slot_index: int) -> Optional[ItemAction]:
        """기본 액션 실행. 반환: 처리된 액션 (빈 슬롯/장착 실패 시 None).

        eat/drink → 1개 소모, equip → 장비 슬롯으로 이동.
        use/examine 등은 이 계층에서 아무것도 하지 않고 액션만 돌려준다.
        """
        item = self.get_slot(slot_index)
        if item is None:
            return None

        action = item.definition.default_action
        if action in _CONSUME_ACTIONS:
            self.remove_item(slot_index, 1)
            logger.debug("Consumed 1 x %s (%s)", item.id, action.value)
            return action
        if action == ItemAction.EQUIP:
            return action if self.equip_from_slot(slot_index) else None
        return action

    # === 장비 ===

    def equip_item(
        self, item: Optional[InventoryItem], slot: EquipmentSlot
    ) -> Optional[InventoryItem]:
        """장비 슬롯 직접 지정. 인벤토리 내용과 무관. 반환: 이전 장착품."""
        slot = EquipmentSlot(slot)
        previous = self._equipment[slot]
        self._equipment[slot] = item
        return previous

    def unequip_item(self, slot: EquipmentSlot) -> Optional[InventoryItem]:
        """장비 슬롯 비우기. 인벤토리 내용과 무관. 반환: 해제된 장착품."""
        return self.equip_item(None, slot)

    def equip_from_slot(self, slot_index: int) -> bool:
        """슬롯의 아이템을 type에 맞는 장비 슬롯으로 이동.

        기존 장착품은 비워진 그리드 슬롯으로 돌아온다 (교환).
        무기/방어구가 아니면 거부.
        """
        item = self.get_slot(slot_index)
        if item is None:
            return False

        equip_slot = item.definition.equip_slot
        if equip_slot is None:
            logger.warning(
                "Cannot equip %s: type %s has no equipment slot",
                item.id,
                item.definition.type.value,
            )
            return False

        self._slots[slot_index] = self._equipment[equip_slot]
        self._equipment[equip_slot] = item
        logger.debug("Equipped %s to %s", item.id, equip_slot.value)
        return True

    def unequip_to_inventory(self, slot: EquipmentSlot) -> bool:
        """장착품을 첫 빈 슬롯으로 되돌린다. 그리드가 가득 차면 실패."""
        slot = EquipmentSlot(slot)
        item = self._equipment[slot]
        if item is None:
            return False

        index = self.first_empty_slot()
        if index is None:
            logger.warning("Cannot unequip %s: inventory full", item.id)
            return False

        self._slots[index] = item
        self._equipment[slot] = None
        logger.debug("Unequipped %s to slot %d", item.id, index)
        return True

    # === 직렬화 ===

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "slots": [s.to_dict() if s is not None else None for s in self._slots],
            "equipment": {
                slot.value: item.to_dict() if item is not None else None
                for slot, item in self._equipment.items()
            },
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        get_definition: Callable[[str], Optional[ItemDefinition]],
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> "Inventory":
        """스냅샷 복원.

        그리드 크기는 인자로 받은 값이 기준 (저장된 크기와 다르면 넘치는 슬롯은 버림).
        get_definition: Core는 카탈로그 로드 방식을 모르므로 호출자가 조회 함수를 주입.
        """
        inv = cls(width, height)
        for i, record in enumerate(data.get("slots", [])):
            if record is None:
                continue
            if i >= inv.size:
                logger.warning("Snapshot slot %d outside %dx%d grid", i, width, height)
                continue
            inv._slots[i] = _item_from_record(record, get_definition)

        for slot_name, record in (data.get("equipment") or {}).items():
            if record is None:
                continue
            try:
                slot = EquipmentSlot(slot_name)
            except ValueError:
                logger.warning("Unknown equipment slot in snapshot: %s", slot_name)
                continue
            inv._equipment[slot] = _item_from_record(record, get_definition)
        return inv


def _item_from_record(
    record: dict,
    get_definition: Callable[[str], Optional[ItemDefinition]],
) -> Optional[InventoryItem]:
    """{"id", "quantity"} 레코드 → InventoryItem. 모르는 id는 None."""
    definition = get_definition(record.get("id", ""))
    if definition is None:
        logger.warning("Unknown item in snapshot: %s", record.get("id"))
        return None

    if not definition.stackable:
        return InventoryItem(definition)

    raw = record.get("quantity")
    quantity = int(raw) if raw is not None else 1
    if quantity > definition.max_stack:
        logger.warning(
            "Clamping %s stack %d to max %d", definition.id, quantity, definition.max_stack
        )
        quantity = definition.max_stack
    if quantity <= 0:
        return None
    return InventoryItem(definition, quantity=quantity)
