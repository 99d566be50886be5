"""아이템 도메인 모델 (UI/DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ItemType(str, Enum):
    CONSUMABLE = "consumable"
    WEAPON = "weapon"
    ARMOR = "armor"
    MATERIAL = "material"
    MISC = "misc"


class ItemAction(str, Enum):
    USE = "use"
    EXAMINE = "examine"
    DROP = "drop"
    EQUIP = "equip"
    UNEQUIP = "unequip"
    EAT = "eat"
    DRINK = "drink"
    SELL = "sell"


class EquipmentSlot(str, Enum):
    """장비 슬롯. 필요 시 슬롯 추가."""

    WEAPON = "weapon"
    ARMOR = "armor"


# 아이템 type → 장착 슬롯
EQUIP_SLOT_BY_TYPE: dict[ItemType, EquipmentSlot] = {
    ItemType.WEAPON: EquipmentSlot.WEAPON,
    ItemType.ARMOR: EquipmentSlot.ARMOR,
}


@dataclass(frozen=True)
class ItemDefinition:
    """아이템 원형 - 불변. items.json에서 로드."""

    id: str  # "health_potion"
    name: str
    description: str
    type: ItemType
    icon: str  # 이모지 또는 이미지 경로
    default_action: ItemAction
    available_actions: tuple[ItemAction, ...]  # frozen이므로 tuple 사용

    image: Optional[str] = None
    examine_image: Optional[str] = None  # 살펴보기 오버레이용 이미지

    # None = 겹치기 불가
    max_stack: Optional[int] = None
    # add_item 선택지로 지급될 때의 기본 수량
    quantity: Optional[int] = None

    @property
    def stackable(self) -> bool:
        return self.max_stack is not None

    @property
    def equip_slot(self) -> Optional[EquipmentSlot]:
        return EQUIP_SLOT_BY_TYPE.get(self.type)


@dataclass
class InventoryItem:
    """인벤토리 슬롯에 놓인 런타임 사본.

    quantity는 겹치기 가능한 아이템에만 존재한다 (그 외 None = 1개).
    """

    definition: ItemDefinition
    quantity: Optional[int] = None

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def units(self) -> int:
        """실제 개수. quantity 미추적 아이템은 1."""
        return self.quantity if self.quantity is not None else 1

    def to_dict(self) -> dict:
        data: dict = {"id": self.definition.id}
        if self.quantity is not None:
            data["quantity"] = self.quantity
        return data
