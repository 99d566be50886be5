"""아이템 시스템 Core - 순수 Python, UI/DB 무관"""

from .inventory import AddResult, Inventory, SlotIndexError
from .models import (
    EquipmentSlot,
    InventoryItem,
    ItemAction,
    ItemDefinition,
    ItemType,
)
from .registry import ItemCatalog

__all__ = [
    "AddResult",
    "EquipmentSlot",
    "Inventory",
    "InventoryItem",
    "ItemAction",
    "ItemCatalog",
    "ItemDefinition",
    "ItemType",
    "SlotIndexError",
]
