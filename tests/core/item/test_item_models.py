"""Item Core 모델 + ItemCatalog 테스트"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.core.item.models import (
    EquipmentSlot,
    InventoryItem,
    ItemAction,
)
from src.core.item.registry import ItemCatalog, parse_item

ITEMS_PATH = Path("src/data/items.json")


def _raw_item(**overrides) -> dict:
    raw = {
        "id": "test_potion",
        "name": "Test Potion",
        "description": "Fizzy.",
        "type": "consumable",
        "icon": "🧪",
        "defaultAction": "drink",
        "availableActions": ["drink", "drop"],
        "maxStack": 5,
    }
    raw.update(overrides)
    return raw


# ── ItemDefinition ────────────────────────────────────────────


class TestItemDefinition:
    def test_frozen_immutable(self) -> None:
        item = parse_item(_raw_item())
        with pytest.raises(AttributeError):
            item.name = "changed"  # type: ignore[misc]

    def test_stackable(self) -> None:
        assert parse_item(_raw_item()).stackable is True
        assert parse_item(_raw_item(maxStack=None)).stackable is False

    def test_equip_slot_by_type(self) -> None:
        weapon = parse_item(_raw_item(type="weapon"))
        armor = parse_item(_raw_item(type="armor"))
        misc = parse_item(_raw_item(type="misc"))
        assert weapon.equip_slot == EquipmentSlot.WEAPON
        assert armor.equip_slot == EquipmentSlot.ARMOR
        assert misc.equip_slot is None


class TestInventoryItem:
    def test_units_without_quantity(self) -> None:
        item = InventoryItem(parse_item(_raw_item(maxStack=None)))
        assert item.units == 1
        assert item.to_dict() == {"id": "test_potion"}

    def test_to_dict_with_quantity(self) -> None:
        item = InventoryItem(parse_item(_raw_item()), quantity=3)
        assert item.to_dict() == {"id": "test_potion", "quantity": 3}


# ── parse_item ────────────────────────────────────────────────


class TestParseItem:
    def test_camel_case_fields(self) -> None:
        item = parse_item(
            _raw_item(examineImage="big.png", image="small.png", quantity=2)
        )
        assert item.default_action == ItemAction.DRINK
        assert item.available_actions == (ItemAction.DRINK, ItemAction.DROP)
        assert item.examine_image == "big.png"
        assert item.image == "small.png"
        assert item.max_stack == 5
        assert item.quantity == 2

    def test_empty_actions_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_item(_raw_item(availableActions=[]))

    def test_bad_max_stack_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_item(_raw_item(maxStack=0))

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_item(_raw_item(type="spaceship"))

    def test_missing_name(self) -> None:
        raw = _raw_item()
        del raw["name"]
        with pytest.raises(KeyError):
            parse_item(raw)


# ── ItemCatalog ───────────────────────────────────────────────


class TestItemCatalog:
    def test_load_data_file(self) -> None:
        catalog = ItemCatalog()
        count = catalog.load_from_json(ITEMS_PATH)
        assert count == catalog.count()
        assert count >= 5
        assert "health_potion" in catalog
        potion = catalog.get("health_potion")
        assert potion is not None
        assert potion.stackable

    def test_get_unknown(self) -> None:
        assert ItemCatalog().get("nothing") is None

    def test_bad_entries_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text(
            json.dumps(
                {
                    "items": [
                        _raw_item(),
                        _raw_item(id="broken", availableActions=[]),
                        {"id": "no_fields"},
                    ]
                }
            ),
            encoding="utf-8",
        )
        catalog = ItemCatalog()
        assert catalog.load_from_json(path) == 1
        assert "broken" not in catalog
        assert [i.id for i in catalog.get_all()] == ["test_potion"]

    def test_register_overwrites(self) -> None:
        catalog = ItemCatalog()
        catalog.register(parse_item(_raw_item(name="A")))
        catalog.register(parse_item(_raw_item(name="B")))
        assert catalog.count() == 1
        assert catalog.get("test_potion").name == "B"
