"""구매/판매 트랜잭션 테스트"""

from __future__ import annotations

from typing import Optional

import pytest

from src.core.item.inventory import Inventory
from src.core.item.models import ItemAction, ItemDefinition, ItemType
from src.core.item.registry import ItemCatalog
from src.core.store.currency import CurrencyLedger
from src.core.store.models import StoreItem
from src.core.store.registry import StoreCatalog, parse_store
from src.core.store.state import StoreRuntimeState
from src.core.store.trade import (
    TradeFailure,
    handle_buy_item,
    handle_sell_item,
    sell_price,
)


def _definition(item_id: str, max_stack: Optional[int] = None) -> ItemDefinition:
    return ItemDefinition(
        id=item_id,
        name=item_id,
        description="",
        type=ItemType.MATERIAL,
        icon="",
        default_action=ItemAction.EXAMINE,
        available_actions=(ItemAction.EXAMINE, ItemAction.SELL),
        max_stack=max_stack,
    )


@pytest.fixture()
def items() -> ItemCatalog:
    catalog = ItemCatalog()
    catalog.register(_definition("ore", max_stack=2))
    catalog.register(_definition("sword"))
    catalog.register(_definition("gem", max_stack=10))
    catalog.register(_definition("leaf", max_stack=10))
    return catalog


@pytest.fixture()
def stores() -> StoreCatalog:
    catalog = StoreCatalog()
    catalog.register(
        parse_store(
            {
                "id": "mine_shop",
                "items": [
                    {"itemId": "ore", "price": 30, "stock": 5},
                    {"itemId": "sword", "price": 20, "stock": 2},
                    {"itemId": "leaf", "price": 0},
                ],
            }
        )
    )
    catalog.register(parse_store({"id": "general", "isGeneralStore": True}))
    return catalog


@pytest.fixture()
def state(stores: StoreCatalog) -> StoreRuntimeState:
    return StoreRuntimeState(stores)


@pytest.fixture()
def ledger() -> CurrencyLedger:
    return CurrencyLedger(100)


@pytest.fixture()
def inventory() -> Inventory:
    return Inventory(4, 5)


def _buy(item_id, price, quantity, *, items, state, ledger, inventory, stock=None):
    return handle_buy_item(
        "mine_shop",
        StoreItem(item_id, price, stock),
        quantity,
        items=items,
        state=state,
        ledger=ledger,
        inventory=inventory,
    )


class TestSellPrice:
    def test_half_rounded_down(self) -> None:
        assert sell_price(20) == 10
        assert sell_price(15) == 7
        assert sell_price(1) == 0


# ── 구매 ──────────────────────────────────────────────────────


class TestBuy:
    def test_buy_three_at_thirty(self, items, state, ledger, inventory) -> None:
        """100코인으로 30짜리 3개 구매 → 코인 10, 재고 2, 스택 분할"""
        result = _buy(
            "ore", 30, 3, items=items, state=state, ledger=ledger, inventory=inventory
        )
        assert result.success
        assert result.quantity == 3
        assert result.total == 90
        assert ledger.coins == 10
        assert state.get_stock("mine_shop", "ore") == 2
        assert inventory.count_item("ore") == 3
        assert inventory.get_slot(0).units == 2
        assert inventory.get_slot(1).units == 1

    def test_quantity_clamped_to_affordable(
        self, items, state, ledger, inventory
    ) -> None:
        result = _buy(
            "ore", 30, 5, items=items, state=state, ledger=ledger, inventory=inventory
        )
        assert result.quantity == 3
        assert ledger.coins == 10

    def test_quantity_clamped_to_stock(self, items, state, ledger, inventory) -> None:
        result = _buy(
            "sword", 20, 4, items=items, state=state, ledger=ledger, inventory=inventory
        )
        assert result.quantity == 2
        assert ledger.coins == 60
        assert state.get_stock("mine_shop", "sword") == 0

    def test_insufficient_funds_no_change(self, items, state, inventory) -> None:
        poor = CurrencyLedger(10)
        result = _buy(
            "ore", 30, 1, items=items, state=state, ledger=poor, inventory=inventory
        )
        assert not result.success
        assert result.reason == TradeFailure.INSUFFICIENT_FUNDS
        assert poor.coins == 10
        assert state.get_stock("mine_shop", "ore") == 5
        assert inventory.count_item("ore") == 0

    def test_out_of_stock_no_change(self, items, state, ledger, inventory) -> None:
        state.decrease_stock("mine_shop", "sword", 2)
        result = _buy(
            "sword", 20, 1, items=items, state=state, ledger=ledger, inventory=inventory
        )
        assert result.reason == TradeFailure.OUT_OF_STOCK
        assert ledger.coins == 100
        assert inventory.count_item("sword") == 0

    def test_unknown_item(self, items, state, ledger, inventory) -> None:
        result = _buy(
            "dragon", 1, 1, items=items, state=state, ledger=ledger, inventory=inventory
        )
        assert result.reason == TradeFailure.UNKNOWN_ITEM
        assert ledger.coins == 100

    def test_invalid_quantity(self, items, state, ledger, inventory) -> None:
        result = _buy(
            "ore", 30, 0, items=items, state=state, ledger=ledger, inventory=inventory
        )
        assert result.reason == TradeFailure.INVALID_QUANTITY

    def test_unknown_store(self, items, state, ledger, inventory) -> None:
        result = handle_buy_item(
            "nowhere",
            StoreItem("ore", 30, 5),
            1,
            items=items,
            state=state,
            ledger=ledger,
            inventory=inventory,
        )
        assert result.reason == TradeFailure.UNKNOWN_STORE
        assert ledger.coins == 100

    def test_free_item(self, items, state, ledger, inventory) -> None:
        result = _buy(
            "leaf", 0, 4, items=items, state=state, ledger=ledger, inventory=inventory
        )
        assert result.success
        assert result.total == 0
        assert inventory.count_item("leaf") == 4
        assert ledger.coins == 100

    def test_full_inventory_reports_dropped(self, items, state, ledger) -> None:
        tiny = Inventory(1, 1)
        result = _buy(
            "ore", 30, 3, items=items, state=state, ledger=ledger, inventory=tiny
        )
        assert result.success
        assert result.quantity == 3
        assert result.dropped == 1
        assert tiny.count_item("ore") == 2
        assert ledger.coins == 10


# ── 판매 ──────────────────────────────────────────────────────


def _sell(store_id, item_id, quantity, *, state, ledger, inventory, base_price=10):
    return handle_sell_item(
        store_id,
        item_id,
        quantity,
        state=state,
        ledger=ledger,
        inventory=inventory,
        base_price=base_price,
    )


class TestSell:
    def test_sell_two_at_twenty(self, items, state, ledger, inventory) -> None:
        """카탈로그 가격 20 → 개당 10, 재고 +2, 매입가 20 기록"""
        inventory.add_item(items.get("sword"), 2)
        result = _sell(
            "mine_shop", "sword", 2, state=state, ledger=ledger, inventory=inventory
        )
        assert result.success
        assert result.unit_price == 10
        assert result.total == 20
        assert ledger.coins == 120
        assert state.get_stock("mine_shop", "sword") == 4
        assert state.get_memory_price("mine_shop", "sword") == 20
        assert inventory.count_item("sword") == 0

    def test_sell_conservation(self, items, state, ledger, inventory) -> None:
        inventory.add_item(items.get("ore"), 3)
        before_coins = ledger.coins
        result = _sell(
            "mine_shop", "ore", 2, state=state, ledger=ledger, inventory=inventory
        )
        assert ledger.coins - before_coins == result.unit_price * result.quantity
        assert inventory.count_item("ore") == 1

    def test_quantity_clamped_to_owned(self, items, state, ledger, inventory) -> None:
        inventory.add_item(items.get("ore"), 1)
        result = _sell(
            "mine_shop", "ore", 5, state=state, ledger=ledger, inventory=inventory
        )
        assert result.quantity == 1
        assert ledger.coins == 115

    def test_not_owned(self, state, ledger, inventory) -> None:
        result = _sell(
            "mine_shop", "ore", 1, state=state, ledger=ledger, inventory=inventory
        )
        assert result.reason == TradeFailure.NOT_OWNED
        assert ledger.coins == 100

    def test_not_accepted(self, items, state, ledger, inventory) -> None:
        inventory.add_item(items.get("gem"), 1)
        result = _sell(
            "mine_shop", "gem", 1, state=state, ledger=ledger, inventory=inventory
        )
        assert result.reason == TradeFailure.NOT_ACCEPTED
        assert inventory.count_item("gem") == 1

    def test_unknown_store(self, state, ledger, inventory) -> None:
        result = _sell(
            "nowhere", "ore", 1, state=state, ledger=ledger, inventory=inventory
        )
        assert result.reason == TradeFailure.UNKNOWN_STORE

    def test_general_store_base_then_memory(
        self, items, state, ledger, inventory
    ) -> None:
        inventory.add_item(items.get("gem"), 3)
        first = _sell(
            "general",
            "gem",
            1,
            state=state,
            ledger=ledger,
            inventory=inventory,
            base_price=12,
        )
        assert first.unit_price == 6
        assert state.get_memory_price("general", "gem") == 12

        # 기억된 매입가가 base_price보다 우선
        second = _sell(
            "general",
            "gem",
            1,
            state=state,
            ledger=ledger,
            inventory=inventory,
            base_price=50,
        )
        assert second.unit_price == 6
        assert state.get_stock("general", "gem") == 2

    def test_sold_item_can_be_bought_back(
        self, items, state, ledger, inventory
    ) -> None:
        inventory.add_item(items.get("gem"), 1)
        _sell("general", "gem", 1, state=state, ledger=ledger, inventory=inventory)
        listing = {e.item_id: e for e in state.get_store_listing("general")}
        entry = listing["gem"]
        assert entry.from_player
        assert entry.price == 10

        result = handle_buy_item(
            "general",
            entry.to_store_item(),
            1,
            items=items,
            state=state,
            ledger=ledger,
            inventory=inventory,
        )
        assert result.success
        assert state.get_stock("general", "gem") == 0
        assert ledger.coins == 95
