"""거래 시스템 - 구매/판매 트랜잭션

판정 순서 (첫 실패에서 중단, 그 전까지 상태 변경 없음):
    구매: 아이템 확인 → 구매 가능 수량(코인) → 재고
    판매: 매입가 확인 → 보유 수량

구매는 재고 차감과 코인 차감이 함께 성공하거나 둘 다 일어나지 않는다.
판매가는 상점 기준가의 절반(내림).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from src.core.item.inventory import Inventory
from src.core.item.registry import ItemCatalog

from .currency import CurrencyLedger
from .models import StoreItem
from .state import GENERAL_STORE_BASE_PRICE, StoreRuntimeState

logger = logging.getLogger(__name__)


class TradeFailure:
    """거래 실패 사유 문자열 상수"""

    UNKNOWN_STORE = "unknown_store"
    UNKNOWN_ITEM = "unknown_item"
    INVALID_QUANTITY = "invalid_quantity"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    OUT_OF_STOCK = "out_of_stock"
    NOT_ACCEPTED = "not_accepted"
    NOT_OWNED = "not_owned"


@dataclass(frozen=True)
class TradeResult:
    """거래 결과"""

    success: bool
    item_id: str
    quantity: int = 0  # 실제 거래 수량 (요청보다 적을 수 있음)
    unit_price: int = 0
    total: int = 0
    reason: Optional[str] = None  # 실패 시 TradeFailure 값
    dropped: int = 0  # 구매분 중 인벤토리가 가득 차 들어가지 못한 수량

    @classmethod
    def failed(cls, item_id: str, reason: str) -> "TradeResult":
        return cls(success=False, item_id=item_id, reason=reason)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total": self.total,
            "reason": self.reason,
            "dropped": self.dropped,
        }


def sell_price(store_price: int) -> int:
    """플레이어가 받는 단가. 상점 기준가의 절반 (내림)."""
    return store_price // 2


def handle_buy_item(
    store_id: str,
    store_item: StoreItem,
    quantity: int,
    *,
    items: ItemCatalog,
    state: StoreRuntimeState,
    ledger: CurrencyLedger,
    inventory: Inventory,
) -> TradeResult:
    """상점에서 구매.

    1. 아이템 정의 확인
    2. 구매 가능 수량 = coins // price, 0이면 중단
    3. 요청 수량을 구매 가능 수량으로 제한
    4. 유한 재고면 재고로 한 번 더 제한 (0이면 중단)
    5-6. 재고 차감 + 코인 차감을 함께 적용
    7. 인벤토리에 지급 (넘치는 수량은 dropped로 보고)
    """
    item_id = store_item.item_id

    definition = items.get(item_id)
    if definition is None:
        logger.warning("Buy aborted: unknown item %s", item_id)
        return TradeResult.failed(item_id, TradeFailure.UNKNOWN_ITEM)

    if quantity <= 0:
        return TradeResult.failed(item_id, TradeFailure.INVALID_QUANTITY)

    if not state.initialize_store_stock(store_id):
        return TradeResult.failed(item_id, TradeFailure.UNKNOWN_STORE)

    price = store_item.price
    if price > 0:
        max_affordable = ledger.coins // price
        if max_affordable <= 0:
            logger.info(
                "Buy aborted: %s costs %d, player has %d", item_id, price, ledger.coins
            )
            return TradeResult.failed(item_id, TradeFailure.INSUFFICIENT_FUNDS)
        quantity = min(quantity, max_affordable)

    current_stock = state.get_stock(store_id, item_id)
    if current_stock is not None and current_stock < quantity:
        quantity = current_stock
        if quantity <= 0:
            logger.info("Buy aborted: %s out of stock in %s", item_id, store_id)
            return TradeResult.failed(item_id, TradeFailure.OUT_OF_STOCK)

    total = price * quantity

    # 변경 전에 두 조건을 모두 확인해서 부분 적용을 막는다
    if not state.has_stock(store_id, item_id, quantity):
        return TradeResult.failed(item_id, TradeFailure.OUT_OF_STOCK)
    if not ledger.can_afford(total):
        return TradeResult.failed(item_id, TradeFailure.INSUFFICIENT_FUNDS)

    state.decrease_stock(store_id, item_id, quantity)
    ledger.remove_coins(total)

    added = inventory.add_item(definition, quantity)
    logger.info(
        "Bought %d x %s from %s for %d (dropped %d)",
        quantity,
        item_id,
        store_id,
        total,
        added.dropped,
    )
    return TradeResult(
        success=True,
        item_id=item_id,
        quantity=quantity,
        unit_price=price,
        total=total,
        dropped=added.dropped,
    )


def handle_sell_item(
    store_id: str,
    item_id: str,
    quantity: int,
    *,
    state: StoreRuntimeState,
    ledger: CurrencyLedger,
    inventory: Inventory,
    base_price: int = GENERAL_STORE_BASE_PRICE,
) -> TradeResult:
    """상점에 판매.

    1. 기준가: 기억된 매입가 → 카탈로그 가격 → 일반 상점 base_price → 불가
    2. 단가 = 기준가 // 2
    3-4. 보유 수량으로 제한, 0이면 중단
    5. 코인 지급
    6. 인벤토리에서 제거 (덜 찬 스택 먼저)
    7. 상점 재고 증가 + 매입가 기록 (절반 전 기준가)
    """
    if state.catalog.get(store_id) is None:
        logger.warning("Sell aborted: store not found %s", store_id)
        return TradeResult.failed(item_id, TradeFailure.UNKNOWN_STORE)

    if quantity <= 0:
        return TradeResult.failed(item_id, TradeFailure.INVALID_QUANTITY)

    store_price = state.resolve_price(store_id, item_id, base_price)
    if store_price is None:
        logger.info("Sell aborted: %s does not buy %s", store_id, item_id)
        return TradeResult.failed(item_id, TradeFailure.NOT_ACCEPTED)

    unit_price = sell_price(store_price)

    owned = inventory.count_item(item_id)
    quantity = min(quantity, owned)
    if quantity <= 0:
        return TradeResult.failed(item_id, TradeFailure.NOT_OWNED)

    total = unit_price * quantity
    ledger.add_coins(total)
    inventory.remove_by_id(item_id, quantity)
    state.increase_stock(store_id, item_id, quantity, store_price)

    logger.info(
        "Sold %d x %s to %s for %d (store price %d)",
        quantity,
        item_id,
        store_id,
        total,
        store_price,
    )
    return TradeResult(
        success=True,
        item_id=item_id,
        quantity=quantity,
        unit_price=unit_price,
        total=total,
    )
