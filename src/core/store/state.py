"""상점 런타임 상태 - 재고 + 매입가 기억

상점별로 두 개의 맵을 가진다:
- stock: item_id → 남은 수량 (무제한 아이템은 키 자체가 없음)
- memory_price: item_id → 플레이어에게 매입할 때 기준가

첫 방문 시 카탈로그의 유한 재고로 lazy 초기화.
저장본 복원으로 들어온 상태는 초기화가 덮어쓰지 않는다.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import StoreListing
from .registry import StoreCatalog

logger = logging.getLogger(__name__)

GENERAL_STORE_BASE_PRICE = 10


class StoreRuntimeState:
    """전 상점의 재고/가격 상태. 카탈로그는 참조만 한다."""

    def __init__(self, catalog: StoreCatalog) -> None:
        self._catalog = catalog
        self._stock: dict[str, dict[str, int]] = {}
        self._memory_price: dict[str, dict[str, int]] = {}

    @property
    def catalog(self) -> StoreCatalog:
        return self._catalog

    # === 초기화 ===

    def is_initialized(self, store_id: str) -> bool:
        return store_id in self._stock

    def initialize_store_stock(self, store_id: str) -> bool:
        """재고 초기화 (멱등). 반환: 상태가 준비되었는지 여부.

        이미 상태가 있으면 아무것도 하지 않는다. 모르는 상점 → 경고 후 False.
        """
        if store_id in self._stock:
            return True

        initial = self._catalog.initial_stock(store_id)
        if initial is None:
            logger.warning("Store not found: %s", store_id)
            return False

        self._stock[store_id] = initial
        logger.debug("Initialized stock for %s: %s", store_id, initial)
        return True

    def reset_store_stock(self, store_id: str) -> bool:
        """카탈로그 값으로 재고를 되돌린다. 기억된 매입가는 유지."""
        initial = self._catalog.initial_stock(store_id)
        if initial is None:
            logger.warning("Store not found: %s", store_id)
            return False
        self._stock[store_id] = initial
        logger.info("Reset stock for %s", store_id)
        return True

    # === 조회 ===

    def get_stock(self, store_id: str, item_id: str) -> Optional[int]:
        """현재 재고. None = 무제한 (또는 아직 초기화 전)."""
        return self._stock.get(store_id, {}).get(item_id)

    def get_memory_price(self, store_id: str, item_id: str) -> Optional[int]:
        return self._memory_price.get(store_id, {}).get(item_id)

    def has_stock(self, store_id: str, item_id: str, quantity: int) -> bool:
        current = self.get_stock(store_id, item_id)
        return current is None or current >= quantity

    def store_accepts_item(self, store_id: str, item_id: str) -> bool:
        """이 상점에 팔 수 있는 아이템인지.

        일반 상점은 전부, 그 외는 진열 목록에 있거나 매입가를 기억하는 아이템만.
        """
        store = self._catalog.get(store_id)
        if store is None:
            return False
        if store.is_general_store:
            return True
        return (
            store.find_item(item_id) is not None
            or self.get_memory_price(store_id, item_id) is not None
        )

    def resolve_price(
        self,
        store_id: str,
        item_id: str,
        base_price: int = GENERAL_STORE_BASE_PRICE,
    ) -> Optional[int]:
        """상점 기준가. 기억된 매입가 → 카탈로그 가격 → (일반 상점) base_price.

        어디에도 해당하지 않으면 None (매입 불가).
        """
        remembered = self.get_memory_price(store_id, item_id)
        if remembered is not None:
            return remembered

        catalog_price = self._catalog.get_catalog_price(store_id, item_id)
        if catalog_price is not None:
            return catalog_price

        if self._catalog.is_general_store(store_id):
            return base_price
        return None

    def get_store_listing(self, store_id: str) -> list[StoreListing]:
        """판매 목록: 카탈로그 진열품 + 플레이어가 팔아서 생긴 물건."""
        store = self._catalog.get(store_id)
        if store is None:
            logger.warning("Store not found: %s", store_id)
            return []

        listing: list[StoreListing] = []
        for store_item in store.items:
            current = self.get_stock(store_id, store_item.item_id)
            if current is None and not self.is_initialized(store_id):
                current = store_item.stock
            listing.append(
                StoreListing(
                    item_id=store_item.item_id,
                    price=store_item.price,
                    stock=current,
                )
            )

        listed = {entry.item_id for entry in listing}
        for item_id, count in self._stock.get(store_id, {}).items():
            if item_id in listed:
                continue
            price = self.get_memory_price(store_id, item_id)
            if price is None:
                continue
            listing.append(
                StoreListing(item_id=item_id, price=price, stock=count, from_player=True)
            )
        return listing

    # === 변경 ===

    def decrease_stock(self, store_id: str, item_id: str, quantity: int) -> bool:
        """재고 차감. 무제한이면 항상 성공, 부족하면 변경 없이 False."""
        if not self.initialize_store_stock(store_id):
            return False

        stock = self._stock[store_id]
        current = stock.get(item_id)
        if current is None:
            return True
        if current < quantity:
            return False
        stock[item_id] = current - quantity
        return True

    def increase_stock(
        self, store_id: str, item_id: str, quantity: int, price: int
    ) -> None:
        """플레이어 판매분 입고 + 매입가 기록 (덮어쓰기).

        카탈로그상 무제한인 아이템은 무제한으로 남는다.
        """
        if not self.initialize_store_stock(store_id):
            return

        store = self._catalog.get(store_id)
        store_item = store.find_item(item_id)
        if store_item is None or store_item.stock is not None:
            stock = self._stock[store_id]
            stock[item_id] = stock.get(item_id, 0) + quantity

        self._memory_price.setdefault(store_id, {})[item_id] = price

    # === 직렬화 ===

    def to_dict(self) -> dict:
        return {
            "stock": {sid: dict(items) for sid, items in self._stock.items()},
            "memory_price": {
                sid: dict(prices) for sid, prices in self._memory_price.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict, catalog: StoreCatalog) -> "StoreRuntimeState":
        """저장본 복원. 카탈로그와 맞지 않는 값도 받아들이되 음수 재고는 0으로, 음수 가격은 버린다."""
        state = cls(catalog)
        for store_id, items in (data.get("stock") or {}).items():
            state._stock[store_id] = {
                item_id: max(0, int(count)) for item_id, count in items.items()
            }
        for store_id, prices in (data.get("memory_price") or {}).items():
            restored: dict[str, int] = {}
            for item_id, price in prices.items():
                if int(price) < 0:
                    logger.warning(
                        "Skipping negative memory price %s for %s/%s",
                        price, store_id, item_id,
                    )
                    continue
                restored[item_id] = int(price)
            state._memory_price[store_id] = restored
        return state
