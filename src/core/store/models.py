"""상점 도메인 모델 (UI/DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StoreItem:
    """상점 진열 항목. stock=None = 무제한."""

    item_id: str
    price: int
    stock: Optional[int] = None


@dataclass(frozen=True)
class StoreDefinition:
    """상점 원형 - 불변. stores.json에서 로드.

    id는 상점이 열리는 장면(event) id와 같다.
    """

    id: str
    name: str
    items: tuple[StoreItem, ...] = ()
    is_general_store: bool = False  # True면 어떤 아이템이든 매입

    def find_item(self, item_id: str) -> Optional[StoreItem]:
        for store_item in self.items:
            if store_item.item_id == item_id:
                return store_item
        return None


@dataclass(frozen=True)
class StoreListing:
    """현재 판매 목록 한 줄. stock=None = 무제한."""

    item_id: str
    price: int
    stock: Optional[int]
    from_player: bool = False  # 원래 목록에 없고 플레이어가 판 물건

    @property
    def in_stock(self) -> bool:
        return self.stock is None or self.stock > 0

    def to_store_item(self) -> StoreItem:
        return StoreItem(item_id=self.item_id, price=self.price, stock=self.stock)
