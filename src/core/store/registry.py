"""상점 카탈로그 - JSON 로드 + 가격 조회"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .models import StoreDefinition, StoreItem

logger = logging.getLogger(__name__)


def parse_store(raw: dict) -> StoreDefinition:
    items = []
    for entry in raw.get("items", []):
        price = int(entry["price"])
        if price < 0:
            raise ValueError(f"Negative price for {entry['itemId']}: {price}")
        stock = entry.get("stock")
        items.append(
            StoreItem(
                item_id=entry["itemId"],
                price=price,
                stock=int(stock) if stock is not None else None,
            )
        )
    return StoreDefinition(
        id=raw["id"],
        name=raw.get("name", raw["id"]),
        items=tuple(items),
        is_general_store=bool(raw.get("isGeneralStore", False)),
    )


class StoreCatalog:
    """상점 정의 저장소. 로드 후 읽기 전용."""

    def __init__(self) -> None:
        self._stores: dict[str, StoreDefinition] = {}

    def load_from_json(self, path: str | Path) -> int:
        """stores.json 로드. 형식: {"stores": [ {...}, ... ]}"""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f).get("stores", [])

        count = 0
        for raw in raw_list:
            try:
                store = parse_store(raw)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Failed to load store: %s - %s", raw.get("id", "?"), e)
                continue
            self.register(store)
            count += 1

        logger.info("Loaded %d stores from %s", count, path)
        return count

    def register(self, store: StoreDefinition) -> None:
        if store.id in self._stores:
            logger.warning("Overwriting existing store: %s", store.id)
        self._stores[store.id] = store

    def get(self, store_id: str) -> Optional[StoreDefinition]:
        return self._stores.get(store_id)

    def get_all(self) -> list[StoreDefinition]:
        return list(self._stores.values())

    def count(self) -> int:
        return len(self._stores)

    def is_general_store(self, store_id: str) -> bool:
        store = self.get(store_id)
        return store is not None and store.is_general_store

    def get_catalog_price(self, store_id: str, item_id: str) -> Optional[int]:
        """상점이 원래 진열하는 아이템의 가격. 없으면 None."""
        store = self.get(store_id)
        if store is None:
            return None
        store_item = store.find_item(item_id)
        return store_item.price if store_item is not None else None

    def initial_stock(self, store_id: str) -> Optional[dict[str, int]]:
        """유한 재고 초기값. 무제한 아이템은 포함하지 않는다. 상점 없음 → None."""
        store = self.get(store_id)
        if store is None:
            return None
        return {
            item.item_id: item.stock for item in store.items if item.stock is not None
        }
