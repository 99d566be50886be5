"""아이템 카탈로그 - JSON 로드 + 조회"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .models import ItemAction, ItemDefinition, ItemType

logger = logging.getLogger(__name__)


def parse_item(raw: dict) -> ItemDefinition:
    """items.json 항목 하나를 ItemDefinition으로 변환.

    필수 키 누락 → KeyError, 잘못된 enum 값/빈 액션 목록 → ValueError.
    """
    actions = tuple(ItemAction(a) for a in raw["availableActions"])
    if not actions:
        raise ValueError("availableActions must not be empty")

    max_stack = raw.get("maxStack")
    if max_stack is not None and int(max_stack) < 1:
        raise ValueError(f"maxStack must be >= 1, got {max_stack}")
    quantity = raw.get("quantity")
    return ItemDefinition(
        id=raw["id"],
        name=raw["name"],
        description=raw.get("description", ""),
        type=ItemType(raw["type"]),
        icon=raw.get("icon", ""),
        default_action=ItemAction(raw["defaultAction"]),
        available_actions=actions,
        image=raw.get("image"),
        examine_image=raw.get("examineImage"),
        max_stack=int(max_stack) if max_stack is not None else None,
        quantity=int(quantity) if quantity is not None else None,
    )


class ItemCatalog:
    """
    아이템 정의 저장소.
    프로세스 시작 시 한 번 로드, 이후 읽기 전용.
    """

    def __init__(self) -> None:
        self._items: dict[str, ItemDefinition] = {}

    def load_from_json(self, path: str | Path) -> int:
        """items.json 로드. 반환: 로드된 수량.

        형식: {"items": [ {...}, ... ]}
        잘못된 항목은 경고 로그 후 건너뛴다.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f).get("items", [])

        count = 0
        for raw in raw_list:
            try:
                item = parse_item(raw)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Failed to load item: %s - %s", raw.get("id", "?"), e)
                continue
            self.register(item)
            count += 1

        logger.info("Loaded %d items from %s", count, path)
        return count

    def register(self, item: ItemDefinition) -> None:
        """정의 등록. 동일 id는 경고 후 덮어쓴다."""
        if item.id in self._items:
            logger.warning("Overwriting existing item: %s", item.id)
        self._items[item.id] = item

    def get(self, item_id: str) -> Optional[ItemDefinition]:
        """O(1) 조회. 없으면 None."""
        return self._items.get(item_id)

    def get_all(self) -> list[ItemDefinition]:
        return list(self._items.values())

    def count(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items
