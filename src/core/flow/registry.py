"""장면 그래프 - events.json 로드 + 조회"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .models import (
    Choice,
    ContinueBackConfig,
    EventType,
    Scene,
    parse_action,
)

logger = logging.getLogger(__name__)


def _parse_config(raw: Optional[dict]) -> Optional[ContinueBackConfig]:
    if not raw:
        return None
    return ContinueBackConfig(
        text=raw.get("text", ""),
        action=parse_action(raw["action"]),
        target=raw.get("target"),
    )


def parse_scene(raw: dict) -> Scene:
    """events.json 항목 하나를 Scene으로 변환."""
    choices = tuple(
        Choice(
            id=c["id"],
            text=c.get("text", ""),
            action=parse_action(c["action"]),
            target=c.get("target"),
            item_id=c.get("itemId"),
        )
        for c in raw.get("choices") or []
    )
    accessible = raw.get("inventoryAccessible")
    return Scene(
        id=raw["id"],
        type=EventType(raw["type"]),
        title=raw.get("title", ""),
        description=raw.get("description", ""),
        image=raw.get("image") or None,
        choices=choices,
        continue_config=_parse_config(raw.get("continue")),
        back_config=_parse_config(raw.get("back")),
        inventory_accessible=bool(accessible) if accessible is not None else None,
    )


class EventGraph:
    """
    장면 저장소.
    프로세스 시작 시 한 번 로드, 이후 읽기 전용.
    """

    def __init__(self) -> None:
        self._scenes: dict[str, Scene] = {}

    def load_from_json(self, path: str | Path) -> int:
        """events.json 로드. 형식: {"events": [ {...}, ... ]}"""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f).get("events", [])

        count = 0
        for raw in raw_list:
            try:
                scene = parse_scene(raw)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Failed to load event: %s - %s", raw.get("id", "?"), e)
                continue
            self.register(scene)
            count += 1

        logger.info("Loaded %d events from %s", count, path)
        return count

    def register(self, scene: Scene) -> None:
        if scene.id in self._scenes:
            logger.warning("Overwriting existing event: %s", scene.id)
        self._scenes[scene.id] = scene

    def get(self, event_id: str) -> Optional[Scene]:
        return self._scenes.get(event_id)

    def get_all(self) -> list[Scene]:
        return list(self._scenes.values())

    def count(self) -> int:
        return len(self._scenes)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._scenes

    def find_dangling_targets(self) -> list[tuple[str, str]]:
        """존재하지 않는 장면을 가리키는 (장면 id, target) 목록.

        선택지와 계속/뒤로 설정 모두 검사. 로드 후 데이터 점검용.
        """
        dangling: list[tuple[str, str]] = []
        for scene in self._scenes.values():
            targets = [c.target for c in scene.choices]
            for config in (scene.continue_config, scene.back_config):
                if config is not None:
                    targets.append(config.target)
            for target in targets:
                if target and target not in self._scenes:
                    dangling.append((scene.id, target))
        return dangling
