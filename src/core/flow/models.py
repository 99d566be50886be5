"""장면(이벤트) 그래프 도메인 모델"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class EventType(str, Enum):
    LOCATION = "location"
    EVENT = "event"
    COMBAT = "combat"
    DIALOGUE = "dialogue"


class ActionType(str, Enum):
    NAVIGATE = "navigate"
    SKILL_CHECK = "skill_check"
    OPEN_INVENTORY = "open_inventory"
    COMBAT = "combat"
    ADD_ITEM = "add_item"
    CUSTOM = "custom"


# 액션 바 고정 슬롯 수 (q w e / a s d)
ACTION_SLOT_COUNT = 6

# 데이터에 모르는 액션이 와도 로드는 하고, 실행 시 경고 후 무시
ChoiceAction = Union[ActionType, str]


def parse_action(value: str) -> ChoiceAction:
    try:
        return ActionType(value)
    except ValueError:
        return value


def _action_value(action: ChoiceAction) -> str:
    return action.value if isinstance(action, ActionType) else str(action)


@dataclass(frozen=True)
class Choice:
    """장면의 선택지"""

    id: str
    text: str
    action: ChoiceAction
    target: Optional[str] = None  # 이동할 장면 id
    item_id: Optional[str] = None  # add_item 전용

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "text": self.text,
            "action": _action_value(self.action),
            "target": self.target,
        }
        if self.item_id is not None:
            data["itemId"] = self.item_id
        return data


@dataclass(frozen=True)
class ContinueBackConfig:
    """계속/뒤로 버튼 설정. None이면 버튼 숨김."""

    text: str
    action: ChoiceAction
    target: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "action": _action_value(self.action),
            "target": self.target,
        }


# 살펴보기 오버레이의 계속 버튼
CLOSE_EXAMINE_CONFIG = ContinueBackConfig(text="Close", action=ActionType.CUSTOM)


@dataclass(frozen=True)
class Scene:
    """장면 원형 - 불변. events.json에서 로드."""

    id: str
    type: EventType
    title: str = ""
    description: str = ""
    image: Optional[str] = None
    choices: tuple[Choice, ...] = ()
    continue_config: Optional[ContinueBackConfig] = None
    back_config: Optional[ContinueBackConfig] = None
    inventory_accessible: Optional[bool] = None  # None = type 기준 기본값

    @property
    def text(self) -> str:
        if self.title:
            return f"{self.title}\n\n{self.description}"
        return self.description

    @property
    def is_inventory_accessible(self) -> bool:
        """명시값 우선, 없으면 dialogue만 비활성."""
        if self.inventory_accessible is not None:
            return self.inventory_accessible
        return self.type != EventType.DIALOGUE


@dataclass(frozen=True)
class SceneView:
    """표현 계층이 읽는 현재 화면 상태 (읽기 전용)"""

    event_id: str
    text: str
    image: Optional[str]
    choices: tuple[Choice, ...] = field(default_factory=tuple)
    continue_config: Optional[ContinueBackConfig] = None
    back_config: Optional[ContinueBackConfig] = None
    inventory_accessible: bool = True
    is_examining: bool = False

    def action_slots(self) -> list[Optional[Choice]]:
        """선택지를 6개 고정 슬롯에 배치. 빈 슬롯은 None, 7번째부터는 버림."""
        slots: list[Optional[Choice]] = list(self.choices[:ACTION_SLOT_COUNT])
        slots.extend([None] * (ACTION_SLOT_COUNT - len(slots)))
        return slots

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "text": self.text,
            "image": self.image,
            "choices": [c.to_dict() for c in self.choices],
            "continue": self.continue_config.to_dict()
            if self.continue_config
            else None,
            "back": self.back_config.to_dict() if self.back_config else None,
            "inventory_accessible": self.inventory_accessible,
            "is_examining": self.is_examining,
        }
