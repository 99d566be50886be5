"""
Game Flow Controller
====================
장면 그래프 상태 머신

현재 장면 포인터와 살펴보기(examine) 오버레이 상태를 가진다.
선택지/계속/뒤로 입력을 장면 전환으로 해석하고,
표현 계층이 읽는 SceneView를 만든다.

규칙:
- current_event_id는 항상 그래프에 존재한다 (없는 id로 이동 → 거부, 상태 유지)
- 살펴보기 중에는 선택지가 숨겨지고 계속 버튼이 "Close"로 바뀐다
- 살펴보기 중 또 살펴보기 요청 → 거부 (처음 스냅샷 유지)
- 장면 이동에 성공하면 열려 있던 살펴보기는 끝난다
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.core.item.inventory import AddResult, Inventory
from src.core.item.models import ItemDefinition
from src.core.item.registry import ItemCatalog
from src.core.logging import get_logger

from .models import (
    CLOSE_EXAMINE_CONFIG,
    ActionType,
    Choice,
    ContinueBackConfig,
    Scene,
    SceneView,
)
from .registry import EventGraph

logger = get_logger(__name__)

DEFAULT_START_EVENT_ID = "town_start"


@dataclass(frozen=True)
class _ExamineOverlay:
    """살펴보기 중 표시 내용 + 시작 시점 스냅샷"""

    text: str
    image: Optional[str]
    previous_text: str
    previous_image: Optional[str]


@dataclass(frozen=True)
class ItemGrant:
    """add_item 선택지로 지급된 내역"""

    item_id: str
    result: AddResult


class GameFlowController:
    """
    장면 흐름 관리자

    세션마다 하나씩 생성. 그래프/카탈로그는 공유 참조, 인벤토리는 세션 소유.
    """

    def __init__(
        self,
        graph: EventGraph,
        items: ItemCatalog,
        inventory: Inventory,
        start_event_id: str = DEFAULT_START_EVENT_ID,
    ) -> None:
        if start_event_id not in graph:
            raise ValueError(f"Start event not found: {start_event_id}")

        self._graph = graph
        self._items = items
        self._inventory = inventory
        self._start_event_id = start_event_id
        self._current_event_id = start_event_id

        self._examine: Optional[_ExamineOverlay] = None
        # close_examine 후 복원된 표시 내용. 다음 이동 때 해제.
        self._restored: Optional[tuple[str, Optional[str]]] = None

        # 마지막 handle_choice에서 지급된 아이템 (서비스 계층 알림용)
        self.last_grant: Optional[ItemGrant] = None

    # === 상태 조회 ===

    @property
    def current_event_id(self) -> str:
        return self._current_event_id

    @property
    def start_event_id(self) -> str:
        return self._start_event_id

    @property
    def current_event(self) -> Optional[Scene]:
        return self._graph.get(self._current_event_id)

    @property
    def is_examining(self) -> bool:
        return self._examine is not None

    # === 이동 ===

    def navigate_to(self, event_id: str) -> Optional[Scene]:
        """장면 이동. 없는 id면 경고 후 None, 현재 장면 유지."""
        scene = self._graph.get(event_id)
        if scene is None:
            logger.warning(
                "Scene not found: %s (staying at %s)", event_id, self._current_event_id
            )
            return None

        if self._examine is not None:
            logger.debug("Navigation closes examine overlay")
        self._examine = None
        self._restored = None
        self._current_event_id = event_id
        logger.debug("Navigated to %s", event_id)
        return scene

    def handle_choice(self, choice: Optional[Choice]) -> Optional[Scene]:
        """선택지 처리. 반환: 처리 후 장면 (이동 실패 시 None)."""
        self.last_grant = None
        if choice is None or not choice.action:
            return None

        if self._examine is not None:
            logger.warning("Choice %s ignored while examining", choice.id)
            return self.current_event

        action = choice.action
        if action in (ActionType.NAVIGATE, ActionType.SKILL_CHECK):
            if choice.target:
                return self.navigate_to(choice.target)
            return self.current_event

        if action == ActionType.ADD_ITEM:
            self._grant_choice_item(choice)
            if choice.target:
                return self.navigate_to(choice.target)
            return self.current_event

        if action in (ActionType.OPEN_INVENTORY, ActionType.COMBAT):
            return self.current_event

        logger.warning("Unhandled choice action: %s (choice=%s)", action, choice.id)
        return self.current_event

    def _grant_choice_item(self, choice: Choice) -> None:
        if not choice.item_id:
            return
        definition = self._items.get(choice.item_id)
        if definition is None:
            logger.warning("add_item: item not found %s", choice.item_id)
            return
        result = self._inventory.add_item(definition, definition.quantity or 1)
        self.last_grant = ItemGrant(item_id=definition.id, result=result)

    def handle_continue(self) -> Optional[Scene]:
        """계속 버튼. 살펴보기 중이면 오버레이를 닫는다."""
        if self._examine is not None:
            self.close_examine()
            return self.current_event
        return self._follow(self.continue_config)

    def handle_back(self) -> Optional[Scene]:
        """뒤로 버튼. 살펴보기 중에는 설정이 없으므로 아무것도 하지 않는다."""
        return self._follow(self.back_config)

    def _follow(self, config: Optional[ContinueBackConfig]) -> Optional[Scene]:
        if config is None:
            return self.current_event
        if config.action == ActionType.NAVIGATE and config.target:
            return self.navigate_to(config.target)
        return self.current_event

    # === 살펴보기 ===

    def examine_item(
        self, name: str, description: str, image: Optional[str] = None
    ) -> bool:
        """살펴보기 오버레이 열기. 이미 열려 있으면 거부 (False)."""
        if self._examine is not None:
            logger.warning("Already examining; ignored examine of %s", name)
            return False

        previous_text = self.text
        previous_image = self.image
        self._examine = _ExamineOverlay(
            text=f"{name}\n\n{description}",
            image=image or previous_image,
            previous_text=previous_text,
            previous_image=previous_image,
        )
        logger.debug("Examining %s", name)
        return True

    def examine_definition(self, definition: ItemDefinition) -> bool:
        return self.examine_item(
            definition.name, definition.description, definition.examine_image
        )

    def close_examine(self) -> bool:
        """오버레이 닫기. 시작 시점 텍스트/이미지 복원. 열려 있지 않으면 False."""
        overlay = self._examine
        if overlay is None:
            return False

        self._examine = None
        scene = self.current_event
        previous_text = overlay.previous_text
        previous_image = overlay.previous_image
        if not previous_text and scene is not None:
            previous_text = scene.text
            previous_image = scene.image
        self._restored = (previous_text, previous_image)
        return True

    # === 파생 뷰 ===

    @property
    def text(self) -> str:
        if self._examine is not None:
            return self._examine.text
        if self._restored is not None:
            return self._restored[0]
        scene = self.current_event
        return scene.text if scene is not None else ""

    @property
    def image(self) -> Optional[str]:
        if self._examine is not None:
            return self._examine.image
        if self._restored is not None:
            return self._restored[1]
        scene = self.current_event
        return scene.image if scene is not None else None

    @property
    def choices(self) -> tuple[Choice, ...]:
        if self._examine is not None:
            return ()
        scene = self.current_event
        return scene.choices if scene is not None else ()

    @property
    def continue_config(self) -> Optional[ContinueBackConfig]:
        if self._examine is not None:
            return CLOSE_EXAMINE_CONFIG
        scene = self.current_event
        return scene.continue_config if scene is not None else None

    @property
    def back_config(self) -> Optional[ContinueBackConfig]:
        if self._examine is not None:
            return None
        scene = self.current_event
        return scene.back_config if scene is not None else None

    @property
    def inventory_accessible(self) -> bool:
        scene = self.current_event
        return scene.is_inventory_accessible if scene is not None else True

    def view(self) -> SceneView:
        return SceneView(
            event_id=self._current_event_id,
            text=self.text,
            image=self.image,
            choices=self.choices,
            continue_config=self.continue_config,
            back_config=self.back_config,
            inventory_accessible=self.inventory_accessible,
            is_examining=self.is_examining,
        )

    # === 복원 ===

    def restore_position(self, event_id: Optional[str]) -> str:
        """저장된 장면으로 복귀. 없는 장면이면 시작 장면으로. 반환: 최종 장면 id."""
        if event_id and self.navigate_to(event_id) is not None:
            return self._current_event_id
        if event_id:
            logger.warning(
                "Saved scene %s missing; falling back to %s",
                event_id,
                self._start_event_id,
            )
        self.navigate_to(self._start_event_id)
        return self._current_event_id
