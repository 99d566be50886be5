"""게임 세션 Service - Core↔DB 연결, EventBus 통신

세션 보관(메모리), 입력 처리 후 이벤트 발행, 저장/불러오기.
입력 하나가 끝날 때마다 EventBus 체인을 초기화한다.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.flow.models import SceneView
from src.core.item.models import EquipmentSlot, ItemAction
from src.core.logging import get_logger
from src.core.session import ActionResult, Catalogs, GameSession
from src.core.store.trade import TradeResult
from src.db.models import SaveGameModel

logger = get_logger(__name__)

SOURCE = "game_service"

# 인벤토리 입력 결과 action → 이벤트
_ITEM_EVENTS: dict[str, str] = {
    ItemAction.USE.value: EventTypes.ITEM_USED,
    ItemAction.EAT.value: EventTypes.ITEM_USED,
    ItemAction.DRINK.value: EventTypes.ITEM_USED,
    ItemAction.DROP.value: EventTypes.ITEM_DROPPED,
    ItemAction.EQUIP.value: EventTypes.ITEM_EQUIPPED,
    ItemAction.UNEQUIP.value: EventTypes.ITEM_UNEQUIPPED,
    ItemAction.SELL.value: EventTypes.ITEM_SOLD,
}


class SessionNotFoundError(KeyError):
    """존재하지 않는 세션 id"""


class SessionExistsError(ValueError):
    """이미 사용 중인 세션 id"""


class GameService:
    """게임 세션 관리 + 입력 처리"""

    def __init__(
        self,
        catalogs: Catalogs,
        event_bus: EventBus,
        **session_options: Any,
    ):
        """session_options: GameSession 생성 옵션 (start_event_id, inventory_width 등)"""
        self._catalogs = catalogs
        self._bus = event_bus
        self._options = session_options
        self._sessions: dict[str, GameSession] = {}

    @property
    def catalogs(self) -> Catalogs:
        return self._catalogs

    # === 세션 관리 ===

    def create_session(self, session_id: Optional[str] = None) -> GameSession:
        session_id = session_id or str(uuid.uuid4())
        if session_id in self._sessions:
            raise SessionExistsError(f"Session already exists: {session_id}")

        session = GameSession(session_id, self._catalogs, **self._options)
        self._sessions[session_id] = session
        logger.info(
            "Created session %s at %s", session_id, session.flow.current_event_id
        )
        return session

    def get_session(self, session_id: str) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def remove_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    # === 장면 흐름 ===

    def choose(self, session_id: str, slot_index: int) -> SceneView:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            session.choose(slot_index)
        return session.view()

    def handle_continue(self, session_id: str) -> SceneView:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            session.handle_continue()
        return session.view()

    def handle_back(self, session_id: str) -> SceneView:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            session.handle_back()
        return session.view()

    def navigate(self, session_id: str, event_id: str) -> bool:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            scene = session.navigate_to(event_id)
        return scene is not None

    def examine(
        self,
        session_id: str,
        name: str,
        description: str,
        image: Optional[str] = None,
    ) -> bool:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            opened = session.examine_item(name, description, image)
        return opened

    def close_examine(self, session_id: str) -> bool:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            closed = session.close_examine()
        return closed

    def press_key(self, session_id: str, key: str) -> ActionResult:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            result = session.press_key(key)
        return result

    # === 인벤토리 ===

    def click_slot(self, session_id: str, slot_index: int) -> ActionResult:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            result = session.click_inventory_slot(slot_index)
            self._publish_item_result(session_id, result)
        return result

    def inventory_action(
        self,
        session_id: str,
        slot_index: int,
        action: ItemAction,
        quantity: int = 1,
    ) -> ActionResult:
        session = self.get_session(session_id)
        with _FlowWatch(self, session):
            result = session.inventory_action(slot_index, action, quantity)
            self._publish_item_result(session_id, result)
        return result

    def move_item(self, session_id: str, from_index: int, to_index: int) -> None:
        self.get_session(session_id).move_item(from_index, to_index)

    def unequip(self, session_id: str, slot: EquipmentSlot) -> ActionResult:
        session = self.get_session(session_id)
        result = session.unequip(slot)
        self._publish_item_result(session_id, result)
        self._bus.reset_chain()
        return result

    # === 상점 ===

    def buy(self, session_id: str, item_id: str, quantity: int = 1) -> TradeResult:
        result = self.get_session(session_id).buy(item_id, quantity)
        if result.success:
            self._emit(EventTypes.ITEM_BOUGHT, session_id, **result.to_dict())
        self._bus.reset_chain()
        return result

    def sell(self, session_id: str, item_id: str, quantity: int = 1) -> TradeResult:
        result = self.get_session(session_id).sell(item_id, quantity)
        if result.success:
            self._emit(EventTypes.ITEM_SOLD, session_id, **result.to_dict())
        self._bus.reset_chain()
        return result

    # === 저장/불러오기 ===

    def save_session(self, db: Session, session_id: str) -> SaveGameModel:
        """세션 스냅샷 저장. 같은 id의 저장본은 덮어쓴다."""
        snapshot = self.get_session(session_id).to_dict()

        orm = (
            db.query(SaveGameModel)
            .filter(SaveGameModel.session_id == session_id)
            .first()
        )
        if orm is None:
            orm = SaveGameModel(session_id=session_id)
            db.add(orm)

        orm.current_event_id = snapshot["current_event_id"]
        orm.coins = snapshot["currency"]["coins"]
        orm.inventory = snapshot["inventory"]
        orm.store_state = snapshot["stores"]
        orm.keybinds = snapshot["keybinds"]
        orm.updated_at = datetime.utcnow()
        db.commit()

        self._emit(EventTypes.SESSION_SAVED, session_id)
        self._bus.reset_chain()
        logger.info("Saved session %s", session_id)
        return orm

    def load_session(self, db: Session, session_id: str) -> GameSession:
        """저장본으로 세션 복원. 메모리의 같은 id 세션은 교체된다."""
        orm = (
            db.query(SaveGameModel)
            .filter(SaveGameModel.session_id == session_id)
            .first()
        )
        if orm is None:
            raise SessionNotFoundError(session_id)

        snapshot = {
            "session_id": orm.session_id,
            "current_event_id": orm.current_event_id,
            "currency": {"coins": orm.coins},
            "inventory": orm.inventory or {},
            "stores": orm.store_state or {},
            "keybinds": orm.keybinds or {},
        }
        session = GameSession.from_dict(snapshot, self._catalogs, **self._options)
        self._sessions[session_id] = session

        self._emit(
            EventTypes.SESSION_LOADED,
            session_id,
            event_id=session.flow.current_event_id,
        )
        self._bus.reset_chain()
        logger.info(
            "Loaded session %s at %s", session_id, session.flow.current_event_id
        )
        return session

    # === 이벤트 ===

    def _emit(self, event_type: str, session_id: str, **data: Any) -> None:
        self._bus.emit(
            GameEvent(
                event_type=event_type,
                data={"session_id": session_id, **data},
                source=SOURCE,
            )
        )

    def _publish_item_result(self, session_id: str, result: ActionResult) -> None:
        if not result.success:
            return
        event_type = _ITEM_EVENTS.get(result.action_type)
        if event_type is not None:
            self._emit(event_type, session_id, **(result.data or {}))


class _FlowWatch:
    """입력 처리 전후 흐름 상태를 비교해 장면/살펴보기/지급 이벤트 발행."""

    def __init__(self, service: GameService, session: GameSession) -> None:
        self._service = service
        self._session = session

    def __enter__(self) -> "_FlowWatch":
        flow = self._session.flow
        self._event_id = flow.current_event_id
        self._examining = flow.is_examining
        self._grant = flow.last_grant
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self._publish()
        finally:
            self._service._bus.reset_chain()

    def _publish(self) -> None:
        flow = self._session.flow
        sid = self._session.session_id
        emit = self._service._emit

        grant = flow.last_grant
        if grant is not None and grant is not self._grant:
            emit(
                EventTypes.ITEM_ADDED,
                sid,
                item_id=grant.item_id,
                added=grant.result.added,
                dropped=grant.result.dropped,
            )

        if flow.current_event_id != self._event_id:
            emit(
                EventTypes.SCENE_CHANGED,
                sid,
                from_event_id=self._event_id,
                to_event_id=flow.current_event_id,
            )

        if flow.is_examining and not self._examining:
            emit(EventTypes.EXAMINE_OPENED, sid, event_id=flow.current_event_id)
        elif self._examining and not flow.is_examining:
            emit(EventTypes.EXAMINE_CLOSED, sid, event_id=flow.current_event_id)
