"""Game API endpoints."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from src.api.schemas import (
    ActionResponse,
    ButtonInfo,
    ChoiceInfo,
    ChoiceRequest,
    CreateSessionRequest,
    ErrorResponse,
    ExamineRequest,
    GameStateResponse,
    InventoryActionRequest,
    InventoryInfo,
    KeyRequest,
    MoveItemRequest,
    NavigateRequest,
    SaveResponse,
    SceneInfo,
    SlotInfo,
    SlotRequest,
    StoreEntryInfo,
    StoreInfo,
    TradeRequest,
    TradeResponse,
    UnequipRequest,
)
from src.core.flow.models import Choice, ContinueBackConfig, SceneView
from src.core.item.inventory import SlotIndexError
from src.core.item.models import InventoryItem
from src.core.logging import get_logger
from src.core.session import ActionResult, GameSession
from src.core.store.trade import TradeResult
from src.db.database import get_db
from src.services.game_service import (
    GameService,
    SessionExistsError,
    SessionNotFoundError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/game", tags=["game"])

NOT_FOUND = {404: {"model": ErrorResponse}}
BAD_SLOT = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


def get_game_service(request: Request) -> GameService:
    """GameService 인스턴스 반환 (의존성 주입)"""
    service: GameService = request.app.state.game_service
    return service


@contextmanager
def _session_errors(session_id: str) -> Iterator[None]:
    """서비스 예외 → HTTP 에러"""
    try:
        yield
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    except SlotIndexError as e:
        raise HTTPException(status_code=400, detail=str(e))


# === 응답 변환 ===


def _choice_info(choice: Optional[Choice]) -> Optional[ChoiceInfo]:
    if choice is None:
        return None
    data = choice.to_dict()
    return ChoiceInfo(
        id=data["id"],
        text=data["text"],
        action=data["action"],
        target=data["target"],
        item_id=choice.item_id,
    )


def _button_info(config: Optional[ContinueBackConfig]) -> Optional[ButtonInfo]:
    if config is None:
        return None
    return ButtonInfo(**config.to_dict())


def _build_scene_info(view: SceneView) -> SceneInfo:
    return SceneInfo(
        event_id=view.event_id,
        text=view.text,
        image=view.image,
        choices=[_choice_info(c) for c in view.choices],
        action_slots=[_choice_info(c) for c in view.action_slots()],
        continue_button=_button_info(view.continue_config),
        back_button=_button_info(view.back_config),
        inventory_accessible=view.inventory_accessible,
        is_examining=view.is_examining,
    )


def _slot_info(item: Optional[InventoryItem]) -> Optional[SlotInfo]:
    if item is None:
        return None
    definition = item.definition
    return SlotInfo(
        item_id=definition.id,
        name=definition.name,
        icon=definition.icon,
        quantity=item.units,
        default_action=definition.default_action.value,
        available_actions=[a.value for a in definition.available_actions],
    )


def _build_store_info(session: GameSession) -> Optional[StoreInfo]:
    store = session.current_store()
    if store is None:
        return None
    entries = []
    for listing in session.store_listing():
        definition = session.catalogs.items.get(listing.item_id)
        entries.append(
            StoreEntryInfo(
                item_id=listing.item_id,
                name=definition.name if definition else listing.item_id,
                price=listing.price,
                stock=listing.stock,
                from_player=listing.from_player,
            )
        )
    return StoreInfo(
        store_id=store.id,
        name=store.name,
        is_general_store=store.is_general_store,
        items=entries,
    )


def _build_state(session: GameSession) -> GameStateResponse:
    inventory = session.inventory
    return GameStateResponse(
        session_id=session.session_id,
        coins=session.coins,
        scene=_build_scene_info(session.view()),
        inventory=InventoryInfo(
            width=inventory.width,
            height=inventory.height,
            slots=[_slot_info(s) for s in inventory.slots],
            equipment={
                slot.value: _slot_info(item)
                for slot, item in inventory.equipment.items()
            },
        ),
        store=_build_store_info(session),
        keybinds=session.keybinds.to_dict(),
    )


def _action_response(result: ActionResult, session: GameSession) -> ActionResponse:
    return ActionResponse(
        success=result.success,
        action=result.action_type,
        message=result.message,
        data=result.data,
        state=_build_state(session),
    )


def _trade_response(result: TradeResult, session: GameSession) -> TradeResponse:
    return TradeResponse(**result.to_dict(), state=_build_state(session))


# === 세션 ===


@router.post(
    "/sessions",
    response_model=GameStateResponse,
    responses={409: {"model": ErrorResponse}},
)
def create_session(
    request: CreateSessionRequest,
    service: GameService = Depends(get_game_service),
) -> GameStateResponse:
    """
    새 게임 세션

    시작 장면에서 기본 코인과 빈 인벤토리로 시작합니다.
    """
    try:
        session = service.create_session(request.session_id)
    except SessionExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _build_state(session)


@router.get("/{session_id}/state", response_model=GameStateResponse, responses=NOT_FOUND)
def get_game_state(
    session_id: str,
    service: GameService = Depends(get_game_service),
) -> GameStateResponse:
    """현재 게임 상태 조회"""
    with _session_errors(session_id):
        session = service.get_session(session_id)
    return _build_state(session)


# === 장면 흐름 ===


@router.post(
    "/{session_id}/choice", response_model=GameStateResponse, responses=NOT_FOUND
)
def make_choice(
    session_id: str,
    request: ChoiceRequest,
    service: GameService = Depends(get_game_service),
) -> GameStateResponse:
    with _session_errors(session_id):
        service.choose(session_id, request.slot)
        session = service.get_session(session_id)
    return _build_state(session)


@router.post(
    "/{session_id}/continue", response_model=GameStateResponse, responses=NOT_FOUND
)
def press_continue(
    session_id: str,
    service: GameService = Depends(get_game_service),
) -> GameStateResponse:
    with _session_errors(session_id):
        service.handle_continue(session_id)
        session = service.get_session(session_id)
    return _build_state(session)


@router.post("/{session_id}/back", response_model=GameStateResponse, responses=NOT_FOUND)
def press_back(
    session_id: str,
    service: GameService = Depends(get_game_service),
) -> GameStateResponse:
    with _session_errors(session_id):
        service.handle_back(session_id)
        session = service.get_session(session_id)
    return _build_state(session)


@router.post(
    "/{session_id}/navigate", response_model=ActionResponse, responses=NOT_FOUND
)
def navigate(
    session_id: str,
    request: NavigateRequest,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    """장면 직접 이동. 없는 장면이면 success=false, 현재 장면 유지."""
    with _session_errors(session_id):
        moved = service.navigate(session_id, request.event_id)
        session = service.get_session(session_id)
    message = "" if moved else f"Scene not found: {request.event_id}"
    return _action_response(ActionResult(moved, "navigate", message), session)


@router.post(
    "/{session_id}/examine", response_model=ActionResponse, responses=NOT_FOUND
)
def examine(
    session_id: str,
    request: ExamineRequest,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    with _session_errors(session_id):
        opened = service.examine(
            session_id, request.name, request.description, request.image
        )
        session = service.get_session(session_id)
    message = "" if opened else "Already examining"
    return _action_response(ActionResult(opened, "examine", message), session)


@router.post(
    "/{session_id}/close-examine", response_model=ActionResponse, responses=NOT_FOUND
)
def close_examine(
    session_id: str,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    with _session_errors(session_id):
        closed = service.close_examine(session_id)
        session = service.get_session(session_id)
    message = "" if closed else "Not examining"
    return _action_response(ActionResult(closed, "close_examine", message), session)


@router.post("/{session_id}/key", response_model=ActionResponse, responses=NOT_FOUND)
def press_key(
    session_id: str,
    request: KeyRequest,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    with _session_errors(session_id):
        result = service.press_key(session_id, request.key)
        session = service.get_session(session_id)
    return _action_response(result, session)


# === 인벤토리 ===


@router.post(
    "/{session_id}/inventory/click", response_model=ActionResponse, responses=BAD_SLOT
)
def click_inventory_slot(
    session_id: str,
    request: SlotRequest,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    """
    슬롯 클릭

    상점에서 매입하는 아이템이면 1개 판매, 아니면 아이템 기본 액션.
    """
    with _session_errors(session_id):
        result = service.click_slot(session_id, request.slot)
        session = service.get_session(session_id)
    return _action_response(result, session)


@router.post(
    "/{session_id}/inventory/action", response_model=ActionResponse, responses=BAD_SLOT
)
def inventory_action(
    session_id: str,
    request: InventoryActionRequest,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    with _session_errors(session_id):
        result = service.inventory_action(
            session_id, request.slot, request.action, request.quantity
        )
        session = service.get_session(session_id)
    return _action_response(result, session)


@router.post(
    "/{session_id}/inventory/move", response_model=GameStateResponse, responses=BAD_SLOT
)
def move_inventory_item(
    session_id: str,
    request: MoveItemRequest,
    service: GameService = Depends(get_game_service),
) -> GameStateResponse:
    with _session_errors(session_id):
        service.move_item(session_id, request.from_slot, request.to_slot)
        session = service.get_session(session_id)
    return _build_state(session)


@router.post(
    "/{session_id}/equipment/unequip", response_model=ActionResponse, responses=NOT_FOUND
)
def unequip(
    session_id: str,
    request: UnequipRequest,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    with _session_errors(session_id):
        result = service.unequip(session_id, request.slot)
        session = service.get_session(session_id)
    return _action_response(result, session)


# === 상점 ===


@router.post("/{session_id}/store/buy", response_model=TradeResponse, responses=NOT_FOUND)
def buy_item(
    session_id: str,
    request: TradeRequest,
    service: GameService = Depends(get_game_service),
) -> TradeResponse:
    """현재 장면의 상점에서 구매"""
    with _session_errors(session_id):
        result = service.buy(session_id, request.item_id, request.quantity)
        session = service.get_session(session_id)
    return _trade_response(result, session)


@router.post(
    "/{session_id}/store/sell", response_model=TradeResponse, responses=NOT_FOUND
)
def sell_item(
    session_id: str,
    request: TradeRequest,
    service: GameService = Depends(get_game_service),
) -> TradeResponse:
    """현재 장면의 상점에 판매"""
    with _session_errors(session_id):
        result = service.sell(session_id, request.item_id, request.quantity)
        session = service.get_session(session_id)
    return _trade_response(result, session)


# === 저장/불러오기 ===


@router.post("/{session_id}/save", response_model=SaveResponse, responses=NOT_FOUND)
def save_game(
    session_id: str,
    service: GameService = Depends(get_game_service),
    db: Session = Depends(get_db),
) -> SaveResponse:
    with _session_errors(session_id):
        orm = service.save_session(db, session_id)
    return SaveResponse(
        success=True,
        session_id=orm.session_id,
        current_event_id=orm.current_event_id,
        updated_at=orm.updated_at.isoformat(),
    )


@router.post(
    "/sessions/{session_id}/load", response_model=GameStateResponse, responses=NOT_FOUND
)
def load_game(
    session_id: str,
    service: GameService = Depends(get_game_service),
    db: Session = Depends(get_db),
) -> GameStateResponse:
    """저장본 불러오기. 메모리에 같은 세션이 있으면 저장 시점으로 되돌린다."""
    with _session_errors(session_id):
        session = service.load_session(db, session_id)
    return _build_state(session)
