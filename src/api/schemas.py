"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from src.core.item.models import EquipmentSlot, ItemAction


# === Request Schemas ===


class CreateSessionRequest(BaseModel):
    """세션 생성 요청. id 생략 시 서버가 발급."""

    session_id: Optional[str] = Field(
        default=None, min_length=1, max_length=50, description="세션 ID"
    )


class ChoiceRequest(BaseModel):
    """액션 바 선택 요청"""

    slot: int = Field(..., ge=0, le=5, description="액션 슬롯 (0~5)")


class NavigateRequest(BaseModel):
    event_id: str = Field(..., min_length=1, description="이동할 장면 ID")


class ExamineRequest(BaseModel):
    """임의 대상 살펴보기 요청"""

    name: str = Field(..., min_length=1)
    description: str = ""
    image: Optional[str] = None


class SlotRequest(BaseModel):
    slot: int = Field(..., description="인벤토리 슬롯 인덱스")


class InventoryActionRequest(BaseModel):
    """컨텍스트 메뉴 액션 요청"""

    slot: int = Field(..., description="인벤토리 슬롯 인덱스")
    action: ItemAction
    quantity: int = Field(default=1, ge=1)


class MoveItemRequest(BaseModel):
    from_slot: int
    to_slot: int


class UnequipRequest(BaseModel):
    slot: EquipmentSlot


class TradeRequest(BaseModel):
    """현재 상점에서 구매/판매 요청"""

    item_id: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)


class KeyRequest(BaseModel):
    key: str = Field(..., min_length=1, description="눌린 키 (예: 'q', ' ', 'Backspace')")


# === Response Schemas ===


class ChoiceInfo(BaseModel):
    """선택지 정보"""

    id: str
    text: str
    action: str
    target: Optional[str] = None
    item_id: Optional[str] = None


class ButtonInfo(BaseModel):
    """계속/뒤로 버튼 정보"""

    text: str
    action: str
    target: Optional[str] = None


class SceneInfo(BaseModel):
    """현재 화면 정보"""

    event_id: str
    text: str
    image: Optional[str] = None
    choices: list[ChoiceInfo] = []
    action_slots: list[Optional[ChoiceInfo]] = []
    continue_button: Optional[ButtonInfo] = None
    back_button: Optional[ButtonInfo] = None
    inventory_accessible: bool = True
    is_examining: bool = False


class SlotInfo(BaseModel):
    """인벤토리 슬롯 내용"""

    item_id: str
    name: str
    icon: str
    quantity: int
    default_action: str
    available_actions: list[str] = []


class InventoryInfo(BaseModel):
    width: int
    height: int
    slots: list[Optional[SlotInfo]]
    equipment: dict[str, Optional[SlotInfo]] = {}


class StoreEntryInfo(BaseModel):
    """상점 판매 목록 항목"""

    item_id: str
    name: str
    price: int
    stock: Optional[int] = None  # None = 무제한
    from_player: bool = False


class StoreInfo(BaseModel):
    store_id: str
    name: str
    is_general_store: bool = False
    items: list[StoreEntryInfo] = []


class GameStateResponse(BaseModel):
    """게임 상태 응답"""

    session_id: str
    coins: int
    scene: SceneInfo
    inventory: InventoryInfo
    store: Optional[StoreInfo] = None
    keybinds: dict[str, Any] = {}


class ActionResponse(BaseModel):
    """입력 실행 응답"""

    success: bool
    action: str
    message: str = ""
    data: Optional[dict[str, Any]] = None
    state: GameStateResponse


class TradeResponse(BaseModel):
    """거래 결과 응답"""

    success: bool
    item_id: str
    quantity: int = 0
    unit_price: int = 0
    total: int = 0
    reason: Optional[str] = None
    dropped: int = 0
    state: GameStateResponse


class SaveResponse(BaseModel):
    success: bool
    session_id: str
    current_event_id: str
    updated_at: str


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
