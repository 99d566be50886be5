"""
Game Session
============
플레이어 한 명의 엔진 묶음

장면 흐름, 인벤토리, 코인, 상점 상태, 단축키를 하나의 세션으로 묶고
UI에서 여러 컴포넌트를 엮던 입력(슬롯 클릭, 컨텍스트 메뉴, 단축키,
현재 상점에서 사고팔기)을 제공한다.

세션끼리는 카탈로그만 공유한다. 전역 상태 없음.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.core.flow.controller import DEFAULT_START_EVENT_ID, GameFlowController
from src.core.flow.models import Choice, Scene, SceneView
from src.core.flow.registry import EventGraph
from src.core.item.inventory import DEFAULT_HEIGHT, DEFAULT_WIDTH, Inventory
from src.core.item.models import EquipmentSlot, InventoryItem, ItemAction
from src.core.item.registry import ItemCatalog
from src.core.keybinds import BACK, CONTINUE, KeybindSettings
from src.core.logging import get_logger
from src.core.store.currency import STARTING_COINS, CurrencyLedger
from src.core.store.models import StoreDefinition, StoreListing
from src.core.store.registry import StoreCatalog
from src.core.store.state import GENERAL_STORE_BASE_PRICE, StoreRuntimeState
from src.core.store.trade import (
    TradeFailure,
    TradeResult,
    handle_buy_item,
    handle_sell_item,
)

logger = get_logger(__name__)

ITEMS_FILE = "items.json"
STORES_FILE = "stores.json"
EVENTS_FILE = "events.json"


@dataclass(frozen=True)
class Catalogs:
    """정적 데이터 3종. 시작 시 한 번 로드, 모든 세션이 공유."""

    items: ItemCatalog
    stores: StoreCatalog
    events: EventGraph

    @classmethod
    def load(cls, data_dir: str | Path) -> "Catalogs":
        data_dir = Path(data_dir)
        items = ItemCatalog()
        items.load_from_json(data_dir / ITEMS_FILE)
        stores = StoreCatalog()
        stores.load_from_json(data_dir / STORES_FILE)
        events = EventGraph()
        events.load_from_json(data_dir / EVENTS_FILE)

        for scene_id, target in events.find_dangling_targets():
            logger.warning("Event %s points to missing event %s", scene_id, target)
        return cls(items=items, stores=stores, events=events)


@dataclass
class ActionResult:
    """세션 입력 처리 결과"""

    success: bool
    action_type: str
    message: str
    data: Optional[dict] = None

    def to_dict(self) -> dict:
        result = {
            "success": self.success,
            "action": self.action_type,
            "message": self.message,
        }
        if self.data:
            result["data"] = self.data
        return result


class GameSession:
    """
    게임 세션

    사용 패턴:
        catalogs = Catalogs.load("src/data")
        session = GameSession("s1", catalogs)
        session.choose(0)
        session.buy("health_potion", 3)
    """

    def __init__(
        self,
        session_id: str,
        catalogs: Catalogs,
        *,
        start_event_id: str = DEFAULT_START_EVENT_ID,
        inventory_width: int = DEFAULT_WIDTH,
        inventory_height: int = DEFAULT_HEIGHT,
        starting_coins: int = STARTING_COINS,
        general_store_base_price: int = GENERAL_STORE_BASE_PRICE,
    ) -> None:
        self.session_id = session_id
        self.catalogs = catalogs
        self.general_store_base_price = general_store_base_price

        self.inventory = Inventory(inventory_width, inventory_height)
        self.ledger = CurrencyLedger(starting_coins)
        self.stores = StoreRuntimeState(catalogs.stores)
        self.keybinds = KeybindSettings()
        self.flow = GameFlowController(
            catalogs.events, catalogs.items, self.inventory, start_event_id
        )
        self._enter_scene()

    # === 조회 ===

    @property
    def coins(self) -> int:
        return self.ledger.coins

    def view(self) -> SceneView:
        return self.flow.view()

    def current_store(self) -> Optional[StoreDefinition]:
        """현재 장면 id와 같은 id의 상점. 없으면 None."""
        return self.catalogs.stores.get(self.flow.current_event_id)

    def store_listing(self) -> list[StoreListing]:
        store = self.current_store()
        if store is None:
            return []
        return self.stores.get_store_listing(store.id)

    def _enter_scene(self) -> None:
        """상점 장면에 들어오면 재고 lazy 초기화."""
        store = self.current_store()
        if store is not None:
            self.stores.initialize_store_stock(store.id)

    # === 장면 흐름 ===

    def navigate_to(self, event_id: str) -> Optional[Scene]:
        scene = self.flow.navigate_to(event_id)
        self._enter_scene()
        return scene

    def choose(self, slot_index: int) -> Optional[Scene]:
        """액션 바 슬롯(0~5) 선택. 빈 슬롯/범위 밖은 None."""
        slots = self.view().action_slots()
        if not 0 <= slot_index < len(slots) or slots[slot_index] is None:
            logger.debug("No choice in action slot %s", slot_index)
            return None
        return self.handle_choice(slots[slot_index])

    def handle_choice(self, choice: Optional[Choice]) -> Optional[Scene]:
        scene = self.flow.handle_choice(choice)
        self._enter_scene()
        return scene

    def handle_continue(self) -> Optional[Scene]:
        scene = self.flow.handle_continue()
        self._enter_scene()
        return scene

    def handle_back(self) -> Optional[Scene]:
        scene = self.flow.handle_back()
        self._enter_scene()
        return scene

    def examine_item(
        self, name: str, description: str, image: Optional[str] = None
    ) -> bool:
        return self.flow.examine_item(name, description, image)

    def close_examine(self) -> bool:
        return self.flow.close_examine()

    def press_key(self, key: str) -> ActionResult:
        """단축키 입력 → 선택지 슬롯 / 계속 / 뒤로."""
        target = self.keybinds.resolve(key)
        if target is None:
            return ActionResult(False, "key", f"매핑되지 않은 키: {key!r}")
        if target == CONTINUE:
            self.handle_continue()
            return ActionResult(True, "continue", "계속")
        if target == BACK:
            self.handle_back()
            return ActionResult(True, "back", "뒤로")

        choice = self.view().action_slots()[target]
        if choice is None:
            return ActionResult(False, "choice", f"빈 슬롯: {target}")
        before = self.flow.current_event_id
        self.handle_choice(choice)
        return ActionResult(
            True,
            "choice",
            "선택지 실행",
            data={"from": before, "to": self.flow.current_event_id},
        )

    # === 인벤토리 ===

    def click_inventory_slot(self, slot_index: int) -> ActionResult:
        """슬롯 클릭: 상점에서 매입 가능한 아이템이면 1개 판매, 아니면 기본 액션."""
        item = self.inventory.get_slot(slot_index)
        if not self.flow.inventory_accessible:
            return ActionResult(False, "click", "지금은 인벤토리를 사용할 수 없습니다.")
        if item is None:
            return ActionResult(False, "click", "빈 슬롯입니다.")

        store = self.current_store()
        if store is not None and self.stores.store_accepts_item(store.id, item.id):
            trade = self.sell(item.id, 1)
            return _trade_to_action(trade, "sell")

        return self._use(slot_index, item)

    def inventory_action(
        self, slot_index: int, action: ItemAction, quantity: int = 1
    ) -> ActionResult:
        """컨텍스트 메뉴 액션 처리."""
        action = ItemAction(action)
        item = self.inventory.get_slot(slot_index)
        if not self.flow.inventory_accessible:
            return ActionResult(False, action.value, "지금은 인벤토리를 사용할 수 없습니다.")
        if item is None:
            return ActionResult(False, action.value, "빈 슬롯입니다.")
        if action not in item.definition.available_actions:
            return ActionResult(
                False, action.value, f"{item.definition.name}: 사용할 수 없는 액션"
            )

        if action in (ItemAction.USE, ItemAction.EAT, ItemAction.DRINK):
            return self._use(slot_index, item)

        if action == ItemAction.EXAMINE:
            opened = self.flow.examine_definition(item.definition)
            return ActionResult(opened, "examine", item.definition.name)

        if action == ItemAction.DROP:
            self.inventory.drop_item(slot_index)
            return ActionResult(
                True,
                "drop",
                f"{item.definition.name} 버림",
                data={"item_id": item.id, "quantity": item.units},
            )

        if action == ItemAction.EQUIP:
            equipped = self.inventory.equip_from_slot(slot_index)
            return ActionResult(
                equipped,
                "equip",
                f"{item.definition.name} 장착" if equipped else "장착할 수 없는 아이템",
                data={"item_id": item.id} if equipped else None,
            )

        if action == ItemAction.SELL:
            return _trade_to_action(self.sell(item.id, quantity), "sell")

        # unequip은 장비 슬롯 대상 (unequip 메서드 사용)
        return ActionResult(False, action.value, "인벤토리 슬롯에서는 불가")

    def _use(self, slot_index: int, item: InventoryItem) -> ActionResult:
        action = self.inventory.use_item(slot_index)
        if action is None:
            return ActionResult(False, "use", f"{item.definition.name}: 사용 실패")
        if action == ItemAction.EXAMINE:
            self.flow.examine_definition(item.definition)
        return ActionResult(
            True,
            action.value,
            f"{item.definition.name}: {action.value}",
            data={"item_id": item.id},
        )

    def move_item(self, from_index: int, to_index: int) -> None:
        self.inventory.move_item(from_index, to_index)

    def unequip(self, slot: EquipmentSlot) -> ActionResult:
        slot = EquipmentSlot(slot)
        item = self.inventory.get_equipped(slot)
        if item is None:
            return ActionResult(False, "unequip", "장착한 아이템이 없습니다.")
        if not self.inventory.unequip_to_inventory(slot):
            return ActionResult(False, "unequip", "인벤토리가 가득 찼습니다.")
        return ActionResult(
            True, "unequip", f"{item.definition.name} 해제", data={"item_id": item.id}
        )

    # === 상점 ===

    def buy(self, item_id: str, quantity: int = 1) -> TradeResult:
        """현재 상점에서 구매. 판매 목록에 없는 아이템이면 실패."""
        store = self.current_store()
        if store is None:
            return TradeResult.failed(item_id, TradeFailure.UNKNOWN_STORE)

        for entry in self.stores.get_store_listing(store.id):
            if entry.item_id == item_id:
                return handle_buy_item(
                    store.id,
                    entry.to_store_item(),
                    quantity,
                    items=self.catalogs.items,
                    state=self.stores,
                    ledger=self.ledger,
                    inventory=self.inventory,
                )

        logger.warning("Buy aborted: %s not sold in %s", item_id, store.id)
        return TradeResult.failed(item_id, TradeFailure.UNKNOWN_ITEM)

    def sell(self, item_id: str, quantity: int = 1) -> TradeResult:
        """현재 상점에 판매."""
        store = self.current_store()
        if store is None:
            return TradeResult.failed(item_id, TradeFailure.UNKNOWN_STORE)
        return handle_sell_item(
            store.id,
            item_id,
            quantity,
            state=self.stores,
            ledger=self.ledger,
            inventory=self.inventory,
            base_price=self.general_store_base_price,
        )

    # === 직렬화 ===

    def to_dict(self) -> dict:
        """외부 저장용 순수 데이터 스냅샷. 살펴보기 오버레이는 저장하지 않는다."""
        return {
            "session_id": self.session_id,
            "current_event_id": self.flow.current_event_id,
            "currency": self.ledger.to_dict(),
            "inventory": self.inventory.to_dict(),
            "stores": self.stores.to_dict(),
            "keybinds": self.keybinds.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict, catalogs: Catalogs, **options) -> "GameSession":
        """스냅샷 복원. 새 세션과 다른 상태(팔려서 줄어든 재고 등)도 그대로 받는다."""
        session = cls(data["session_id"], catalogs, **options)
        session.ledger = CurrencyLedger.from_dict(data.get("currency") or {})
        session.inventory = Inventory.from_dict(
            data.get("inventory") or {},
            catalogs.items.get,
            width=session.inventory.width,
            height=session.inventory.height,
        )
        session.stores = StoreRuntimeState.from_dict(
            data.get("stores") or {}, catalogs.stores
        )
        session.keybinds = KeybindSettings.from_dict(data.get("keybinds") or {})
        session.flow = GameFlowController(
            catalogs.events,
            catalogs.items,
            session.inventory,
            session.flow.start_event_id,
        )
        session.flow.restore_position(data.get("current_event_id"))
        session._enter_scene()
        return session


def _trade_to_action(trade: TradeResult, action_type: str) -> ActionResult:
    if trade.success:
        message = f"{trade.item_id} x{trade.quantity} ({trade.total} coins)"
    else:
        message = f"거래 실패: {trade.reason}"
    return ActionResult(trade.success, action_type, message, data=trade.to_dict())
