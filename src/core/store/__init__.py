"""상점/통화 시스템 Core - 순수 Python, UI/DB 무관"""

from .currency import CurrencyLedger
from .models import StoreDefinition, StoreItem, StoreListing
from .registry import StoreCatalog
from .state import StoreRuntimeState
from .trade import TradeFailure, TradeResult, handle_buy_item, handle_sell_item

__all__ = [
    "CurrencyLedger",
    "StoreCatalog",
    "StoreDefinition",
    "StoreItem",
    "StoreListing",
    "StoreRuntimeState",
    "TradeFailure",
    "TradeResult",
    "handle_buy_item",
    "handle_sell_item",
]
