"""Scene Flow Engine Core"""
__version__ = "0.1.0"

from src.core.flow import EventGraph, GameFlowController, Scene, SceneView
from src.core.item import Inventory, ItemCatalog, ItemDefinition
from src.core.keybinds import KeybindSettings
from src.core.session import ActionResult, Catalogs, GameSession
from src.core.store import CurrencyLedger, StoreCatalog, StoreRuntimeState

__all__ = [
    "EventGraph",
    "GameFlowController",
    "Scene",
    "SceneView",
    "Inventory",
    "ItemCatalog",
    "ItemDefinition",
    "KeybindSettings",
    "ActionResult",
    "Catalogs",
    "GameSession",
    "CurrencyLedger",
    "StoreCatalog",
    "StoreRuntimeState",
]
