"""장면 흐름 시스템 Core - 순수 Python, UI/DB 무관"""

from .controller import DEFAULT_START_EVENT_ID, GameFlowController, ItemGrant
from .models import (
    ACTION_SLOT_COUNT,
    CLOSE_EXAMINE_CONFIG,
    ActionType,
    Choice,
    ContinueBackConfig,
    EventType,
    Scene,
    SceneView,
)
from .registry import EventGraph

__all__ = [
    "ACTION_SLOT_COUNT",
    "CLOSE_EXAMINE_CONFIG",
    "DEFAULT_START_EVENT_ID",
    "ActionType",
    "Choice",
    "ContinueBackConfig",
    "EventGraph",
    "EventType",
    "GameFlowController",
    "ItemGrant",
    "Scene",
    "SceneView",
]
