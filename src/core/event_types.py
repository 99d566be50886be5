"""이벤트 유형 상수

GameService가 입력 처리 후 발행한다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # flow
    SCENE_CHANGED = "scene_changed"
    EXAMINE_OPENED = "examine_opened"
    EXAMINE_CLOSED = "examine_closed"

    # inventory
    ITEM_ADDED = "item_added"
    ITEM_DROPPED = "item_dropped"
    ITEM_USED = "item_used"
    ITEM_EQUIPPED = "item_equipped"
    ITEM_UNEQUIPPED = "item_unequipped"

    # store
    ITEM_BOUGHT = "item_bought"
    ITEM_SOLD = "item_sold"

    # persistence
    SESSION_SAVED = "session_saved"
    SESSION_LOADED = "session_loaded"
