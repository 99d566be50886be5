"""단축키 설정 - 액션 슬롯 6개 + 계속/뒤로

키 입력 캡처는 표현 계층 담당. 여기서는 매핑 저장과 해석만 한다.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from src.core.flow.models import ACTION_SLOT_COUNT

DEFAULT_KEYBINDS: tuple[str, ...] = ("q", "w", "e", "a", "s", "d")
DEFAULT_CONTINUE_KEYBIND = " "
DEFAULT_BACK_KEYBIND = "Backspace"

CONTINUE = "continue"
BACK = "back"

# resolve() 결과: 슬롯 인덱스(int) | "continue" | "back"
KeyTarget = Union[int, str]


@dataclass
class KeybindSettings:
    """플레이어 단축키 (세션 간 유지되는 설정)"""

    keybinds: list[str] = field(default_factory=lambda: list(DEFAULT_KEYBINDS))
    continue_keybind: str = DEFAULT_CONTINUE_KEYBIND
    back_keybind: str = DEFAULT_BACK_KEYBIND

    def set_keybind(self, slot_index: int, key: str) -> None:
        if not 0 <= slot_index < ACTION_SLOT_COUNT:
            raise IndexError(f"Action slot {slot_index} out of range")
        self.keybinds[slot_index] = key.lower()

    def set_keybinds(self, keys: list[str]) -> None:
        if len(keys) != ACTION_SLOT_COUNT:
            raise ValueError(f"Expected {ACTION_SLOT_COUNT} keys, got {len(keys)}")
        self.keybinds = [k.lower() for k in keys]

    def set_continue_keybind(self, key: str) -> None:
        self.continue_keybind = key

    def set_back_keybind(self, key: str) -> None:
        self.back_keybind = key

    def reset(self) -> None:
        self.keybinds = list(DEFAULT_KEYBINDS)
        self.continue_keybind = DEFAULT_CONTINUE_KEYBIND
        self.back_keybind = DEFAULT_BACK_KEYBIND

    def resolve(self, key: str) -> Optional[KeyTarget]:
        """눌린 키 → 대상. 계속/뒤로가 슬롯보다 우선. 매핑 없으면 None."""
        if key == self.continue_keybind:
            return CONTINUE
        if key == self.back_keybind:
            return BACK
        lowered = key.lower()
        for index, bound in enumerate(self.keybinds):
            if bound == lowered:
                return index
        return None

    def to_dict(self) -> dict:
        return {
            "keybinds": list(self.keybinds),
            "continue_keybind": self.continue_keybind,
            "back_keybind": self.back_keybind,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "KeybindSettings":
        settings = cls()
        keys = data.get("keybinds")
        if isinstance(keys, list) and len(keys) == ACTION_SLOT_COUNT:
            settings.set_keybinds([str(k) for k in keys])
        settings.continue_keybind = data.get("continue_keybind", DEFAULT_CONTINUE_KEYBIND)
        settings.back_keybind = data.get("back_keybind", DEFAULT_BACK_KEYBIND)
        return settings
