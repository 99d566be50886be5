"""통화(코인) 잔고"""

import logging

logger = logging.getLogger(__name__)

STARTING_COINS = 100


class CurrencyLedger:
    """플레이어 코인 잔고. 음수 금액 요청은 호출자 버그로 간주."""

    def __init__(self, coins: int = STARTING_COINS) -> None:
        if coins < 0:
            raise ValueError(f"Balance cannot be negative: {coins}")
        self._coins = coins

    @property
    def coins(self) -> int:
        return self._coins

    def add_coins(self, amount: int) -> None:
        _check_amount(amount)
        self._coins += amount

    def remove_coins(self, amount: int) -> bool:
        """잔고 부족 시 변경 없이 False."""
        _check_amount(amount)
        if self._coins < amount:
            logger.debug("Insufficient coins: has %d, needs %d", self._coins, amount)
            return False
        self._coins -= amount
        return True

    def can_afford(self, amount: int) -> bool:
        return self._coins >= amount

    def to_dict(self) -> dict:
        return {"coins": self._coins}

    @classmethod
    def from_dict(cls, data: dict) -> "CurrencyLedger":
        return cls(coins=max(0, int(data.get("coins", STARTING_COINS))))


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise ValueError(f"Amount must be non-negative: {amount}")
