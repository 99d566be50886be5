"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 카탈로그 JSON 위치 (items.json / stores.json / events.json)
    DATA_DIR: str = "src/data"

    # 세션 기본값
    START_EVENT_ID: str = "town_start"
    INVENTORY_WIDTH: int = 4
    INVENTORY_HEIGHT: int = 5
    STARTING_COINS: int = 100

    # 일반 상점이 처음 보는 아이템을 매입할 때 쓰는 기준가
    GENERAL_STORE_BASE_PRICE: int = 10


settings = Settings()
