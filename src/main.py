"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.game import router as game_router
from src.api.health import router as health_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.core.session import Catalogs
from src.db.database import engine as db_engine
from src.db.models import Base
from src.services.game_service import GameService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


def build_game_service(data_dir: str = settings.DATA_DIR) -> GameService:
    """카탈로그 로드 + GameService 생성"""
    catalogs = Catalogs.load(data_dir)
    logger.info(
        "Catalogs loaded: %d items, %d stores, %d events",
        catalogs.items.count(),
        catalogs.stores.count(),
        catalogs.events.count(),
    )
    return GameService(
        catalogs,
        EventBus(),
        start_event_id=settings.START_EVENT_ID,
        inventory_width=settings.INVENTORY_WIDTH,
        inventory_height=settings.INVENTORY_HEIGHT,
        starting_coins=settings.STARTING_COINS,
        general_store_base_price=settings.GENERAL_STORE_BASE_PRICE,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    logger.info("Initializing GameService...")
    app.state.game_service = build_game_service()
    logger.info("GameService initialized.")

    yield

    logger.info("Shutting down...")
    app.state.game_service = None


app = FastAPI(title="Scene Flow Engine", lifespan=lifespan)

app.include_router(health_router)
app.include_router(game_router)
