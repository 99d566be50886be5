"""SQLAlchemy declarative base for all ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class SaveGameModel(Base):
    """ORM model for a saved game session (one row per session id)."""

    __tablename__ = "save_games"

    session_id: Mapped[str] = mapped_column(String, primary_key=True)
    current_event_id: Mapped[str] = mapped_column(String, nullable=False)
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inventory: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    store_state: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    keybinds: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
