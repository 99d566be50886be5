"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Return database status and loaded catalog sizes."""
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        database = "disconnected"

    service = getattr(request.app.state, "game_service", None)
    catalogs: dict[str, int] = {}
    if service is not None:
        catalogs = {
            "items": service.catalogs.items.count(),
            "stores": service.catalogs.stores.count(),
            "events": service.catalogs.events.count(),
        }

    status = "ok" if database == "connected" and service is not None else "error"
    return {"status": status, "database": database, "catalogs": catalogs}
