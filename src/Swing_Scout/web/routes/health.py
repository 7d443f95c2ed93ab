"""Health route: process liveness plus a database round-trip."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from Swing_Scout import __version__
from Swing_Scout.config import Settings
from Swing_Scout.data.database import Database
from Swing_Scout.web.deps import get_database, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    database: bool
    polygon_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[Database, Depends(get_database)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Report whether SQLite answers and whether a Polygon key is configured."""
    try:
        cursor = await db.connection.execute("SELECT 1")
        await cursor.fetchone()
        database_ok = True
    except Exception as exc:  # noqa: BLE001
        logger.warning("Health check: database unavailable: %s", exc)
        database_ok = False

    return HealthResponse(
        status="ok" if database_ok else "degraded",
        version=__version__,
        database=database_ok,
        polygon_configured=settings.polygon_api_key is not None,
    )
