"""Service health endpoint under the versioned prefix."""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from animelog.api.v1.dependencies import SessionDep
from animelog.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def system_health(db: SessionDep) -> dict[str, str]:
    """Report the app version and whether the database answers."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.warning("database health check failed", exc_info=True)
        database = "unavailable"
    return {"status": "ok", "version": settings.app_version, "database": database}
