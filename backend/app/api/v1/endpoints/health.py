"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.deps import get_session
from app.services.rule_store import RuleStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_session)) -> dict:
    """
    Health check endpoint.

    Verifies the database is reachable and reports how many rules are
    active for the configured decision mode.

    Returns:
        dict: Health status with API, database and rule status
    """
    active_rules = None
    try:
        await db.execute(text("SELECT 1"))
        active_rules = len(await RuleStore(db).get_active_rules())
        db_status = "healthy"
    except Exception as e:
        logger.warning(f"Health check database query failed: {e}")
        db_status = f"unhealthy: {str(e)}"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "api": "healthy",
        "database": db_status,
        "decision_mode": settings.DECISION_MODE.value,
        "active_rules": active_rules,
    }
