"""Health check endpoints for monitoring."""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from nutritrack.api.deps import DB
from nutritrack.core.config import settings
from nutritrack.utils.envelopes import api_success

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=dict)
async def health_check(db: DB):
    """Health check endpoint for load balancers and monitoring."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        db_status = "unhealthy"

    return api_success(
        {
            "status": "ok" if db_status == "healthy" else "degraded",
            "service": settings.APP_NAME,
            "database": db_status,
        }
    )


@router.get("/health/ready", response_model=dict)
async def readiness_check(db: DB):
    """Readiness probe."""
    try:
        await db.execute(text("SELECT 1"))
        return api_success({"ready": True})
    except SQLAlchemyError:
        return api_success({"ready": False})


@router.get("/health/live", response_model=dict)
async def liveness_check():
    """Liveness probe."""
    return api_success({"alive": True})
