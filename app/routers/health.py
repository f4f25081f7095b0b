"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from datetime import datetime, timezone
import logging

from app.config import settings
from app.database import get_db
from app.models.schemas import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with the status of the project store
    """
    if settings.STORE_BACKEND == "memory":
        db_status = "skipped"
    else:
        db_status = "ok"
        try:
            await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            db_status = "error"

    overall_status = "healthy" if db_status != "error" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        store_backend=settings.STORE_BACKEND,
        timestamp=datetime.now(timezone.utc),
    )
