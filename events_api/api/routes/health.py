"""Health check routes"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.config import Settings
from ...db.database import get_db
from ..dependencies import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check(settings: Settings = Depends(get_settings)):
    """Liveness: the process is up"""
    return {"status": "healthy", "version": settings.VERSION}


@router.get("/ready")
async def readiness_check(request: Request, db: Session = Depends(get_db)):
    """Readiness: the database answers (Redis is reported but optional)"""
    try:
        db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        database = "unhealthy"

    limiter = request.app.state.rate_limiter
    if limiter is None:
        redis_status = "not_configured"
    else:
        redis_status = "healthy" if await limiter.ping() else "unhealthy"

    ready = database == "healthy"
    return JSONResponse(
        {"status": "ready" if ready else "unavailable", "database": database, "redis": redis_status},
        status_code=200 if ready else 503,
    )
