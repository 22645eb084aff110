"""
Health check endpoints
"""

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.dependencies import get_db
from core.config import settings
from core.logging import get_logger
from d1_extraction import supported_game_types

logger = get_logger(__name__)
router = APIRouter()


def check_database_health(db: Session) -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict containing database health status
    """
    try:
        start_time = time.time()
        result = db.execute(text("SELECT 1"))
        result.fetchone()
        latency_ms = (time.time() - start_time) * 1000
        return {"status": "connected", "latency_ms": round(latency_ms, 2)}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return {"status": "error", "error": str(e)}


@router.get("/health")
async def health_check(db: Session = Depends(get_db)) -> JSONResponse:
    """
    Health check for external monitoring.

    Returns:
        JSONResponse: Health status with 200 (healthy) or 503 (unhealthy)
    """
    start_time = time.time()

    health_data = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {"database": check_database_health(db)},
        "game_types": supported_game_types(),
    }

    is_healthy = health_data["checks"]["database"].get("status") == "connected"
    health_data["response_time_ms"] = round((time.time() - start_time) * 1000, 2)

    if not is_healthy:
        health_data["status"] = "unhealthy"

    return JSONResponse(status_code=200 if is_healthy else 503, content=health_data)
