"""Health check endpoint."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from api.dependencies import get_settings, get_user_repo
from port.user_repository import UserRepository
from utils.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
):
    """Health check with uptime and credential store status.

    Always answers 200; a store that does not respond turns ``status`` into ``degraded``.
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "environment": settings.environment,
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "services": {},
    }

    try:
        if await run_in_threadpool(repo.ping):
            health_status["services"]["database"] = {
                "status": "healthy",
                "message": "Connection successful"
            }
        else:
            health_status["services"]["database"] = {
                "status": "unhealthy",
                "message": "Connection failed"
            }
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)[:200]})
        health_status["services"]["database"] = {
            "status": "unhealthy",
            "message": f"Connection error: {str(e)[:200]}"
        }

    if health_status["services"]["database"]["status"] != "healthy":
        health_status["status"] = "degraded"

    return health_status
