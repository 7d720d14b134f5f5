# supergains/api/routers/health.py
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from supergains import __version__
from supergains.api.deps import get_lock_service
from supergains.data.database import get_db
from supergains.services.lock_service import LockService
from supergains.utils.logging import get_logger
from supergains.utils.settings import ENVIRONMENT

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

_started = time.monotonic()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health():
    return {
        "status": "ok",
        "service": "supergains-api",
        "version": __version__,
        "environment": ENVIRONMENT,
        "uptime": round(time.monotonic() - _started, 2),
        "timestamp": _now(),
    }


@router.get("/database")
def database_health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"success": False, "status": "unavailable", "component": "database", "timestamp": _now()},
        )
    return {"status": "ok", "component": "database", "timestamp": _now()}


@router.get("/redis")
def redis_health(lock_service: LockService = Depends(get_lock_service)):
    try:
        lock_service.ping()
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"success": False, "status": "unavailable", "component": "redis", "timestamp": _now()},
        )
    return {"status": "ok", "component": "redis", "timestamp": _now()}
