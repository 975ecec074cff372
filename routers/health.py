import structlog
from fastapi import APIRouter

from config import DATABASE_URL
from db import ping

router = APIRouter()
logger = structlog.get_logger("hr.health")


@router.get("/health", tags=["meta"])
def health():
    return {"status": "ok"}


@router.get("/health/deep", tags=["meta"])
def health_deep():
    if not DATABASE_URL:
        return {"status": "degraded", "db": "no DATABASE_URL configured"}

    try:
        ping()
    except Exception as e:
        logger.warning("health_db_unreachable", error=str(e))
        return {"status": "degraded", "db": "error", "error": str(e)}

    return {"status": "ok", "db": "connected"}
