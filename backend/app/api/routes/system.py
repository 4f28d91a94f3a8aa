"""Service status routes: root banner, health check, Prometheus metrics."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Response
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import DbSession
from app.db.models import MoodRecord
from app.services.metrics import render_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])

_STARTED_AT = time.monotonic()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def root() -> dict[str, str]:
    """Server banner."""
    return {
        "message": "API server is running",
        "status": "OK",
        "timestamp": _timestamp(),
    }


@router.get("/health")
async def health_check(db: DbSession) -> dict:
    """Health check including a lightweight database probe."""
    start = time.perf_counter()
    db_status = "ok"
    try:
        await db.execute(select(MoodRecord.id).limit(1))
    except SQLAlchemyError:
        logger.exception("Health check database probe failed")
        await db.rollback()
        db_status = "error"
    return {
        "status": "OK",
        "db": db_status,
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "responseTimeMs": round((time.perf_counter() - start) * 1000, 3),
        "timestamp": _timestamp(),
    }


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus text exposition."""
    body, content_type = render_metrics()
    return Response(content=body, media_type=content_type)
