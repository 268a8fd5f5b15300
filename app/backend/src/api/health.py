"""Health and metrics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..db import get_session_dependency

router = APIRouter(tags=["health"])


@router.get("/health/live")
def liveness() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health/ready")
def readiness(session: Session = Depends(get_session_dependency)) -> dict[str, str]:
    """Report readiness once the database answers a trivial query.

    Notification delivery mode is informational only; an unreachable broker
    never makes the service unready because delivery is best effort.
    """

    session.execute(text("SELECT 1"))
    settings = get_settings()
    return {
        "status": "ready",
        "database": "ok",
        "notifications": "eager" if settings.celery_task_always_eager else "queued",
    }


@router.get("/metrics")
def metrics() -> Response:
    """Expose Prometheus counters for invoice decisions and deliveries."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
