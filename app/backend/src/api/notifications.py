"""Read-only listing of stored notification events."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.backend.src.core.security import get_caller_identity
from app.backend.src.db import get_session_dependency
from app.backend.src.models import NotificationEvent, NotificationSource
from app.backend.src.schemas.notification import NotificationRead
from app.backend.src.services.notifications import list_notifications

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(get_caller_identity)],
)


@router.get("", response_model=list[NotificationRead])
def get_notifications(
    session: Annotated[Session, Depends(get_session_dependency)],
    source: NotificationSource | None = None,
) -> list[NotificationEvent]:
    """Return rejection/cancellation events, newest first."""

    return list_notifications(session, source)
