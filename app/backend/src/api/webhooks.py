"""Mock webhook receiver that stores incoming invoice events."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from app.backend.src.db import get_session_dependency
from app.backend.src.schemas.notification import WebhookPayload
from app.backend.src.services.notifications import record_received_event

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/mock-webhook", tags=["webhooks"])


@router.post("", response_class=PlainTextResponse)
def receive_webhook(
    payload: WebhookPayload,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> str:
    """Persist an externally delivered invoice event for inspection."""

    LOGGER.info("webhook_payload_received", invoice_id=payload.invoice_id)
    record_received_event(session, payload.model_dump(by_alias=True))
    return "Received"
