"""Celery tasks for webhook notification delivery."""

from __future__ import annotations

from typing import Any

import structlog

from app.backend.src.services.webhooks import deliver
from .worker import celery, settings

LOGGER = structlog.get_logger(__name__)


@celery.task(name="tasks.deliver_notification")
def deliver_notification(payload: dict[str, Any], destinations: list[str]) -> dict[str, int]:
    """Deliver one notification payload to each destination, without retries."""

    results = deliver(payload, destinations, timeout=settings.webhook_timeout_seconds)
    delivered = sum(1 for result in results if result.delivered)
    LOGGER.info(
        "notification_delivery_finished",
        invoice_id=payload.get("invoiceId"),
        delivered=delivered,
        failed=len(results) - delivered,
    )
    return {"delivered": delivered, "failed": len(results) - delivered}


__all__ = ["deliver_notification"]
