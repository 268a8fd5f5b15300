"""Invoice notification events: audit persistence and webhook fan-out."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.backend.src.models import Invoice, NotificationEvent, NotificationSource
from tasks.notification_tasks import deliver_notification

LOGGER = structlog.get_logger(__name__)

INVOICE_REJECTED_MESSAGE = "Invoice rejected: limit exceeded"
INVOICE_CANCELLED_MESSAGE = "Invoice cancelled by user"


def build_payload(invoice: Invoice, message: str) -> dict[str, Any]:
    """Snapshot the invoice, its owner and product into a JSON-safe payload."""

    owner = invoice.owner
    return {
        "invoiceId": invoice.id,
        "firstName": owner.first_name,
        "lastName": owner.last_name,
        "email": owner.email,
        "amount": str(invoice.amount),
        "productName": invoice.product.name,
        "billNo": invoice.bill_no,
        "message": message,
        "emittedAt": datetime.now(timezone.utc).isoformat(),
    }


def _parse_amount(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _event_from_payload(payload: Mapping[str, Any], source: NotificationSource) -> NotificationEvent:
    invoice_id = payload.get("invoiceId")
    return NotificationEvent(
        invoice_id=int(invoice_id) if invoice_id is not None else None,
        first_name=payload.get("firstName"),
        last_name=payload.get("lastName"),
        email=payload.get("email"),
        amount=_parse_amount(payload.get("amount")),
        product_name=payload.get("productName"),
        bill_no=payload.get("billNo"),
        message=str(payload.get("message") or ""),
        source=source.value,
    )


class NotificationDispatcher:
    """Fire-and-forget emitter for invoice rejection/cancellation events."""

    def __init__(self, destinations: Iterable[str] = ()) -> None:
        self.destinations: tuple[str, ...] = tuple(destinations)

    def emit(self, session: Session, invoice: Invoice, message: str) -> dict[str, Any]:
        """Record the event and schedule delivery; never raises.

        Must be called after the invoice transaction has committed: the audit
        record is committed on its own and a failure here leaves the invoice
        untouched.
        """

        payload = build_payload(invoice, message)
        LOGGER.warning(
            "invoice_notification",
            message=message,
            invoice_id=invoice.id,
            email=payload["email"],
            amount=payload["amount"],
            bill_no=invoice.bill_no,
        )

        try:
            session.add(_event_from_payload(payload, NotificationSource.DISPATCHER))
            session.commit()
        except Exception as exc:
            session.rollback()
            LOGGER.error(
                "notification_event_persist_failed",
                invoice_id=invoice.id,
                error=str(exc),
            )

        if self.destinations:
            try:
                deliver_notification.delay(payload, list(self.destinations))
            except Exception as exc:
                LOGGER.error(
                    "notification_enqueue_failed",
                    invoice_id=invoice.id,
                    destinations=len(self.destinations),
                    error=str(exc),
                )
        return payload


def record_received_event(session: Session, payload: Mapping[str, Any]) -> NotificationEvent:
    """Persist an event posted to the mock webhook receiver."""

    event = _event_from_payload(payload, NotificationSource.WEBHOOK)
    session.add(event)
    session.commit()
    session.refresh(event)
    LOGGER.info("webhook_event_received", invoice_id=event.invoice_id, message=event.message)
    return event


def list_notifications(
    session: Session, source: NotificationSource | None = None
) -> list[NotificationEvent]:
    """Return stored events, newest first."""

    statement = select(NotificationEvent)
    if source is not None:
        statement = statement.where(NotificationEvent.source == source.value)
    statement = statement.order_by(NotificationEvent.created_at.desc(), NotificationEvent.id.desc())
    return list(session.execute(statement).scalars())


__all__ = [
    "INVOICE_CANCELLED_MESSAGE",
    "INVOICE_REJECTED_MESSAGE",
    "NotificationDispatcher",
    "build_payload",
    "list_notifications",
    "record_received_event",
]
