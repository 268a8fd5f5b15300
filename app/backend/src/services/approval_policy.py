"""Approval rule for newly submitted invoices."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from app.backend.src.models import InvoiceStatus


def decide(current_approved_total: Decimal, invoice_amount: Decimal, limit: Decimal) -> InvoiceStatus:
    """Return ``REJECTED`` when the new total would exceed ``limit``.

    A total exactly equal to the limit is approved.
    """

    if current_approved_total + invoice_amount > limit:
        return InvoiceStatus.REJECTED
    return InvoiceStatus.APPROVED


@dataclass(frozen=True)
class ApprovalPolicy:
    """Approval rule bound to the configured per-owner limit."""

    limit: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.limit, Decimal):
            object.__setattr__(self, "limit", Decimal(str(self.limit)))
        if self.limit < 0:
            raise ValueError("Approval limit must be non-negative")

    def decide(self, current_approved_total: Decimal, invoice_amount: Decimal) -> InvoiceStatus:
        return decide(current_approved_total, invoice_amount, self.limit)


__all__ = ["ApprovalPolicy", "decide"]
