"""Prometheus metric definitions for invoice processing."""

from __future__ import annotations

from prometheus_client import Counter

invoice_decisions_total = Counter(
    "invoice_decisions_total",
    "Invoices decided at creation, by resulting status.",
    labelnames=["status"],
)

invoice_cancellations_total = Counter(
    "invoice_cancellations_total",
    "Invoices moved to CANCELLED by their owner.",
)

webhook_deliveries_total = Counter(
    "webhook_deliveries_total",
    "Webhook delivery attempts by outcome.",
    labelnames=["outcome"],
)

__all__ = [
    "invoice_cancellations_total",
    "invoice_decisions_total",
    "webhook_deliveries_total",
]
