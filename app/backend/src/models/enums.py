"""Enumerations shared by the ORM models and API schemas."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    PURCHASING_SPECIALIST = "PURCHASING_SPECIALIST"
    FINANCE_SPECIALIST = "FINANCE_SPECIALIST"


class InvoiceStatus(str, Enum):
    """Persisted invoice states.

    Invoices are decided at creation, so there is no pending state.
    """

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class NotificationSource(str, Enum):
    DISPATCHER = "dispatcher"
    WEBHOOK = "webhook"


__all__ = ["InvoiceStatus", "NotificationSource", "UserRole"]
