"""Public API routers exposed by the FastAPI application."""

from . import (
    auth,
    health,
    invoices,
    notifications,
    products,
    webhooks,
)

__all__ = [
    "auth",
    "health",
    "invoices",
    "notifications",
    "products",
    "webhooks",
]
