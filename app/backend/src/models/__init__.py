"""ORM models exposed for easy imports."""

from .base import Base
from .enums import InvoiceStatus, NotificationSource, UserRole
from .invoice import Invoice
from .notification import NotificationEvent
from .product import Product
from .user import User

__all__ = [
    "Base",
    "Invoice",
    "InvoiceStatus",
    "NotificationEvent",
    "NotificationSource",
    "Product",
    "User",
    "UserRole",
]
