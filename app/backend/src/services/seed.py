"""Utilities for seeding development data."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.backend.src.core.security import hash_password
from app.backend.src.models import Product, User, UserRole

DEFAULT_PASSWORD = "password123"

DEFAULT_USERS: tuple[tuple[str, str, str, UserRole], ...] = (
    ("purchaser1@example.com", "Ada", "Purchaser", UserRole.PURCHASING_SPECIALIST),
    ("purchaser2@example.com", "Bo", "Buyer", UserRole.PURCHASING_SPECIALIST),
    ("finance@example.com", "Fin", "Reviewer", UserRole.FINANCE_SPECIALIST),
)

DEFAULT_PRODUCTS: tuple[tuple[str, Decimal, str], ...] = (
    ("Laptop", Decimal("150.00"), "Developer laptop"),
    ("Monitor", Decimal("60.00"), "27 inch monitor"),
    ("Keyboard", Decimal("25.00"), "Mechanical keyboard"),
)


@dataclass
class SeedResult:
    """Records created by :func:`seed_development_data`."""

    users_created: list[str] = field(default_factory=list)
    products_created: list[str] = field(default_factory=list)


def seed_development_data(session: Session, *, password: str = DEFAULT_PASSWORD) -> SeedResult:
    """Ensure demo users and products exist for local development.

    Existing records are left untouched, so running twice is harmless.
    """

    result = SeedResult()

    for email, first_name, last_name, role in DEFAULT_USERS:
        existing = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing is None:
            session.add(
                User(
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    password_hash=hash_password(password),
                    role=role.value,
                )
            )
            result.users_created.append(email)

    for name, price, description in DEFAULT_PRODUCTS:
        existing = session.execute(select(Product).where(Product.name == name)).scalar_one_or_none()
        if existing is None:
            session.add(Product(name=name, price=price, description=description))
            result.products_created.append(name)

    session.flush()
    return result


__all__ = ["SeedResult", "seed_development_data"]
