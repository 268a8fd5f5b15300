"""User model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class User(Base):
    """Represents an application user."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('PURCHASING_SPECIALIST','FINANCE_SPECIALIST')",
            name="ck_users_role_valid",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    invoices: Mapped[list["Invoice"]] = relationship("Invoice", back_populates="owner")

    def matches_identity(self, email: str, first_name: str, last_name: str) -> bool:
        """Return ``True`` when all identity fields match exactly."""

        return (
            self.email == email
            and self.first_name == first_name
            and self.last_name == last_name
        )


__all__ = ["User"]
