"""Invoice model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .enums import InvoiceStatus


class Invoice(Base):
    """A purchase invoice submitted by a purchasing specialist."""

    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint(
            "status IN ('APPROVED','REJECTED','CANCELLED')",
            name="ck_invoices_status_valid",
        ),
        CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
        # Bill numbers are unique among approved invoices only.
        Index(
            "ux_invoices_approved_bill_no",
            "bill_no",
            unique=True,
            sqlite_where=text("status = 'APPROVED'"),
            postgresql_where=text("status = 'APPROVED'"),
        ),
        Index("ix_invoices_owner_status", "owner_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bill_no: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    owner: Mapped["User"] = relationship(
        "User", back_populates="invoices", lazy="joined", innerjoin=True
    )
    product: Mapped["Product"] = relationship(
        "Product", back_populates="invoices", lazy="joined", innerjoin=True
    )

    @property
    def invoice_status(self) -> InvoiceStatus:
        return InvoiceStatus(self.status)

    @property
    def owner_email(self) -> str:
        return self.owner.email

    def is_owned_by(self, email: str) -> bool:
        return self.owner.email == email


__all__ = ["Invoice"]
