"""Persistence queries for invoices."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from app.backend.src.core.errors import InvoiceNotFound
from app.backend.src.models import Invoice, InvoiceStatus, User

_CENT = Decimal("0.01")


class InvoiceLedger:
    """Invoice queries bound to one session (and so to one transaction)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def sum_approved_amount(self, owner_email: str) -> Decimal:
        """Return the owner's total approved spend, zero when there is none."""

        total = self.session.execute(
            select(func.coalesce(func.sum(Invoice.amount), 0))
            .select_from(Invoice)
            .join(User, Invoice.owner_id == User.id)
            .where(
                User.email == owner_email,
                Invoice.status == InvoiceStatus.APPROVED.value,
            )
        ).scalar_one()
        # SQLite hands SUM(Numeric) back as a float; quantizing its repr to
        # cents restores the exact two-place value.
        return Decimal(str(total)).quantize(_CENT)

    def exists_approved_with_bill_no(self, bill_no: str) -> bool:
        return bool(
            self.session.execute(
                select(
                    exists().where(
                        Invoice.bill_no == bill_no,
                        Invoice.status == InvoiceStatus.APPROVED.value,
                    )
                )
            ).scalar()
        )

    def find_by_id(self, invoice_id: int, *, for_update: bool = False) -> Invoice:
        statement = select(Invoice).where(Invoice.id == invoice_id)
        if for_update:
            statement = statement.with_for_update(of=Invoice).execution_options(
                populate_existing=True
            )
        invoice = self.session.execute(statement).scalar_one_or_none()
        if invoice is None:
            raise InvoiceNotFound(invoice_id)
        return invoice

    def find_by_status(self, status: InvoiceStatus) -> list[Invoice]:
        return list(
            self.session.execute(
                select(Invoice)
                .where(Invoice.status == status.value)
                .order_by(Invoice.id)
            ).scalars()
        )

    def find_by_status_and_owner(self, status: InvoiceStatus, owner_email: str) -> list[Invoice]:
        return list(
            self.session.execute(
                select(Invoice)
                .join(Invoice.owner)
                .where(Invoice.status == status.value, User.email == owner_email)
                .order_by(Invoice.id)
            ).scalars()
        )

    def find_with_filters(
        self,
        *,
        status: InvoiceStatus | None = None,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> list[Invoice]:
        """Return invoices matching every filter that is not ``None``."""

        statement = select(Invoice).join(Invoice.owner)
        if status is not None:
            statement = statement.where(Invoice.status == status.value)
        if email is not None:
            statement = statement.where(User.email == email)
        if first_name is not None:
            statement = statement.where(User.first_name == first_name)
        if last_name is not None:
            statement = statement.where(User.last_name == last_name)
        return list(self.session.execute(statement.order_by(Invoice.id)).scalars())

    def lock_owner(self, owner_email: str) -> User | None:
        """Row-lock the owner's user record for the rest of the transaction."""

        return self.session.execute(
            select(User)
            .where(User.email == owner_email)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def save(self, invoice: Invoice) -> Invoice:
        self.session.add(invoice)
        self.session.flush()
        return invoice


__all__ = ["InvoiceLedger"]
