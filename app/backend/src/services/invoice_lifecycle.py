"""Invoice lifecycle: creation with automatic approval, cancellation, reads.

Creation and cancellation for one owner are serialized: the approved total
is read and the new invoice written inside the same transaction while the
owner's lock is held, so two concurrent submissions can never both pass the
limit on a stale total.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.backend.src.core.config import get_settings
from app.backend.src.core.errors import (
    DuplicateBillNo,
    InvoiceIdentityMismatch,
    InvoiceServiceError,
    OwnershipViolation,
)
from app.backend.src.core.locks import OwnerLocks
from app.backend.src.core.security import CallerIdentity
from app.backend.src.models import Invoice, InvoiceStatus, Product
from app.backend.src.schemas.invoice import InvoiceCreate
from app.backend.src.services.approval_policy import ApprovalPolicy
from app.backend.src.services.invoice_ledger import InvoiceLedger
from app.backend.src.services.invoice_state import ensure_cancellable
from app.backend.src.services.metrics import (
    invoice_cancellations_total,
    invoice_decisions_total,
)
from app.backend.src.services.notifications import (
    INVOICE_CANCELLED_MESSAGE,
    INVOICE_REJECTED_MESSAGE,
    NotificationDispatcher,
)
from app.backend.src.services.products import get_product_by_name

LOGGER = structlog.get_logger(__name__)

ProductLookup = Callable[[Session, str], Product]


class InvoiceLifecycle:
    """Orchestrates invoice rules, persistence and notifications."""

    def __init__(
        self,
        policy: ApprovalPolicy,
        dispatcher: NotificationDispatcher,
        *,
        product_lookup: ProductLookup = get_product_by_name,
        locks: OwnerLocks | None = None,
    ) -> None:
        self.policy = policy
        self.dispatcher = dispatcher
        self.product_lookup = product_lookup
        self.locks = locks or OwnerLocks()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_invoice(self, session: Session, request: InvoiceCreate, caller: CallerIdentity) -> Invoice:
        """Create an invoice for ``caller``, decided APPROVED or REJECTED.

        Raises :class:`InvoiceIdentityMismatch` when the request names someone
        else, :class:`DuplicateBillNo` when an approved invoice already uses
        the bill number and :class:`ProductNotFound` for an unknown product.
        A limit breach is not an error: the invoice is stored as REJECTED.
        """

        LOGGER.info("invoice_create_requested", bill_no=request.bill_no, email=request.email)

        with self.locks.hold(caller.email):
            ledger = InvoiceLedger(session)
            try:
                owner = ledger.lock_owner(caller.email)
                if owner is None:
                    raise OwnershipViolation("Invoice owner has no account", email=caller.email)

                if not owner.matches_identity(request.email, request.first_name, request.last_name):
                    LOGGER.warning(
                        "invoice_identity_mismatch",
                        caller=caller.email,
                        requested=request.email,
                    )
                    raise InvoiceIdentityMismatch(caller=caller.email, requested=request.email)

                if ledger.exists_approved_with_bill_no(request.bill_no):
                    LOGGER.warning("duplicate_bill_no", bill_no=request.bill_no)
                    raise DuplicateBillNo(request.bill_no)

                product = self.product_lookup(session, request.product_name)

                current_total = ledger.sum_approved_amount(caller.email)
                status = self.policy.decide(current_total, request.amount)

                invoice = Invoice(
                    owner=owner,
                    product=product,
                    amount=request.amount,
                    bill_no=request.bill_no,
                    status=status.value,
                )
                ledger.save(invoice)
                session.commit()
            except InvoiceServiceError:
                session.rollback()
                raise
            except IntegrityError as exc:
                # Another owner approved the same bill number concurrently.
                session.rollback()
                if InvoiceLedger(session).exists_approved_with_bill_no(request.bill_no):
                    LOGGER.warning("duplicate_bill_no", bill_no=request.bill_no, concurrent=True)
                    raise DuplicateBillNo(request.bill_no) from exc
                raise

        session.refresh(invoice)
        invoice_decisions_total.labels(status=status.value).inc()
        LOGGER.info(
            "invoice_created",
            invoice_id=invoice.id,
            status=status.value,
            amount=str(invoice.amount),
            approved_total_before=str(current_total),
            limit=str(self.policy.limit),
        )

        if status is InvoiceStatus.REJECTED:
            self.dispatcher.emit(session, invoice, INVOICE_REJECTED_MESSAGE)
        return invoice

    def cancel_invoice(self, session: Session, invoice_id: int, caller: CallerIdentity) -> Invoice:
        """Cancel a REJECTED invoice owned by ``caller``."""

        LOGGER.info("invoice_cancel_requested", invoice_id=invoice_id, email=caller.email)

        with self.locks.hold(caller.email):
            ledger = InvoiceLedger(session)
            try:
                invoice = ledger.find_by_id(invoice_id, for_update=True)
                if not invoice.is_owned_by(caller.email):
                    LOGGER.warning(
                        "invoice_cancel_by_non_owner",
                        invoice_id=invoice_id,
                        email=caller.email,
                    )
                    raise OwnershipViolation(invoice_id=invoice_id, email=caller.email)

                invoice.status = ensure_cancellable(invoice.invoice_status).value
                ledger.save(invoice)
                session.commit()
            except InvoiceServiceError:
                session.rollback()
                raise

        session.refresh(invoice)
        invoice_cancellations_total.inc()
        LOGGER.info("invoice_cancelled", invoice_id=invoice.id)

        self.dispatcher.emit(session, invoice, INVOICE_CANCELLED_MESSAGE)
        return invoice

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, session: Session, invoice_id: int) -> Invoice:
        return InvoiceLedger(session).find_by_id(invoice_id)

    def list_by_status(self, session: Session, status: InvoiceStatus) -> list[Invoice]:
        return InvoiceLedger(session).find_by_status(status)

    def list_own_by_status(
        self, session: Session, status: InvoiceStatus, caller: CallerIdentity
    ) -> list[Invoice]:
        return InvoiceLedger(session).find_by_status_and_owner(status, caller.email)

    def search(
        self,
        session: Session,
        *,
        status: InvoiceStatus | None = None,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> list[Invoice]:
        return InvoiceLedger(session).find_with_filters(
            status=status,
            email=email,
            first_name=first_name,
            last_name=last_name,
        )


@lru_cache()
def get_invoice_lifecycle() -> InvoiceLifecycle:
    """Return the process-wide lifecycle built from settings."""

    settings = get_settings()
    return InvoiceLifecycle(
        ApprovalPolicy(settings.approval_limit),
        NotificationDispatcher(settings.webhook_urls),
    )


__all__ = ["InvoiceLifecycle", "get_invoice_lifecycle"]
