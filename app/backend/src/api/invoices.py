"""Invoice endpoints."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.backend.src.core.security import (
    CallerIdentity,
    get_caller_identity,
    require_finance_specialist,
    require_purchasing_specialist,
)
from app.backend.src.db import get_session_dependency
from app.backend.src.models import InvoiceStatus
from app.backend.src.schemas.invoice import InvoiceCreate, InvoiceRead
from app.backend.src.services.invoice_lifecycle import InvoiceLifecycle, get_invoice_lifecycle

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]
LifecycleDep = Annotated[InvoiceLifecycle, Depends(get_invoice_lifecycle)]


@router.post(
    "",
    response_model=InvoiceRead,
    responses={status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": InvoiceRead}},
)
def create_invoice(
    payload: InvoiceCreate,
    response: Response,
    session: SessionDep,
    lifecycle: LifecycleDep,
    caller: Annotated[CallerIdentity, Depends(require_purchasing_specialist)],
) -> InvoiceRead:
    """Submit an invoice; answered 200 when approved and 422 when rejected."""

    invoice = lifecycle.create_invoice(session, payload, caller)
    if invoice.status == InvoiceStatus.REJECTED.value:
        response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return InvoiceRead.from_invoice(invoice)


@router.get(
    "",
    response_model=list[InvoiceRead],
    dependencies=[Depends(require_finance_specialist)],
)
def search_invoices(
    session: SessionDep,
    lifecycle: LifecycleDep,
    invoice_status: Annotated[InvoiceStatus | None, Query(alias="status")] = None,
    email: str | None = None,
    first_name: Annotated[str | None, Query(alias="firstName")] = None,
    last_name: Annotated[str | None, Query(alias="lastName")] = None,
) -> list[InvoiceRead]:
    """Return invoices matching every supplied filter."""

    invoices = lifecycle.search(
        session,
        status=invoice_status,
        email=email,
        first_name=first_name,
        last_name=last_name,
    )
    return [InvoiceRead.from_invoice(invoice) for invoice in invoices]


@router.get(
    "/approved",
    response_model=list[InvoiceRead],
    dependencies=[Depends(require_finance_specialist)],
)
def list_approved_invoices(session: SessionDep, lifecycle: LifecycleDep) -> list[InvoiceRead]:
    return [
        InvoiceRead.from_invoice(invoice)
        for invoice in lifecycle.list_by_status(session, InvoiceStatus.APPROVED)
    ]


@router.get(
    "/rejected",
    response_model=list[InvoiceRead],
    dependencies=[Depends(require_finance_specialist)],
)
def list_rejected_invoices(session: SessionDep, lifecycle: LifecycleDep) -> list[InvoiceRead]:
    return [
        InvoiceRead.from_invoice(invoice)
        for invoice in lifecycle.list_by_status(session, InvoiceStatus.REJECTED)
    ]


@router.get("/mine", response_model=list[InvoiceRead])
def list_own_invoices(
    session: SessionDep,
    lifecycle: LifecycleDep,
    caller: Annotated[CallerIdentity, Depends(require_purchasing_specialist)],
    invoice_status: Annotated[InvoiceStatus, Query(alias="status")] = InvoiceStatus.APPROVED,
) -> list[InvoiceRead]:
    """Return the caller's own invoices in one status."""

    return [
        InvoiceRead.from_invoice(invoice)
        for invoice in lifecycle.list_own_by_status(session, invoice_status, caller)
    ]


@router.get(
    "/{invoice_id}",
    response_model=InvoiceRead,
    dependencies=[Depends(get_caller_identity)],
)
def get_invoice(invoice_id: int, session: SessionDep, lifecycle: LifecycleDep) -> InvoiceRead:
    return InvoiceRead.from_invoice(lifecycle.get_by_id(session, invoice_id))


@router.patch("/{invoice_id}/cancel", response_model=InvoiceRead)
def cancel_invoice(
    invoice_id: int,
    session: SessionDep,
    lifecycle: LifecycleDep,
    caller: Annotated[CallerIdentity, Depends(require_purchasing_specialist)],
) -> InvoiceRead:
    """Cancel one of the caller's rejected invoices."""

    invoice = lifecycle.cancel_invoice(session, invoice_id, caller)
    LOGGER.info("invoice_cancel_completed", invoice_id=invoice.id, email=caller.email)
    return InvoiceRead.from_invoice(invoice)


__all__ = ["router"]
