"""Concurrent submissions must never push an owner past the limit."""

from __future__ import annotations

import os
import sys
import threading
from decimal import Decimal
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_purchase_invoice.db")
os.environ.setdefault("APPROVAL_LIMIT", "200")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest

from app.backend.src.core.errors import DuplicateBillNo
from app.backend.src.core.locks import OwnerLocks
from app.backend.src.core.security import CallerIdentity
from app.backend.src.db import get_engine, get_session, session_scope
from app.backend.src.models import Base, InvoiceStatus, Product, User, UserRole
from app.backend.src.schemas.invoice import InvoiceCreate
from app.backend.src.services.approval_policy import ApprovalPolicy
from app.backend.src.services.invoice_ledger import InvoiceLedger
from app.backend.src.services.invoice_lifecycle import InvoiceLifecycle
from app.backend.src.services.notifications import NotificationDispatcher

ADA = CallerIdentity("ada@example.com", "Ada", "Lovelace", UserRole.PURCHASING_SPECIALIST)
BO = CallerIdentity("bo@example.com", "Bo", "Buyer", UserRole.PURCHASING_SPECIALIST)


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        for caller in (ADA, BO):
            session.add(
                User(
                    email=caller.email,
                    first_name=caller.first_name,
                    last_name=caller.last_name,
                    password_hash="x",
                    role=caller.role.value,
                )
            )
        session.add(Product(name="Laptop", price=Decimal("150.00")))
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def lifecycle() -> InvoiceLifecycle:
    return InvoiceLifecycle(ApprovalPolicy(Decimal("200")), NotificationDispatcher(()))


def _request(caller: CallerIdentity, bill_no: str, amount: str) -> InvoiceCreate:
    return InvoiceCreate(
        first_name=caller.first_name,
        last_name=caller.last_name,
        email=caller.email,
        amount=Decimal(amount),
        product_name="Laptop",
        bill_no=bill_no,
    )


def _submit_together(lifecycle: InvoiceLifecycle, submissions):  # type: ignore[no-untyped-def]
    barrier = threading.Barrier(len(submissions))
    statuses: list[str] = []
    errors: list[Exception] = []

    def submit(caller: CallerIdentity, bill_no: str, amount: str) -> None:
        barrier.wait()
        try:
            with get_session() as session:
                invoice = lifecycle.create_invoice(session, _request(caller, bill_no, amount), caller)
                statuses.append(invoice.status)
        except Exception as exc:  # noqa: BLE001 - collected for assertions
            errors.append(exc)

    threads = [threading.Thread(target=submit, args=args) for args in submissions]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    assert not any(thread.is_alive() for thread in threads), "submission did not finish"
    assert len(statuses) + len(errors) == len(submissions)
    return statuses, errors


def test_same_owner_cannot_exceed_limit_concurrently(lifecycle: InvoiceLifecycle) -> None:
    statuses, errors = _submit_together(
        lifecycle,
        [(ADA, "B-1", "120.00"), (ADA, "B-2", "100.00")],
    )

    assert errors == []
    assert sorted(statuses) == [InvoiceStatus.APPROVED.value, InvoiceStatus.REJECTED.value]
    with get_session() as session:
        assert InvoiceLedger(session).sum_approved_amount(ADA.email) <= Decimal("200")


def test_many_submissions_keep_total_within_limit(lifecycle: InvoiceLifecycle) -> None:
    submissions = [(ADA, f"B-{index}", "45.00") for index in range(8)]

    statuses, errors = _submit_together(lifecycle, submissions)

    assert errors == []
    assert statuses.count(InvoiceStatus.APPROVED.value) == 4
    assert statuses.count(InvoiceStatus.REJECTED.value) == 4
    with get_session() as session:
        assert InvoiceLedger(session).sum_approved_amount(ADA.email) == Decimal("180.00")


def test_different_owners_are_decided_independently(lifecycle: InvoiceLifecycle) -> None:
    statuses, errors = _submit_together(
        lifecycle,
        [(ADA, "B-1", "150.00"), (BO, "B-2", "150.00")],
    )

    assert errors == []
    assert statuses == [InvoiceStatus.APPROVED.value, InvoiceStatus.APPROVED.value]


def test_same_bill_number_is_approved_once_across_owners(lifecycle: InvoiceLifecycle) -> None:
    statuses, errors = _submit_together(
        lifecycle,
        [(ADA, "SHARED", "10.00"), (BO, "SHARED", "10.00")],
    )

    assert statuses == [InvoiceStatus.APPROVED.value]
    assert len(errors) == 1
    assert isinstance(errors[0], DuplicateBillNo)


def test_owner_locks_keep_one_entry_per_owner() -> None:
    locks = OwnerLocks()

    for _ in range(3):
        with locks.hold("Ada@Example.com"):
            pass
        with locks.hold("ada@example.com"):
            pass
    with locks.hold("bo@example.com"):
        pass

    assert sorted(locks._locks) == ["ada@example.com", "bo@example.com"]
