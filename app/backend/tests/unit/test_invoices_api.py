"""API tests for invoice endpoints."""

from __future__ import annotations

import os
import sys
from decimal import Decimal
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_purchase_invoice.db")
os.environ.setdefault("APPROVAL_LIMIT", "200")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from app.backend.src.core.security import get_current_user
from app.backend.src.db import get_engine, session_scope
from app.backend.src.main import app
from app.backend.src.models import Base, Product, User, UserRole

USERS = {
    "ada@example.com": ("Ada", "Lovelace", UserRole.PURCHASING_SPECIALIST),
    "bo@example.com": ("Bo", "Buyer", UserRole.PURCHASING_SPECIALIST),
    "fin@example.com": ("Fin", "Reviewer", UserRole.FINANCE_SPECIALIST),
}


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        for email, (first_name, last_name, role) in USERS.items():
            session.add(
                User(
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    password_hash="x",
                    role=role.value,
                )
            )
        session.add_all(
            [
                Product(name="Laptop", price=Decimal("150.00")),
                Product(name="Monitor", price=Decimal("60.00")),
            ]
        )
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def login_as():  # type: ignore[no-untyped-def]
    def _login(email: str) -> None:
        def _override() -> User:
            with session_scope() as session:
                return session.execute(select(User).where(User.email == email)).scalar_one()

        app.dependency_overrides[get_current_user] = _override

    yield _login
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def _body(bill_no: str, amount: str, email: str = "ada@example.com", **overrides: str) -> dict[str, str]:
    first_name, last_name, _ = USERS[email]
    body = {
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "amount": amount,
        "productName": "Laptop",
        "billNo": bill_no,
    }
    body.update(overrides)
    return body


def test_requests_without_token_are_unauthorized(client: TestClient) -> None:
    response = client.post("/api/invoices", json=_body("B-1", "10.00"))

    assert response.status_code == 401


def test_approved_invoice_returns_200(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")

    response = client.post("/api/invoices", json=_body("B-1", "150.00"))

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "APPROVED"
    assert payload["message"] == "Invoice accepted"
    assert payload["billNo"] == "B-1"
    assert payload["productName"] == "Laptop"
    assert Decimal(payload["amount"]) == Decimal("150.00")


def test_rejected_invoice_returns_422_with_invoice(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")
    client.post("/api/invoices", json=_body("B-1", "150.00"))

    response = client.post("/api/invoices", json=_body("B-2", "60.00", productName="Monitor"))

    assert response.status_code == 422
    assert response.json()["status"] == "REJECTED"
    assert response.json()["message"] == "Invoice rejected: limit exceeded"

    response = client.post("/api/invoices", json=_body("B-3", "50.00"))
    assert response.status_code == 200


def test_identity_mismatch_returns_400(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")

    response = client.post("/api/invoices", json=_body("B-1", "10.00", firstName="Eve"))

    assert response.status_code == 400
    assert response.json()["code"] == "OWNERSHIP_VIOLATION"


def test_unknown_product_returns_404(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")

    response = client.post("/api/invoices", json=_body("B-1", "10.00", productName="Spaceship"))

    assert response.status_code == 404
    assert response.json()["code"] == "PRODUCT_NOT_FOUND"


def test_duplicate_approved_bill_number_returns_409(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")
    client.post("/api/invoices", json=_body("B-1", "10.00"))
    login_as("bo@example.com")

    response = client.post("/api/invoices", json=_body("B-1", "10.00", email="bo@example.com"))

    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_BILL_NO"


def test_malformed_body_is_rejected_before_the_core(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")

    response = client.post("/api/invoices", json=_body("B-1", "-5.00"))

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)


def test_finance_specialist_cannot_submit(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("fin@example.com")

    response = client.post("/api/invoices", json=_body("B-1", "10.00", email="fin@example.com"))

    assert response.status_code == 403


def test_cancel_flow(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")
    approved_id = client.post("/api/invoices", json=_body("B-1", "150.00")).json()["id"]
    rejected_id = client.post("/api/invoices", json=_body("B-2", "100.00")).json()["id"]

    response = client.patch(f"/api/invoices/{approved_id}/cancel")
    assert response.status_code == 409
    assert response.json()["code"] == "INVOICE_NOT_CANCELLABLE"

    login_as("bo@example.com")
    response = client.patch(f"/api/invoices/{rejected_id}/cancel")
    assert response.status_code == 403
    assert response.json()["code"] == "OWNERSHIP_VIOLATION"

    login_as("ada@example.com")
    response = client.patch(f"/api/invoices/{rejected_id}/cancel")
    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"

    response = client.patch(f"/api/invoices/{rejected_id}/cancel")
    assert response.status_code == 409

    response = client.patch("/api/invoices/9999/cancel")
    assert response.status_code == 404
    assert response.json()["code"] == "INVOICE_NOT_FOUND"


def test_get_invoice_by_id(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")
    invoice_id = client.post("/api/invoices", json=_body("B-1", "10.00")).json()["id"]

    login_as("fin@example.com")
    response = client.get(f"/api/invoices/{invoice_id}")
    assert response.status_code == 200
    assert response.json()["email"] == "ada@example.com"

    assert client.get("/api/invoices/9999").status_code == 404


def test_finance_listings(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")
    client.post("/api/invoices", json=_body("B-1", "150.00"))
    client.post("/api/invoices", json=_body("B-2", "100.00"))
    login_as("bo@example.com")
    client.post("/api/invoices", json=_body("B-3", "20.00", email="bo@example.com"))

    login_as("fin@example.com")
    approved = client.get("/api/invoices/approved").json()
    rejected = client.get("/api/invoices/rejected").json()
    by_name = client.get("/api/invoices", params={"firstName": "Ada", "status": "APPROVED"}).json()
    by_email = client.get("/api/invoices", params={"email": "bo@example.com"}).json()

    assert {item["billNo"] for item in approved} == {"B-1", "B-3"}
    assert [item["billNo"] for item in rejected] == ["B-2"]
    assert [item["billNo"] for item in by_name] == ["B-1"]
    assert [item["billNo"] for item in by_email] == ["B-3"]


def test_purchasing_specialist_cannot_use_finance_listings(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")

    assert client.get("/api/invoices/approved").status_code == 403
    assert client.get("/api/invoices").status_code == 403


def test_own_invoices_by_status(client: TestClient, login_as) -> None:  # type: ignore[no-untyped-def]
    login_as("ada@example.com")
    client.post("/api/invoices", json=_body("B-1", "150.00"))
    client.post("/api/invoices", json=_body("B-2", "100.00"))
    login_as("bo@example.com")
    client.post("/api/invoices", json=_body("B-3", "300.00", email="bo@example.com"))

    login_as("ada@example.com")
    default = client.get("/api/invoices/mine").json()
    rejected = client.get("/api/invoices/mine", params={"status": "REJECTED"}).json()

    assert [item["billNo"] for item in default] == ["B-1"]
    assert [item["billNo"] for item in rejected] == ["B-2"]
