"""Business faults raised by the invoice core and its collaborators.

Every fault carries a stable machine ``code`` and the HTTP status the API
layer answers with. The exception handler registered in ``main`` renders
them as ``{"detail": ..., "code": ...}``.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class InvoiceServiceError(Exception):
    """Base class for typed business faults."""

    code = "INVOICE_SERVICE_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, str]:
        return {"detail": self.message, "code": self.code}


class OwnershipViolation(InvoiceServiceError):
    """The caller is not the identity the invoice belongs to."""

    code = "OWNERSHIP_VIOLATION"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Invoice does not belong to the current user", **context: Any) -> None:
        super().__init__(message, **context)


class InvoiceIdentityMismatch(OwnershipViolation):
    """Request identity fields differ from the authenticated caller."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, **context: Any) -> None:
        super().__init__("Invoice can only be created with your own identity", **context)


class DuplicateBillNo(InvoiceServiceError):
    code = "DUPLICATE_BILL_NO"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, bill_no: str) -> None:
        super().__init__(f"An approved invoice already exists with bill number {bill_no}", bill_no=bill_no)
        self.bill_no = bill_no


class ProductNotFound(InvoiceServiceError):
    code = "PRODUCT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, reference: str | int) -> None:
        super().__init__(f"Product not found: {reference}", product=reference)


class InvoiceNotFound(InvoiceServiceError):
    code = "INVOICE_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, invoice_id: int) -> None:
        super().__init__(f"Invoice not found: {invoice_id}", invoice_id=invoice_id)
        self.invoice_id = invoice_id


class InvoiceCannotBeCancelled(InvoiceServiceError):
    code = "INVOICE_NOT_CANCELLABLE"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current_status: str) -> None:
        super().__init__(
            f"Invoice cannot be cancelled in status: {current_status}",
            status=current_status,
        )
        self.current_status = current_status


class ProductAlreadyExists(InvoiceServiceError):
    code = "PRODUCT_ALREADY_EXISTS"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, name: str) -> None:
        super().__init__(f"Product already exists: {name}", name=name)


class ProductInUse(InvoiceServiceError):
    code = "PRODUCT_IN_USE"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product {product_id} is referenced by invoices", product_id=product_id)


class EmailAlreadyExists(InvoiceServiceError):
    code = "EMAIL_ALREADY_EXISTS"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}", email=email)


class InvalidCredentials(InvoiceServiceError):
    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


__all__ = [
    "DuplicateBillNo",
    "EmailAlreadyExists",
    "InvalidCredentials",
    "InvoiceCannotBeCancelled",
    "InvoiceIdentityMismatch",
    "InvoiceNotFound",
    "InvoiceServiceError",
    "OwnershipViolation",
    "ProductAlreadyExists",
    "ProductInUse",
    "ProductNotFound",
]
