"""Invoice schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.backend.src.models import Invoice, InvoiceStatus

_STATUS_MESSAGES = {
    InvoiceStatus.APPROVED: "Invoice accepted",
    InvoiceStatus.REJECTED: "Invoice rejected: limit exceeded",
    InvoiceStatus.CANCELLED: "Invoice cancelled",
}


class InvoiceCreate(BaseModel):
    """Invoice submission; identity fields must match the caller."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    product_name: str = Field(min_length=1)
    bill_no: str = Field(min_length=1, max_length=128)


class InvoiceRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    status: InvoiceStatus
    message: str
    amount: Decimal
    bill_no: str
    product_name: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime | None = None

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceRead":
        status = invoice.invoice_status
        return cls(
            id=invoice.id,
            status=status,
            message=_STATUS_MESSAGES[status],
            amount=invoice.amount,
            bill_no=invoice.bill_no,
            product_name=invoice.product.name,
            email=invoice.owner.email,
            first_name=invoice.owner.first_name,
            last_name=invoice.owner.last_name,
            created_at=invoice.created_at,
        )
