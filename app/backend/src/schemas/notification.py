"""Notification event schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class NotificationRead(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    invoice_id: int | None
    first_name: str | None
    last_name: str | None
    email: str | None
    amount: Decimal | None
    product_name: str | None
    bill_no: str | None
    message: str
    source: str
    created_at: datetime | None = None


class WebhookPayload(BaseModel):
    """Body accepted by the mock webhook receiver."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    invoice_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    amount: Decimal | None = None
    product_name: str | None = None
    bill_no: str | None = None
    message: str = ""
