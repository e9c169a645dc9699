# This project was developed with assistance from AI tools.
"""Schemas for the application fee payment ledger."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from rental_db.enums import PaymentAttemptStatus, PaymentMethod, PaymentStatus


class PaymentAttemptCreate(BaseModel):
    """Record one payment attempt or manual verification."""

    # Matches the NUMERIC(10, 2) ledger column
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    method: PaymentMethod
    outcome: PaymentAttemptStatus
    reference_id: str | None = Field(default=None, min_length=1, max_length=100)
    error_message: str | None = None


class PaymentAttemptItem(BaseModel):
    """Single ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    reference_id: str
    amount: Decimal
    method: PaymentMethod
    status: PaymentAttemptStatus
    error_message: str | None = None
    recorded_by: str | None = None
    created_at: datetime | None = None


class PaymentAttemptResponse(BaseModel):
    """Response for POST /applications/{id}/payments."""

    data: PaymentAttemptItem
    payment_status: PaymentStatus


class PaymentLedgerResponse(BaseModel):
    """Response for GET /applications/{id}/payments."""

    data: list[PaymentAttemptItem]
    payment_status: PaymentStatus
