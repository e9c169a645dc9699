# This project was developed with assistance from AI tools.
"""Application request/response schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rental_db.enums import (
    ApplicationStatus,
    PaymentStatus,
    RejectionCategory,
)

from . import Pagination
from .requirement import RequirementIn, RequirementItem


class ScoreBreakdownItem(BaseModel):
    """Screening score components stored at submission."""

    income: int
    rental_history: int
    employment: int
    documents: int
    total: int
    max_score: int
    flags: list[str] = []


class RejectionDetails(BaseModel):
    """What the applicant is told about a rejection."""

    categories: list[RejectionCategory] = []
    explanation: str | None = None
    appealable: bool = True


class ApplicationResponse(BaseModel):
    """Single application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    applicant_id: str
    property_id: str
    status: ApplicationStatus
    current_step: int
    last_saved_step: int
    fields: dict = {}
    draft_revision: int = 0
    submitted_at: datetime | None = None

    score: int | None = None
    score_breakdown: ScoreBreakdownItem | None = None
    scored_at: datetime | None = None

    property_title: str | None = None
    property_address: str | None = None
    property_owner_id: str | None = None
    application_fee: Decimal | None = None

    payment_status: PaymentStatus
    payment_paid_at: datetime | None = None

    info_requested_reason: str | None = None
    info_requested_at: datetime | None = None
    info_requested_by: str | None = None
    info_requested_due_date: datetime | None = None

    conditional_approval_reason: str | None = None
    conditional_approval_due_date: datetime | None = None
    conditional_approval_at: datetime | None = None
    conditional_approval_by: str | None = None
    requirements: list[RequirementItem] = []

    rejection_category: RejectionCategory | None = None
    rejection_reason: str | None = None
    rejection_details: RejectionDetails | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    withdrawn_reason: str | None = None

    expires_at: datetime | None = None
    expired_at: datetime | None = None

    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    pagination: Pagination


class TransitionPayload(BaseModel):
    """Status-specific data carried by a transition.

    Only the members relevant to the target status are read: ``reason``
    for info requests, rejections and withdrawals; ``reason``, ``due_date``
    and ``requirements`` together for conditional approval;
    ``legal_acceptance`` for submission; ``category`` and
    ``rejection_details`` for rejection.
    """

    reason: str | None = None
    due_date: datetime | None = None
    requirements: list[RequirementIn] = []
    category: RejectionCategory | None = None
    rejection_details: RejectionDetails | None = None
    legal_acceptance: bool = False


class TransitionRequest(TransitionPayload):
    """Request body for POST /applications/{id}/transitions."""

    to_status: ApplicationStatus
    expected_version: int | None = Field(
        default=None,
        description="Version the caller last read; a mismatch is rejected with 409.",
    )

    @field_validator("to_status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        if isinstance(value, str):
            try:
                return ApplicationStatus.normalize(value)
            except ValueError:
                return value
        return value


class SubmitRequest(BaseModel):
    """Request body for POST /applications/{id}/submit."""

    legal_acceptance: bool = False
    expected_version: int | None = None


class StatusEventItem(BaseModel):
    """One entry in an application's status history."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    from_status: ApplicationStatus | None = None
    to_status: ApplicationStatus
    actor_id: str
    actor: str
    reason: str | None = None
    created_at: datetime | None = None


class StatusHistoryResponse(BaseModel):
    """Response for GET /applications/{id}/history."""

    data: list[StatusEventItem]


class ExpireStaleResponse(BaseModel):
    """Response for POST /admin/expire-stale."""

    expired_ids: list[int]
    count: int
