# This project was developed with assistance from AI tools.
"""Application lifecycle routes with RBAC enforcement.

Service-layer ``ApplicationError`` subclasses propagate to the handler in
``main.py``, which renders them as RFC 7807 problem responses.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rental_db import Application, get_db
from rental_db.enums import UserRole

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import (
    ApplicationListResponse,
    ApplicationResponse,
    StatusEventItem,
    StatusHistoryResponse,
    SubmitRequest,
    TransitionRequest,
)
from ..schemas.draft import (
    DraftPatchRequest,
    DraftUpsertRequest,
    IntakeStepItem,
    IntakeStepsResponse,
)
from ..schemas.payment import (
    PaymentAttemptCreate,
    PaymentAttemptItem,
    PaymentAttemptResponse,
    PaymentLedgerResponse,
)
from ..schemas.requirement import SatisfyRequirementRequest
from ..schemas.status import ApplicationStatusResponse
from ..services import application as app_service
from ..services.catalog import PropertyCatalog, get_property_catalog
from ..services.draft import get_draft, upsert_draft
from ..services.intake import INTAKE_STEP_COUNT, INTAKE_STEPS
from ..services.payment import list_payment_attempts, record_payment_attempt
from ..services.requirement import satisfy_requirement
from ..services.status import get_application_status

router = APIRouter()

_ALL_ROLES = (
    UserRole.ADMIN,
    UserRole.RENTER,
    UserRole.LANDLORD,
    UserRole.PROPERTY_MANAGER,
)
_STAFF_ROLES = (UserRole.ADMIN, UserRole.LANDLORD, UserRole.PROPERTY_MANAGER)


def _build_app_response(app: Application) -> ApplicationResponse:
    return ApplicationResponse.model_validate(app)


# ---------------------------------------------------------------------------
# Intake / drafts (static paths before /{application_id})
# ---------------------------------------------------------------------------


@router.get(
    "/intake-steps",
    response_model=IntakeStepsResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def intake_steps() -> IntakeStepsResponse:
    """Describe the intake form: steps, their fields and required subset."""
    return IntakeStepsResponse(
        data=[
            IntakeStepItem(
                number=step.number,
                label=step.label,
                fields=list(step.fields),
                required=list(step.required),
            )
            for step in INTAKE_STEPS
        ],
        step_count=INTAKE_STEP_COUNT,
    )


@router.post(
    "/drafts",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.RENTER))],
)
async def save_draft(
    body: DraftUpsertRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    catalog: PropertyCatalog = Depends(get_property_catalog),
) -> ApplicationResponse:
    """Create the caller's draft for a property, or merge into the open one."""
    app = await upsert_draft(
        session,
        user,
        body.property_id,
        body.step,
        body.fields,
        revision=body.revision,
        catalog=catalog,
    )
    return _build_app_response(app)


@router.get(
    "/drafts",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.RENTER))],
)
async def resume_draft(
    user: CurrentUser,
    property_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Return the caller's open application for a property so the form can resume."""
    app = await get_draft(session, user, property_id)
    if app is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No open application for this property",
        )
    return _build_app_response(app)


@router.patch(
    "/{application_id}/draft",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.RENTER))],
)
async def patch_draft(
    application_id: int,
    body: DraftPatchRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    catalog: PropertyCatalog = Depends(get_property_catalog),
) -> ApplicationResponse:
    """Merge a field delta into a known draft."""
    app = await upsert_draft(
        session,
        user,
        body.property_id,
        body.step,
        body.fields,
        application_id=application_id,
        revision=body.revision,
        catalog=catalog,
    )
    return _build_app_response(app)


@router.post(
    "/{application_id}/submit",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.RENTER))],
)
async def submit(
    application_id: int,
    body: SubmitRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Submit a draft. Requires legal acceptance and every required field."""
    app = await app_service.submit_application(
        session,
        user,
        application_id,
        legal_acceptance=body.legal_acceptance,
        expected_version=body.expected_version,
    )
    return _build_app_response(app)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@router.get(
    "/",
    response_model=ApplicationListResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_applications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: str | None = Query(default=None, alias="status"),
    property_id: str | None = None,
    applicant_id: str | None = None,
) -> ApplicationListResponse:
    """List applications visible to the current user's role and data scope."""
    applications, total = await app_service.list_applications(
        session,
        user,
        offset=offset,
        limit=limit,
        filter_status=filter_status,
        property_id=property_id,
        applicant_id=applicant_id,
    )
    return ApplicationListResponse(
        data=[_build_app_response(app) for app in applications],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Get a single application. Returns 404 for out-of-scope resources."""
    app = await app_service.get_application(session, user, application_id)
    if app is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return _build_app_response(app)


@router.post(
    "/{application_id}/transitions",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def transition(
    application_id: int,
    body: TransitionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Move an application to a new status.

    The actor (applicant, landlord, admin) is resolved from the caller's
    identity and ownership, never from the request body.
    """
    app = await app_service.transition_status(
        session,
        user,
        application_id,
        body.to_status,
        body,
        expected_version=body.expected_version,
    )
    return _build_app_response(app)


@router.get(
    "/{application_id}/status",
    response_model=ApplicationStatusResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_status(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationStatusResponse:
    """Get aggregated status summary for an application."""
    return await get_application_status(session, user, application_id)


@router.get(
    "/{application_id}/history",
    response_model=StatusHistoryResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_history(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> StatusHistoryResponse:
    """Status changes for an application, oldest first."""
    events = await app_service.get_status_history(session, user, application_id)
    return StatusHistoryResponse(data=[StatusEventItem.model_validate(e) for e in events])


# ---------------------------------------------------------------------------
# Requirements
# ---------------------------------------------------------------------------


@router.post(
    "/{application_id}/requirements/{requirement_id}/satisfy",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_STAFF_ROLES))],
)
async def satisfy(
    application_id: int,
    requirement_id: int,
    user: CurrentUser,
    body: SatisfyRequirementRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Mark a conditional-approval requirement satisfied. Idempotent."""
    body = body or SatisfyRequirementRequest()
    app = await satisfy_requirement(
        session,
        user,
        application_id,
        requirement_id,
        notes=body.notes,
        file_id=body.file_id,
    )
    return _build_app_response(app)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


@router.get(
    "/{application_id}/payments",
    response_model=PaymentLedgerResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_payments(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PaymentLedgerResponse:
    """The application's payment ledger, oldest attempt first."""
    attempts, payment_status = await list_payment_attempts(session, user, application_id)
    return PaymentLedgerResponse(
        data=[PaymentAttemptItem.model_validate(a) for a in attempts],
        payment_status=payment_status,
    )


@router.post(
    "/{application_id}/payments",
    response_model=PaymentAttemptResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def post_payment(
    application_id: int,
    body: PaymentAttemptCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PaymentAttemptResponse:
    """Record a payment attempt (applicant) or a manual verification (staff)."""
    attempt = await record_payment_attempt(
        session,
        user,
        application_id,
        body.amount,
        body.method,
        outcome=body.outcome,
        reference_id=body.reference_id,
        error_message=body.error_message,
    )
    return PaymentAttemptResponse(
        data=PaymentAttemptItem.model_validate(attempt),
        payment_status=attempt.status.payment_status(),
    )
