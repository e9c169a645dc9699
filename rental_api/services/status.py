# This project was developed with assistance from AI tools.
"""Application status aggregation service.

Combines the status description, the transitions the caller can take now,
open requirements and the payment state into one summary.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from rental_db.enums import ApplicationStatus

from ..schemas.auth import UserContext
from ..schemas.status import ApplicationStatusResponse, StatusInfo
from .application import actor_for, require_application
from .lifecycle import allowed_transitions

logger = logging.getLogger(__name__)

# Human-readable descriptions for each application status.
STATUS_INFO: dict[str, StatusInfo] = {
    ApplicationStatus.DRAFT.value: StatusInfo(
        label="Draft",
        description="Your application is saved as you go. You can leave and resume at any time.",
        next_step="Complete every step, accept the terms and submit.",
    ),
    ApplicationStatus.SUBMITTED.value: StatusInfo(
        label="Submitted",
        description="Your application was received and is waiting for the landlord.",
        next_step="Pay the application fee if you have not already.",
    ),
    ApplicationStatus.UNDER_REVIEW.value: StatusInfo(
        label="Under Review",
        description="The landlord is reviewing your application.",
        next_step="No action needed unless more information is requested.",
    ),
    ApplicationStatus.INFO_REQUESTED.value: StatusInfo(
        label="Information Requested",
        description="The landlord needs more information before deciding.",
        next_step="Provide the requested information to resume the review.",
    ),
    ApplicationStatus.CONDITIONAL_APPROVAL.value: StatusInfo(
        label="Conditionally Approved",
        description="You are approved once the listed conditions are satisfied.",
        next_step="Satisfy the outstanding conditions before the due date.",
    ),
    ApplicationStatus.APPROVED.value: StatusInfo(
        label="Approved",
        description="Your application has been approved.",
        next_step="The landlord will contact you about the lease.",
    ),
    ApplicationStatus.REJECTED.value: StatusInfo(
        label="Rejected",
        description="Your application was not approved.",
        next_step="No further action required.",
    ),
    ApplicationStatus.WITHDRAWN.value: StatusInfo(
        label="Withdrawn",
        description="This application has been withdrawn.",
        next_step="You may start a new application for this property at any time.",
    ),
    ApplicationStatus.EXPIRED.value: StatusInfo(
        label="Expired",
        description="This application expired without a decision.",
        next_step="You may start a new application for this property at any time.",
    ),
}


async def get_application_status(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> ApplicationStatusResponse:
    """Build an aggregated status summary for an application."""
    app = await require_application(session, user, application_id)
    actor = actor_for(user, app)

    open_requirements = sum(1 for r in app.requirements if r.required and not r.satisfied)

    return ApplicationStatusResponse(
        application_id=app.id,
        status=app.status.value,
        status_info=STATUS_INFO[app.status.value],
        allowed_transitions=[s.value for s in allowed_transitions(app.status, actor)],
        open_requirement_count=open_requirements,
        payment_status=app.payment_status.value,
        version=app.version,
        expires_at=app.expires_at,
    )
