# This project was developed with assistance from AI tools.
"""Conditional-approval requirement checklist.

Requirements are created by the transition into ``conditional_approval``
and frozen once the application leaves it. Satisfying one never changes
the application status; approval re-checks the checklist itself.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from rental_db import Application
from rental_db.enums import Actor, ApplicationStatus

from ..schemas.auth import UserContext
from .application import actor_for, commit_versioned, require_application
from .errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

_SATISFY_ACTORS = frozenset({Actor.LANDLORD, Actor.ADMIN, Actor.SYSTEM})


async def satisfy_requirement(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    requirement_id: int,
    *,
    notes: str | None = None,
    file_id: str | None = None,
) -> Application:
    """Mark a requirement satisfied and return the application. Idempotent.

    Raises:
        NotFoundError: Application or requirement missing or out of scope.
        ConflictError: The caller may not satisfy requirements, or the
            checklist is frozen because the application left
            conditional_approval.
    """
    app = await require_application(session, user, application_id)
    actor = actor_for(user, app)

    requirement = next((r for r in app.requirements if r.id == requirement_id), None)
    if requirement is None:
        raise NotFoundError(f"Requirement {requirement_id} not found on application {application_id}")

    if requirement.satisfied:
        return app

    if actor not in _SATISFY_ACTORS:
        logger.warning(
            "RBAC denial: actor %s may not satisfy requirement %s on application %s",
            actor.value,
            requirement_id,
            application_id,
        )
        raise ConflictError(
            "Only staff can mark requirements satisfied.", errors={"actor": actor.value}
        )
    if app.status != ApplicationStatus.CONDITIONAL_APPROVAL:
        raise ConflictError(
            f"Application {application_id} is {app.status.value}; its requirements are frozen.",
            errors={"status": app.status.value},
        )

    now = datetime.now(UTC)
    requirement.satisfied = True
    requirement.satisfied_at = now
    requirement.satisfied_by = user.user_id
    if notes is not None:
        requirement.notes = notes
    if file_id is not None:
        requirement.file_id = file_id
    # Bump the application version so approval races are detected
    app.updated_at = now

    await commit_versioned(session, application_id)
    logger.info(
        "Requirement %s on application %s satisfied by %s",
        requirement_id,
        application_id,
        user.user_id,
    )
    return app
