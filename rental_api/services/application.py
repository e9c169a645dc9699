# This project was developed with assistance from AI tools.
"""Application service with role-based data scope filtering.

Every query is filtered through the caller's DataScope so that renters see
only their own applications, landlords see applications for properties they
own, and property managers and admins see all.

``transition_status`` is the only code path that writes
``Application.status`` after a draft is created.
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from rental_db import Application, ApplicationStatusEvent, ConditionalRequirement
from rental_db.enums import Actor, ApplicationStatus

from ..core.auth import resolve_actor
from ..core.config import settings
from ..schemas.application import TransitionPayload
from ..schemas.auth import UserContext
from . import lifecycle
from .errors import ConflictError, NotFoundError, ValidationError
from .scope import apply_data_scope

logger = logging.getLogger(__name__)


async def list_applications(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    filter_status: ApplicationStatus | str | None = None,
    property_id: str | None = None,
    applicant_id: str | None = None,
) -> tuple[list[Application], int]:
    """Return applications visible to the current user.

    Args:
        filter_status: Only return applications in this status. Legacy
            aliases (``pending``, ``pending_payment``, ``payment_verified``)
            are accepted and mean ``submitted``.
        property_id: Only return applications for this property.
        applicant_id: Only return applications by this applicant.
    """
    if isinstance(filter_status, str) and not isinstance(filter_status, ApplicationStatus):
        try:
            filter_status = ApplicationStatus.normalize(filter_status)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown status '{filter_status}'.", errors={"status": "Unknown status"}
            ) from exc

    count_stmt = select(func.count(Application.id))
    count_stmt = apply_data_scope(count_stmt, user.data_scope, user)
    count_stmt = _apply_filters(count_stmt, filter_status, property_id, applicant_id)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(Application)
        .options(selectinload(Application.requirements))
        .order_by(Application.updated_at.desc(), Application.id.desc())
        .offset(offset)
        .limit(limit)
    )
    stmt = apply_data_scope(stmt, user.data_scope, user)
    stmt = _apply_filters(stmt, filter_status, property_id, applicant_id)
    result = await session.execute(stmt)
    applications = result.unique().scalars().all()

    return applications, total


def _apply_filters(stmt, filter_status, property_id, applicant_id):
    """Apply optional WHERE clauses for the list filters."""
    if filter_status is not None:
        stmt = stmt.where(Application.status == filter_status)
    if property_id is not None:
        stmt = stmt.where(Application.property_id == property_id)
    if applicant_id is not None:
        stmt = stmt.where(Application.applicant_id == applicant_id)
    return stmt


async def get_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> Application | None:
    """Return a single application if visible to the current user.

    Returns None (which the route maps to 404) for out-of-scope applications
    rather than 403, to avoid leaking existence of resources.
    """
    stmt = (
        select(Application)
        .options(selectinload(Application.requirements))
        .where(Application.id == application_id)
    )
    stmt = apply_data_scope(stmt, user.data_scope, user)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def require_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> Application:
    """Like ``get_application`` but raises NotFoundError when not visible."""
    app = await get_application(session, user, application_id)
    if app is None:
        logger.warning(
            "Application %s not found or out of scope for user %s (potential authorization issue)",
            application_id,
            user.user_id,
        )
        raise NotFoundError(f"Application {application_id} not found")
    return app


def actor_for(user: UserContext, app: Application) -> Actor:
    """Resolve the lifecycle actor, treating a foreign renter as not found."""
    try:
        return resolve_actor(user, app.applicant_id)
    except PermissionError as exc:
        logger.warning(
            "User %s attempted to act on application %s owned by another applicant",
            user.user_id,
            app.id,
        )
        raise NotFoundError(f"Application {app.id} not found") from exc


async def _load_requirements(session: AsyncSession, application_id: int) -> list[ConditionalRequirement]:
    """Re-read requirement rows, bypassing whatever the identity map holds."""
    stmt = (
        select(ConditionalRequirement)
        .where(ConditionalRequirement.application_id == application_id)
        .order_by(ConditionalRequirement.position)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def commit_versioned(session: AsyncSession, application_id: int) -> None:
    """Commit, mapping a lost optimistic-concurrency race to ConflictError."""
    try:
        await session.commit()
    except StaleDataError as exc:
        await session.rollback()
        logger.warning("Version conflict writing application %s", application_id)
        raise ConflictError(
            "Application was modified by another request. Reload and try again."
        ) from exc


async def transition_status(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    to: ApplicationStatus,
    payload: TransitionPayload | None = None,
    *,
    expected_version: int | None = None,
) -> Application:
    """Move an application to a new status through the guarded transition table.

    Raises:
        NotFoundError: Application missing or outside the caller's scope.
        ConflictError: ``expected_version`` is stale, or a concurrent write won.
        InvalidTransitionError: Edge not in the table, or not allowed for this actor.
        ValidationError: Target status guard failed.
    """
    payload = payload or TransitionPayload()
    app = await require_application(session, user, application_id)
    actor = actor_for(user, app)

    if expected_version is not None and expected_version != app.version:
        raise ConflictError(
            f"Application {application_id} is at version {app.version}, not {expected_version}.",
            errors={"version": str(app.version)},
        )

    if to == ApplicationStatus.SUBMITTED and app.status == ApplicationStatus.SUBMITTED and actor == Actor.APPLICANT:
        logger.info("Application %s already submitted; ignoring resubmission", application_id)
        return app

    lifecycle.check_transition(app, to, actor)

    requirements = None
    if to == ApplicationStatus.APPROVED:
        requirements = await _load_requirements(session, app.id)

    now = datetime.now(UTC)
    lifecycle.validate_payload(app, to, payload, now=now, requirements=requirements)

    from_status = app.status
    event = lifecycle.apply_transition(
        app,
        to,
        payload,
        actor=actor,
        actor_id=user.user_id,
        now=now,
        expiry_window=timedelta(days=settings.EXPIRY_WINDOW_DAYS),
    )
    session.add(event)
    await commit_versioned(session, application_id)

    logger.info(
        "Application %s transitioned %s -> %s by %s (%s)",
        application_id,
        from_status.value,
        to.value,
        user.user_id,
        actor.value,
    )
    return app


async def submit_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    legal_acceptance: bool,
    expected_version: int | None = None,
) -> Application:
    """Submit a draft. Idempotent for an application that is already submitted."""
    return await transition_status(
        session,
        user,
        application_id,
        ApplicationStatus.SUBMITTED,
        TransitionPayload(legal_acceptance=legal_acceptance),
        expected_version=expected_version,
    )


async def get_status_history(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> list[ApplicationStatusEvent]:
    """Return the status history, oldest first."""
    await require_application(session, user, application_id)
    stmt = (
        select(ApplicationStatusEvent)
        .where(ApplicationStatusEvent.application_id == application_id)
        .order_by(ApplicationStatusEvent.id)
    )
    result = await session.execute(stmt)
    return result.scalars().all()
