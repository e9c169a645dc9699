# This project was developed with assistance from AI tools.
"""Draft store: resumable, per-step persistence of the intake form.

An applicant has at most one open application per property. The first
write creates it (snapshotting the property from the catalog); every later
write shallow-merges its fields into the stored map. Field edits are only
accepted while the application is still a draft.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from rental_db import Application, ApplicationStatusEvent
from rental_db.enums import Actor, ApplicationStatus, PaymentStatus

from ..core.config import settings
from ..schemas.auth import UserContext
from .catalog import PropertyCatalog
from .errors import ConflictError, NotFoundError, ValidationError
from .intake import INTAKE_STEP_COUNT, clean_field_delta

logger = logging.getLogger(__name__)

_OPEN_STATUSES = sorted(ApplicationStatus.open_statuses())


async def _find_open(session: AsyncSession, applicant_id: str, property_id: str) -> Application | None:
    stmt = (
        select(Application)
        .options(selectinload(Application.requirements))
        .where(
            Application.applicant_id == applicant_id,
            Application.property_id == property_id,
            Application.status.in_(_OPEN_STATUSES),
        )
        .order_by(Application.updated_at.desc(), Application.id.desc())
        .limit(1)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalars().first()


async def _find_pinned(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    property_id: str | None,
) -> Application:
    stmt = (
        select(Application)
        .options(selectinload(Application.requirements))
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    app = result.scalars().first()
    if app is None or app.applicant_id != user.user_id or (
        property_id is not None and app.property_id != property_id
    ):
        logger.warning(
            "Draft %s not found or not owned by user %s (potential authorization issue)",
            application_id,
            user.user_id,
        )
        raise NotFoundError(f"Application {application_id} not found")
    return app


async def get_draft(
    session: AsyncSession,
    user: UserContext,
    property_id: str,
) -> Application | None:
    """Return the caller's open application for a property, if any."""
    return await _find_open(session, user.user_id, property_id)


def _merge(app: Application, step: int, delta: dict, revision: int | None, now: datetime) -> None:
    # JSON columns are not mutation-tracked; assign a new dict
    app.fields = {**(app.fields or {}), **delta}
    app.current_step = max(app.current_step or 1, step)
    app.last_saved_step = step
    if revision is not None:
        app.draft_revision = revision
    app.updated_at = now


async def _create_draft(
    session: AsyncSession,
    user: UserContext,
    property_id: str,
    step: int,
    delta: dict,
    revision: int | None,
    catalog: PropertyCatalog,
) -> Application:
    snapshot = await catalog.get_property(property_id)
    if snapshot is None:
        raise NotFoundError(f"Property {property_id} not found")

    now = datetime.now(UTC)
    app = Application(
        applicant_id=user.user_id,
        property_id=property_id,
        status=ApplicationStatus.DRAFT,
        current_step=step,
        last_saved_step=step,
        fields=delta,
        draft_revision=revision or 0,
        property_title=snapshot.title,
        property_address=snapshot.address,
        property_owner_id=snapshot.owner_id,
        application_fee=snapshot.application_fee,
        payment_status=PaymentStatus.PENDING,
        requirements=[],
        created_at=now,
        updated_at=now,
    )
    session.add(app)
    await session.flush()

    session.add(
        ApplicationStatusEvent(
            application_id=app.id,
            from_status=None,
            to_status=ApplicationStatus.DRAFT,
            actor_id=user.user_id,
            actor=Actor.APPLICANT.value,
            created_at=now,
        )
    )
    await session.commit()
    logger.info(
        "Draft application %s created for user %s, property %s",
        app.id,
        user.user_id,
        property_id,
    )
    return app


async def upsert_draft(
    session: AsyncSession,
    user: UserContext,
    property_id: str | None,
    step: int,
    fields: dict,
    *,
    application_id: int | None = None,
    revision: int | None = None,
    catalog: PropertyCatalog,
) -> Application:
    """Create or merge the caller's draft for a property.

    Args:
        property_id: Property the draft is for. May be None only when
            ``application_id`` pins an existing record.
        step: Intake step the fields were captured on (1..INTAKE_STEP_COUNT).
        fields: Field delta; keys overwrite stored keys, others are kept.
        application_id: Pin the write to this record (PATCH path). Never
            creates a new record.
        revision: Client save counter. A write at or below the stored
            revision is stale and leaves the record unchanged.
        catalog: Property catalog used to snapshot a new draft's property.

    Raises:
        ValidationError: ``step`` out of range, or no property to write to.
        NotFoundError: Pinned record missing or not the caller's, or the
            property does not exist.
        ConflictError: The application is past draft, or concurrent writes
            kept winning for every retry.
    """
    if not 1 <= step <= INTAKE_STEP_COUNT:
        raise ValidationError(
            f"Step must be between 1 and {INTAKE_STEP_COUNT}.", errors={"step": str(step)}
        )
    if application_id is None and not property_id:
        raise ValidationError("A property is required.", errors={"property_id": "Required"})

    delta = clean_field_delta(fields or {})
    attempts = max(1, settings.DRAFT_WRITE_RETRIES)

    for attempt in range(1, attempts + 1):
        if application_id is not None:
            app = await _find_pinned(session, user, application_id, property_id)
        else:
            app = await _find_open(session, user.user_id, property_id)
            if app is None:
                try:
                    return await _create_draft(session, user, property_id, step, delta, revision, catalog)
                except IntegrityError:
                    # Another request created the open record first; merge into it.
                    await session.rollback()
                    logger.info(
                        "Concurrent draft creation for user %s, property %s; merging",
                        user.user_id,
                        property_id,
                    )
                    continue

        if app.status != ApplicationStatus.DRAFT:
            logger.info(
                "Rejected autosave for application %s in status %s",
                app.id,
                app.status.value,
            )
            raise ConflictError(
                f"Application {app.id} is {app.status.value} and no longer accepts field changes.",
                errors={"status": app.status.value},
            )

        if revision is not None and revision <= app.draft_revision:
            logger.debug(
                "Ignoring stale autosave revision %s for application %s (stored %s)",
                revision,
                app.id,
                app.draft_revision,
            )
            return app

        _merge(app, step, delta, revision, datetime.now(UTC))
        try:
            await session.commit()
        except StaleDataError:
            await session.rollback()
            logger.warning(
                "Draft write for application %s lost a version race (attempt %d/%d)",
                app.id,
                attempt,
                attempts,
            )
            continue
        return app

    raise ConflictError("Draft is being modified concurrently. Try again.")
