# This project was developed with assistance from AI tools.
"""Expiry sweep for applications nobody acted on.

Entering submitted, under_review or info_requested stamps ``expires_at``
(see ``lifecycle.apply_transition``). The sweep moves every application
still in one of those statuses past its deadline to ``expired`` as the
system actor, through the same guarded transition as any other change.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rental_db import Application
from rental_db.enums import ApplicationStatus

from ..core.auth import SYSTEM_USER
from ..schemas.application import TransitionPayload
from .application import transition_status
from .errors import ApplicationError

logger = logging.getLogger(__name__)

_EXPIRABLE = sorted(ApplicationStatus.expirable_statuses())


async def find_stale_application_ids(session: AsyncSession, now: datetime) -> list[int]:
    """Ids of applications whose expiry deadline has passed."""
    stmt = (
        select(Application.id)
        .where(
            Application.status.in_(_EXPIRABLE),
            Application.expires_at.is_not(None),
            Application.expires_at < now,
        )
        .order_by(Application.expires_at)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def expire_stale_applications(
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> list[int]:
    """Expire every stale application and return the ids that moved.

    A record that changed underneath the sweep (conflict, or no longer
    expirable) is logged and skipped; the next sweep sees its new state.
    """
    now = now or datetime.now(UTC)
    expired: list[int] = []
    for application_id in await find_stale_application_ids(session, now):
        try:
            await transition_status(
                session,
                SYSTEM_USER,
                application_id,
                ApplicationStatus.EXPIRED,
                TransitionPayload(reason="Expired without activity"),
            )
        except ApplicationError as exc:
            logger.warning("Skipping expiry of application %s: %s", application_id, exc.detail)
            continue
        expired.append(application_id)

    if expired:
        logger.info("Expiry sweep moved %d application(s) to expired", len(expired))
    return expired
