# This project was developed with assistance from AI tools.
"""Pure guards and side effects for application status transitions.

Nothing here touches the database session. ``services.application``
loads the record, calls these functions in order (``check_transition``,
``validate_payload``, ``apply_transition``) and persists the result under
optimistic concurrency.
"""

import logging
from datetime import UTC, datetime, timedelta

from rental_db import Application, ApplicationStatusEvent, ConditionalRequirement
from rental_db.enums import Actor, ApplicationStatus

from ..schemas.application import RejectionDetails, TransitionPayload
from .errors import InvalidTransitionError, ValidationError
from .intake import validate_submission
from .scoring import score_application

logger = logging.getLogger(__name__)

_TRANSITIONS = ApplicationStatus.transition_table()
_EXPIRABLE = ApplicationStatus.expirable_statuses()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _check_due_date(due_date: datetime | None, now: datetime, errors: dict, *, required: bool) -> None:
    if due_date is None:
        if required:
            errors["due_date"] = "Required"
    elif _as_utc(due_date) <= now:
        errors["due_date"] = "Must be in the future"


def allowed_transitions(current: ApplicationStatus, actor: Actor) -> list[ApplicationStatus]:
    """Targets ``actor`` may move an application in ``current`` to."""
    return sorted(
        (to for (source, to), actors in _TRANSITIONS.items() if source == current and actor in actors),
        key=lambda s: list(ApplicationStatus).index(s),
    )


def check_transition(app: Application, to: ApplicationStatus, actor: Actor) -> None:
    """Raise InvalidTransitionError unless (status, to) is an edge ``actor`` may take."""
    current = app.status
    actors = _TRANSITIONS.get((current, to))
    if actors is None:
        reachable = ApplicationStatus.valid_transitions().get(current, frozenset())
        allowed = sorted(s.value for s in reachable)
        raise InvalidTransitionError(
            current,
            to,
            f"Cannot transition from '{current.value}' to '{to.value}'. "
            f"Allowed: {allowed if allowed else 'none (terminal status)'}.",
        )
    if actor not in actors:
        logger.warning(
            "RBAC denial: actor %s may not move application %s from %s to %s",
            actor.value,
            app.id,
            current.value,
            to.value,
        )
        raise InvalidTransitionError(
            current,
            to,
            f"Actor '{actor.value}' may not transition from '{current.value}' to '{to.value}'.",
        )


def validate_payload(
    app: Application,
    to: ApplicationStatus,
    payload: TransitionPayload,
    *,
    now: datetime,
    requirements: list[ConditionalRequirement] | None = None,
) -> None:
    """Raise ValidationError if the payload does not satisfy the target's guard.

    Args:
        requirements: Freshly read requirement rows, needed when ``to`` is
            APPROVED from CONDITIONAL_APPROVAL.
    """
    errors: dict[str, str] = {}

    if to == ApplicationStatus.SUBMITTED:
        if not payload.legal_acceptance:
            errors["legal_acceptance"] = "Terms must be accepted before submission"
        errors.update(validate_submission(app.fields or {}))
        if errors:
            raise ValidationError(
                "Application is incomplete and cannot be submitted.", errors=errors
            )

    elif to == ApplicationStatus.INFO_REQUESTED:
        if not (payload.reason and payload.reason.strip()):
            errors["reason"] = "Required"
        _check_due_date(payload.due_date, now, errors, required=False)
        if errors:
            raise ValidationError(
                "Requesting more information needs a reason and, if given, a future due date.",
                errors=errors,
            )

    elif to == ApplicationStatus.CONDITIONAL_APPROVAL:
        if not (payload.reason and payload.reason.strip()):
            errors["reason"] = "Required"
        _check_due_date(payload.due_date, now, errors, required=True)
        if not payload.requirements:
            errors["requirements"] = "At least one requirement is required"
        if errors:
            raise ValidationError(
                "Conditional approval needs a reason, a future due date and requirements.",
                errors=errors,
            )

    elif to == ApplicationStatus.APPROVED and app.status == ApplicationStatus.CONDITIONAL_APPROVAL:
        outstanding = [r for r in (requirements or []) if r.required and not r.satisfied]
        if outstanding:
            raise ValidationError(
                f"{len(outstanding)} required condition(s) are not yet satisfied.",
                errors={str(r.id): r.description for r in outstanding},
            )


def apply_transition(
    app: Application,
    to: ApplicationStatus,
    payload: TransitionPayload,
    *,
    actor: Actor,
    actor_id: str,
    now: datetime,
    expiry_window: timedelta,
) -> ApplicationStatusEvent:
    """Move ``app`` to ``to``, write the status-specific fields, and return the history row.

    The caller must have run ``check_transition`` and ``validate_payload``.
    The returned event is not yet added to a session.
    """
    current = app.status

    if current == ApplicationStatus.INFO_REQUESTED:
        app.info_requested_reason = None
        app.info_requested_at = None
        app.info_requested_by = None
        app.info_requested_due_date = None

    if to == ApplicationStatus.SUBMITTED:
        app.submitted_at = now
        breakdown = score_application(app.fields or {})
        app.score = breakdown.total
        app.score_breakdown = breakdown.to_dict()
        app.scored_at = now
    elif to == ApplicationStatus.INFO_REQUESTED:
        app.info_requested_reason = payload.reason.strip()
        app.info_requested_at = now
        app.info_requested_by = actor_id
        app.info_requested_due_date = _as_utc(payload.due_date) if payload.due_date else None
    elif to == ApplicationStatus.CONDITIONAL_APPROVAL:
        app.conditional_approval_reason = payload.reason.strip()
        app.conditional_approval_due_date = _as_utc(payload.due_date)
        app.conditional_approval_at = now
        app.conditional_approval_by = actor_id
        for position, item in enumerate(payload.requirements):
            app.requirements.append(
                ConditionalRequirement(
                    position=position,
                    type=item.type,
                    description=item.description,
                    required=item.required,
                    satisfied=False,
                    created_at=now,
                )
            )
    elif to == ApplicationStatus.APPROVED:
        app.reviewed_by = actor_id
        app.reviewed_at = now
    elif to == ApplicationStatus.REJECTED:
        app.reviewed_by = actor_id
        app.reviewed_at = now
        details = payload.rejection_details or RejectionDetails(
            categories=[payload.category] if payload.category else [],
            explanation=payload.reason,
        )
        app.rejection_category = payload.category or next(iter(details.categories), None)
        app.rejection_reason = payload.reason
        app.rejection_details = details.model_dump(mode="json")
    elif to == ApplicationStatus.WITHDRAWN:
        app.withdrawn_reason = payload.reason
    elif to == ApplicationStatus.EXPIRED:
        app.expired_at = now

    app.expires_at = now + expiry_window if to in _EXPIRABLE else None
    app.status = to
    app.updated_at = now

    return ApplicationStatusEvent(
        application_id=app.id,
        from_status=current,
        to_status=to,
        actor_id=actor_id,
        actor=actor.value,
        reason=payload.reason,
        created_at=now,
    )
