# This project was developed with assistance from AI tools.
"""Application fee payment ledger.

Every attempt is appended as a ``PaymentAttempt`` row and never updated.
``Application.payment_status`` caches the outcome of the latest attempt, so
it reads ``paid`` exactly when the ledger ends in a success. Once paid, the
ledger is closed.
"""

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rental_db import PaymentAttempt
from rental_db.enums import (
    Actor,
    ApplicationStatus,
    PaymentAttemptStatus,
    PaymentMethod,
    PaymentStatus,
)

from ..schemas.auth import UserContext
from .application import actor_for, commit_versioned, require_application
from .errors import AlreadyPaidError, ConflictError, ValidationError

logger = logging.getLogger(__name__)

_TERMINAL_STATUSES = ApplicationStatus.terminal_statuses()
_ONLINE_METHODS = PaymentMethod.online_methods()


def _new_reference(method: PaymentMethod) -> str:
    prefix = "PAY" if method in _ONLINE_METHODS else "MV"
    return f"{prefix}-{uuid.uuid4().hex[:12].upper()}"


# Ledger column is NUMERIC(10, 2)
AMOUNT_PLACES = 2
AMOUNT_MAX = Decimal(10) ** (10 - AMOUNT_PLACES)
REFERENCE_MAX_LENGTH = 100


def _parse_amount(value) -> Decimal:
    """Return a positive amount in cents precision that fits the ledger column."""
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError("Amount is not a number.", errors={"amount": "Invalid"}) from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be greater than zero.", errors={"amount": "Must be > 0"})
    if amount.normalize().as_tuple().exponent < -AMOUNT_PLACES:
        raise ValidationError(
            "Amount cannot have fractions of a cent.",
            errors={"amount": f"At most {AMOUNT_PLACES} decimal places"},
        )
    if amount >= AMOUNT_MAX:
        raise ValidationError(
            f"Amount must be below {AMOUNT_MAX}.", errors={"amount": "Too large"}
        )
    return amount.quantize(Decimal(1).scaleb(-AMOUNT_PLACES))


def _check_method(actor: Actor, method: PaymentMethod) -> None:
    """Applicants pay online; staff record manual verifications."""
    if actor == Actor.APPLICANT and method not in _ONLINE_METHODS:
        raise ValidationError(
            f"Applicants cannot record '{method.value}' payments.",
            errors={"method": "Use card or ach"},
        )
    if actor in (Actor.LANDLORD, Actor.ADMIN) and method in _ONLINE_METHODS:
        raise ValidationError(
            f"Staff record manual verifications only, not '{method.value}'.",
            errors={"method": "Use a manual payment method"},
        )


async def record_payment_attempt(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    amount: Decimal | str | int,
    method: PaymentMethod,
    *,
    outcome: PaymentAttemptStatus,
    reference_id: str | None = None,
    error_message: str | None = None,
) -> PaymentAttempt:
    """Append one payment attempt and update the cached payment status.

    Raises:
        NotFoundError: Application missing or out of scope.
        AlreadyPaidError: The fee is already paid; nothing is appended.
        ConflictError: The application is closed, or ``reference_id`` was
            already used, or a concurrent write won.
        ValidationError: An amount that is not positive, has fractions of a
            cent or does not fit the ledger column; an over-long reference;
            a failure without an error message; or a method the caller
            may not use.
    """
    app = await require_application(session, user, application_id)
    actor = actor_for(user, app)

    if app.payment_status == PaymentStatus.PAID:
        raise AlreadyPaidError(f"Application {application_id} fee is already paid.")
    if app.status in _TERMINAL_STATUSES:
        raise ConflictError(
            f"Application {application_id} is {app.status.value}; payments are closed.",
            errors={"status": app.status.value},
        )

    amount = _parse_amount(amount)
    if reference_id is not None and not 0 < len(reference_id) <= REFERENCE_MAX_LENGTH:
        raise ValidationError(
            f"Payment reference must be 1-{REFERENCE_MAX_LENGTH} characters.",
            errors={"reference_id": "Invalid length"},
        )
    if outcome == PaymentAttemptStatus.FAILED and not (error_message and error_message.strip()):
        raise ValidationError(
            "A failed attempt needs an error message.", errors={"error_message": "Required"}
        )
    _check_method(actor, method)

    reference_id = reference_id or _new_reference(method)
    existing = await session.execute(
        select(PaymentAttempt.id).where(PaymentAttempt.reference_id == reference_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(
            f"Payment reference '{reference_id}' was already recorded.",
            errors={"reference_id": reference_id},
        )

    now = datetime.now(UTC)
    attempt = PaymentAttempt(
        application_id=app.id,
        reference_id=reference_id,
        amount=amount,
        method=method,
        status=outcome,
        error_message=error_message if outcome == PaymentAttemptStatus.FAILED else None,
        recorded_by=user.user_id,
        created_at=now,
    )
    session.add(attempt)
    app.payment_status = outcome.payment_status()
    if outcome == PaymentAttemptStatus.SUCCESS:
        app.payment_paid_at = now
    app.updated_at = now

    try:
        await commit_versioned(session, application_id)
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(
            f"Payment reference '{reference_id}' was already recorded.",
            errors={"reference_id": reference_id},
        ) from exc

    logger.info(
        "Payment attempt %s on application %s: %s %s via %s by %s",
        reference_id,
        application_id,
        outcome.value,
        amount,
        method.value,
        user.user_id,
    )
    return attempt


async def list_payment_attempts(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> tuple[list[PaymentAttempt], PaymentStatus]:
    """Return the ledger oldest first, with the cached payment status."""
    app = await require_application(session, user, application_id)
    result = await session.execute(
        select(PaymentAttempt)
        .where(PaymentAttempt.application_id == application_id)
        .order_by(PaymentAttempt.id)
    )
    return result.scalars().all(), app.payment_status
