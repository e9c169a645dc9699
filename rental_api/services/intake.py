# This project was developed with assistance from AI tools.
"""Intake form definition and submission validation.

Pure functions: the step layout of the applicant's form and the checks a
merged field map must pass before it can be submitted.
"""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class IntakeStep:
    number: int
    label: str
    fields: tuple[str, ...]
    required: tuple[str, ...] = ()
    # Shown in full only to the applicant and admins
    sensitive: tuple[str, ...] = ()


INTAKE_STEPS: tuple[IntakeStep, ...] = (
    IntakeStep(
        1,
        "Personal Info",
        ("firstName", "lastName", "email", "phone", "dateOfBirth", "currentAddress", "ssn"),
        required=("firstName", "lastName", "email", "phone"),
        sensitive=("dateOfBirth", "ssn"),
    ),
    IntakeStep(
        2,
        "Employment",
        ("employerName", "jobTitle", "monthlyIncome", "employmentDuration"),
        required=("employerName", "monthlyIncome"),
    ),
    IntakeStep(
        3,
        "Emergency Contact",
        ("emergencyContactName", "emergencyContactPhone", "emergencyContactRelationship"),
    ),
    IntakeStep(
        4,
        "Rental History",
        (
            "currentLandlordName",
            "currentLandlordPhone",
            "currentRentAmount",
            "rentalDuration",
            "hasEviction",
            "reasonForMoving",
        ),
    ),
    IntakeStep(
        5,
        "Pets & Vehicles",
        ("hasPets", "petDetails", "hasVehicles", "vehicleDetails"),
    ),
    IntakeStep(
        6,
        "Review & Submit",
        ("rulesAcknowledged", "agreeToBackgroundCheck", "agreeToTerms", "signature"),
    ),
)

INTAKE_STEP_COUNT = len(INTAKE_STEPS)

SENSITIVE_FIELD_KEYS = frozenset(name for step in INTAKE_STEPS for name in step.sensitive)

# Keys the lifecycle owns; an autosave payload can never set them.
RESERVED_FIELD_KEYS = frozenset(
    {"id", "status", "step", "currentStep", "paymentStatus", "paymentAttempts", "conditionalRequirements"}
)


def _validate_email(value) -> str | None:
    if not re.fullmatch(r"[^@\s]+@[^@\s]+\.[^@\s]+", str(value).strip()):
        return "Invalid email format"
    return None


def _validate_phone(value) -> str | None:
    digits = re.sub(r"\D", "", str(value))
    if len(digits) < 10:
        return "Phone number must have at least 10 digits"
    return None


def parse_money(value) -> float | None:
    """Parse a form amount such as ``$6,200``; None when it is not a number."""
    try:
        amount = float(re.sub(r"[$,\s]", "", str(value)))
    except ValueError:
        return None
    return amount if math.isfinite(amount) else None


def _validate_income(value) -> str | None:
    amount = parse_money(value)
    if amount is None:
        return "Could not parse income amount"
    if amount < 0:
        return "Income cannot be negative"
    return None


_FIELD_VALIDATORS: dict[str, Callable[[object], str | None]] = {
    "email": _validate_email,
    "phone": _validate_phone,
    "monthlyIncome": _validate_income,
}


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_submission(fields: dict) -> dict[str, str]:
    """Return field -> error message for everything blocking submission.

    An empty dict means the field map can be submitted.
    """
    errors: dict[str, str] = {}
    for step in INTAKE_STEPS:
        for name in step.required:
            value = fields.get(name)
            if _is_blank(value):
                errors[name] = "Required field missing"
                continue
            validator = _FIELD_VALIDATORS.get(name)
            if validator is not None:
                message = validator(value)
                if message:
                    errors[name] = message
    return errors


def clean_field_delta(fields: dict) -> dict:
    """Drop lifecycle-owned keys from an autosave payload."""
    return {k: v for k, v in fields.items() if k not in RESERVED_FIELD_KEYS}
