# This project was developed with assistance from AI tools.
"""Screening score for a submitted application.

A pure function of the intake field map, computed once at submission and
stored on the application for staff review. The score informs the landlord;
it never moves the application between statuses.

Components (points):

* income (25): applicant plus co-applicant monthly income
* rental history (20): years renting, minus 15 for a prior eviction
* employment (15): whether employed and for how long
* documents (15): required screening documents uploaded or verified

Flags name the weak spots a reviewer should look at.
"""

import re
from dataclasses import dataclass

from .intake import parse_money

INCOME_MAX = 25
RENTAL_HISTORY_MAX = 20
EMPLOYMENT_MAX = 15
DOCUMENTS_MAX = 15
MAX_SCORE = INCOME_MAX + RENTAL_HISTORY_MAX + EMPLOYMENT_MAX + DOCUMENTS_MAX

REQUIRED_DOCUMENTS = ("id", "proof_of_income", "employment_verification")

# (minimum monthly income, points), highest first
_INCOME_BANDS = ((5000, 25), (4000, 22), (3000, 18), (2000, 12))
_EVICTION_PENALTY = 15

_DURATION = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]*)", re.IGNORECASE)


@dataclass(frozen=True)
class ScoreBreakdown:
    income: int
    rental_history: int
    employment: int
    documents: int
    flags: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return self.income + self.rental_history + self.employment + self.documents

    def to_dict(self) -> dict:
        return {
            "income": self.income,
            "rental_history": self.rental_history,
            "employment": self.employment,
            "documents": self.documents,
            "total": self.total,
            "max_score": MAX_SCORE,
            "flags": list(self.flags),
        }


def _years(value) -> float:
    """Read a free-text duration ("3 years", "18 months", "2") as years."""
    if value is None:
        return 0.0
    match = _DURATION.search(str(value))
    if match is None:
        return 0.0
    amount = float(match.group(1))
    if match.group(2).lower().startswith("mo"):
        return amount / 12
    return amount


def _truthy(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "y", "1"}
    return bool(value)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _monthly_income(fields: dict) -> float:
    total = parse_money(fields.get("monthlyIncome")) or 0.0
    for co_applicant in fields.get("coApplicants") or []:
        if isinstance(co_applicant, dict):
            income = co_applicant.get("monthlyIncome", co_applicant.get("income"))
            total += parse_money(income) or 0.0
    return max(total, 0.0)


def _income_points(fields: dict, flags: list[str]) -> int:
    income = _monthly_income(fields)
    for minimum, points in _INCOME_BANDS:
        if income >= minimum:
            return points
    if income > 0:
        flags.append("low_income")
        return 5
    flags.append("no_income_provided")
    return 0


def _rental_history_points(fields: dict, flags: list[str]) -> int:
    years = _years(fields.get("rentalDuration"))
    if years >= 3:
        points = 20
    elif years >= 2:
        points = 16
    elif years >= 1:
        points = 12
    elif years > 0:
        points = 8
    else:
        points = 5
        flags.append("limited_rental_history")

    if _truthy(fields.get("hasEviction")):
        points = max(0, points - _EVICTION_PENALTY)
        flags.append("previous_eviction")
    return points


def _employment_points(fields: dict, flags: list[str]) -> int:
    unemployed = (
        _blank(fields.get("employerName"))
        or str(fields.get("employmentStatus", "")).lower() == "unemployed"
    )
    if unemployed:
        flags.append("unemployed")
        return 3
    years = _years(fields.get("employmentDuration"))
    if years >= 2:
        return 15
    if years >= 1:
        return 12
    return 8


def _documents_points(fields: dict, flags: list[str]) -> int:
    status = fields.get("documentStatus") or {}
    entries = [status.get(doc) or {} for doc in REQUIRED_DOCUMENTS] if isinstance(status, dict) else []
    uploaded = sum(1 for e in entries if isinstance(e, dict) and _truthy(e.get("uploaded")))
    verified = sum(1 for e in entries if isinstance(e, dict) and _truthy(e.get("verified")))

    if verified >= len(REQUIRED_DOCUMENTS):
        return 15
    if uploaded >= len(REQUIRED_DOCUMENTS):
        return 12
    if uploaded == 2:
        return 8
    if uploaded == 1:
        return 5
    flags.append("missing_documents")
    return 0


def score_application(fields: dict) -> ScoreBreakdown:
    """Score an intake field map."""
    flags: list[str] = []
    income = _income_points(fields, flags)
    rental_history = _rental_history_points(fields, flags)
    employment = _employment_points(fields, flags)
    documents = _documents_points(fields, flags)

    # No bureau pull; the reviewer sees whether a check was authorized
    if _blank(fields.get("ssn")) or fields.get("agreeToBackgroundCheck") is False:
        flags.append("no_credit_check_authorization")

    return ScoreBreakdown(
        income=income,
        rental_history=rental_history,
        employment=employment,
        documents=documents,
        flags=tuple(flags),
    )
