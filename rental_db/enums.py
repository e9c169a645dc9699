# This project was developed with assistance from AI tools.
"""
Domain enums for the rental application lifecycle.

Shared domain types used by both SQLAlchemy models (rental_db package)
and Pydantic schemas (rental_api package).
"""

import enum


class ApplicationStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    INFO_REQUESTED = "info_requested"
    CONDITIONAL_APPROVAL = "conditional_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    EXPIRED = "expired"

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses where an application is closed for good."""
        return frozenset({cls.APPROVED, cls.REJECTED, cls.WITHDRAWN, cls.EXPIRED})

    @classmethod
    def open_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses that still count as the applicant's one open record per property."""
        return frozenset(s for s in cls if s not in cls.terminal_statuses())

    @classmethod
    def expirable_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses the expiry sweep may move to EXPIRED."""
        return frozenset({cls.SUBMITTED, cls.UNDER_REVIEW, cls.INFO_REQUESTED})

    @classmethod
    def transition_table(cls) -> dict[tuple["ApplicationStatus", "ApplicationStatus"], frozenset["Actor"]]:
        """Every legal (from, to) edge and the actors allowed to take it."""
        staff = frozenset({Actor.LANDLORD, Actor.ADMIN})
        applicant = frozenset({Actor.APPLICANT})
        system = frozenset({Actor.SYSTEM})
        return {
            (cls.DRAFT, cls.SUBMITTED): applicant,
            (cls.SUBMITTED, cls.UNDER_REVIEW): staff,
            (cls.UNDER_REVIEW, cls.INFO_REQUESTED): staff,
            (cls.INFO_REQUESTED, cls.UNDER_REVIEW): frozenset({Actor.APPLICANT, Actor.LANDLORD}),
            (cls.UNDER_REVIEW, cls.CONDITIONAL_APPROVAL): staff,
            (cls.CONDITIONAL_APPROVAL, cls.APPROVED): staff,
            (cls.UNDER_REVIEW, cls.REJECTED): staff,
            (cls.CONDITIONAL_APPROVAL, cls.REJECTED): staff,
            (cls.SUBMITTED, cls.REJECTED): staff,
            (cls.DRAFT, cls.WITHDRAWN): applicant,
            (cls.SUBMITTED, cls.WITHDRAWN): applicant,
            (cls.UNDER_REVIEW, cls.WITHDRAWN): applicant,
            (cls.SUBMITTED, cls.EXPIRED): system,
            (cls.UNDER_REVIEW, cls.EXPIRED): system,
            (cls.INFO_REQUESTED, cls.EXPIRED): system,
        }

    @classmethod
    def valid_transitions(cls) -> dict["ApplicationStatus", frozenset["ApplicationStatus"]]:
        """Targets reachable from each status, regardless of actor."""
        targets: dict[ApplicationStatus, set[ApplicationStatus]] = {s: set() for s in cls}
        for source, target in cls.transition_table():
            targets[source].add(target)
        return {s: frozenset(t) for s, t in targets.items()}

    @classmethod
    def normalize(cls, value: str) -> "ApplicationStatus":
        """Map a stored or client-supplied status string onto the closed set.

        Older records and clients used several names for the pre-review
        bucket; they all collapse to SUBMITTED. Raises ValueError for
        anything else that is not a member.
        """
        lowered = value.strip().lower()
        return cls(_LEGACY_STATUS_ALIASES.get(lowered, lowered))


_LEGACY_STATUS_ALIASES = {
    "pending": "submitted",
    "pending_payment": "submitted",
    "payment_verified": "submitted",
}


class Actor(str, enum.Enum):
    """Who is acting on an application, resolved server-side from identity + ownership."""

    APPLICANT = "applicant"
    LANDLORD = "landlord"
    ADMIN = "admin"
    SYSTEM = "system"


class UserRole(str, enum.Enum):
    RENTER = "renter"
    LANDLORD = "landlord"
    PROPERTY_MANAGER = "property_manager"
    ADMIN = "admin"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentAttemptStatus(str, enum.Enum):
    PENDING = "pending"
    FAILED = "failed"
    SUCCESS = "success"

    def payment_status(self) -> PaymentStatus:
        """The cached application payment status this attempt outcome implies."""
        if self is PaymentAttemptStatus.SUCCESS:
            return PaymentStatus.PAID
        if self is PaymentAttemptStatus.FAILED:
            return PaymentStatus.FAILED
        return PaymentStatus.PENDING


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    ACH = "ach"
    CASH = "cash"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"
    WIRE_TRANSFER = "wire_transfer"
    MONEY_ORDER = "money_order"
    OTHER = "other"

    @classmethod
    def online_methods(cls) -> frozenset["PaymentMethod"]:
        """Methods an applicant pays with directly."""
        return frozenset({cls.CARD, cls.ACH})


class RequirementType(str, enum.Enum):
    DOCUMENT = "document"
    INFORMATION = "information"
    VERIFICATION = "verification"


class RejectionCategory(str, enum.Enum):
    INCOME_INSUFFICIENT = "income_insufficient"
    CREDIT_ISSUES = "credit_issues"
    BACKGROUND_CHECK_FAILED = "background_check_failed"
    RENTAL_HISTORY_ISSUES = "rental_history_issues"
    INCOMPLETE_APPLICATION = "incomplete_application"
    MISSING_DOCUMENTS = "missing_documents"
    VERIFICATION_FAILED = "verification_failed"
    OTHER = "other"
