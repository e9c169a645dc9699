# This project was developed with assistance from AI tools.
"""Tests for the pure transition guards and side effects."""

from datetime import UTC, datetime, timedelta

import pytest

from rental_db.enums import Actor, ApplicationStatus, RejectionCategory
from rental_api.schemas.application import RejectionDetails, TransitionPayload
from rental_api.schemas.requirement import RequirementIn
from rental_api.services.errors import InvalidTransitionError, ValidationError
from rental_api.services.lifecycle import (
    allowed_transitions,
    apply_transition,
    check_transition,
    validate_payload,
)

from tests.factories import COMPLETE_FIELDS, make_app, make_requirement

S = ApplicationStatus
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
WINDOW = timedelta(days=30)


def _conditional_payload(**overrides):
    data = {
        "reason": "Income verification pending",
        "due_date": NOW + timedelta(days=7),
        "requirements": [RequirementIn(description="Two recent pay stubs")],
    }
    data.update(overrides)
    return TransitionPayload(**data)


# ---------------------------------------------------------------------------
# check_transition
# ---------------------------------------------------------------------------


def test_edge_not_in_table_raises_and_leaves_status():
    app = make_app(status=S.DRAFT)
    with pytest.raises(InvalidTransitionError) as exc_info:
        check_transition(app, S.APPROVED, Actor.ADMIN)
    assert exc_info.value.errors == {"from": "draft", "to": "approved"}
    assert app.status == S.DRAFT


def test_terminal_status_message_says_none_allowed():
    app = make_app(status=S.REJECTED)
    with pytest.raises(InvalidTransitionError, match="none \\(terminal status\\)"):
        check_transition(app, S.UNDER_REVIEW, Actor.ADMIN)


def test_wrong_actor_raises():
    app = make_app(status=S.SUBMITTED)
    with pytest.raises(InvalidTransitionError, match="Actor 'applicant'"):
        check_transition(app, S.UNDER_REVIEW, Actor.APPLICANT)


def test_applicant_cannot_expire():
    app = make_app(status=S.SUBMITTED)
    with pytest.raises(InvalidTransitionError):
        check_transition(app, S.EXPIRED, Actor.APPLICANT)


def test_legal_edge_passes():
    check_transition(make_app(status=S.UNDER_REVIEW), S.INFO_REQUESTED, Actor.LANDLORD)


def test_allowed_transitions_for_actor():
    assert allowed_transitions(S.UNDER_REVIEW, Actor.LANDLORD) == [
        S.INFO_REQUESTED,
        S.CONDITIONAL_APPROVAL,
        S.REJECTED,
    ]
    assert allowed_transitions(S.UNDER_REVIEW, Actor.APPLICANT) == [S.WITHDRAWN]
    assert allowed_transitions(S.APPROVED, Actor.ADMIN) == []


# ---------------------------------------------------------------------------
# validate_payload
# ---------------------------------------------------------------------------


def test_submit_requires_legal_acceptance():
    app = make_app(fields=COMPLETE_FIELDS)
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(app, S.SUBMITTED, TransitionPayload(legal_acceptance=False), now=NOW)
    assert "legal_acceptance" in exc_info.value.errors


def test_submit_lists_missing_fields():
    app = make_app(fields={"firstName": "Alex"})
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(app, S.SUBMITTED, TransitionPayload(legal_acceptance=True), now=NOW)
    assert {"lastName", "email", "phone", "employerName", "monthlyIncome"} <= set(exc_info.value.errors)


def test_submit_with_complete_fields_passes():
    app = make_app(fields=COMPLETE_FIELDS)
    validate_payload(app, S.SUBMITTED, TransitionPayload(legal_acceptance=True), now=NOW)


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_info_request_requires_reason(reason):
    app = make_app(status=S.UNDER_REVIEW)
    with pytest.raises(ValidationError):
        validate_payload(app, S.INFO_REQUESTED, TransitionPayload(reason=reason), now=NOW)


def test_info_request_due_date_must_be_future():
    app = make_app(status=S.UNDER_REVIEW)
    payload = TransitionPayload(reason="Need a pay stub", due_date=NOW - timedelta(minutes=5))
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(app, S.INFO_REQUESTED, payload, now=NOW)
    assert exc_info.value.errors == {"due_date": "Must be in the future"}


def test_info_request_due_date_is_optional():
    app = make_app(status=S.UNDER_REVIEW)
    validate_payload(app, S.INFO_REQUESTED, TransitionPayload(reason="Need a pay stub"), now=NOW)


def test_info_request_naive_past_due_date_is_compared_as_utc():
    app = make_app(status=S.UNDER_REVIEW)
    naive = (NOW - timedelta(hours=1)).replace(tzinfo=None)
    payload = TransitionPayload(reason="Need a pay stub", due_date=naive)
    with pytest.raises(ValidationError):
        validate_payload(app, S.INFO_REQUESTED, payload, now=NOW)


def test_conditional_approval_requires_all_three():
    app = make_app(status=S.UNDER_REVIEW)
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(app, S.CONDITIONAL_APPROVAL, TransitionPayload(), now=NOW)
    assert set(exc_info.value.errors) == {"reason", "due_date", "requirements"}


def test_conditional_approval_due_date_must_be_future():
    app = make_app(status=S.UNDER_REVIEW)
    payload = _conditional_payload(due_date=NOW - timedelta(hours=1))
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(app, S.CONDITIONAL_APPROVAL, payload, now=NOW)
    assert exc_info.value.errors == {"due_date": "Must be in the future"}


def test_conditional_approval_naive_due_date_is_treated_as_utc():
    app = make_app(status=S.UNDER_REVIEW)
    payload = _conditional_payload(due_date=(NOW + timedelta(days=2)).replace(tzinfo=None))
    validate_payload(app, S.CONDITIONAL_APPROVAL, payload, now=NOW)


def test_approval_blocked_by_unsatisfied_required_requirement():
    app = make_app(status=S.CONDITIONAL_APPROVAL)
    reqs = [
        make_requirement(id=1, satisfied=True),
        make_requirement(id=2, description="Co-signer letter", satisfied=False),
        make_requirement(id=3, description="Optional reference", required=False, satisfied=False),
    ]
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(app, S.APPROVED, TransitionPayload(), now=NOW, requirements=reqs)
    assert exc_info.value.errors == {"2": "Co-signer letter"}


def test_approval_allowed_when_required_requirements_satisfied():
    app = make_app(status=S.CONDITIONAL_APPROVAL)
    reqs = [
        make_requirement(id=1, satisfied=True),
        make_requirement(id=3, required=False, satisfied=False),
    ]
    validate_payload(app, S.APPROVED, TransitionPayload(), now=NOW, requirements=reqs)


# ---------------------------------------------------------------------------
# apply_transition
# ---------------------------------------------------------------------------


def _apply(app, to, payload=None, actor=Actor.LANDLORD, actor_id="lee"):
    return apply_transition(
        app, to, payload or TransitionPayload(), actor=actor, actor_id=actor_id, now=NOW, expiry_window=WINDOW
    )


def test_submit_stamps_submitted_and_expiry():
    app = make_app(status=S.DRAFT)
    event = _apply(app, S.SUBMITTED, TransitionPayload(legal_acceptance=True), actor=Actor.APPLICANT, actor_id="alex")
    assert app.status == S.SUBMITTED
    assert app.submitted_at == NOW
    assert app.expires_at == NOW + WINDOW
    assert app.updated_at == NOW
    assert (event.from_status, event.to_status, event.actor) == (S.DRAFT, S.SUBMITTED, "applicant")
    assert event.application_id == app.id


def test_submit_stores_screening_score():
    app = make_app(status=S.DRAFT, fields=COMPLETE_FIELDS)
    _apply(app, S.SUBMITTED, TransitionPayload(legal_acceptance=True), actor=Actor.APPLICANT, actor_id="alex")
    assert app.score == 38
    assert app.scored_at == NOW
    assert app.score_breakdown == {
        "income": 25,
        "rental_history": 5,
        "employment": 8,
        "documents": 0,
        "total": 38,
        "max_score": 75,
        "flags": ["limited_rental_history", "missing_documents"],
    }


def test_info_request_due_date_stored_as_utc():
    app = make_app(status=S.UNDER_REVIEW)
    naive = (NOW + timedelta(days=3)).replace(tzinfo=None)
    _apply(app, S.INFO_REQUESTED, TransitionPayload(reason="Need a pay stub", due_date=naive))
    assert app.info_requested_due_date == NOW + timedelta(days=3)
    assert app.info_requested_due_date.tzinfo is UTC


def test_info_request_fields_set_then_cleared_on_exit():
    app = make_app(status=S.UNDER_REVIEW)
    _apply(app, S.INFO_REQUESTED, TransitionPayload(reason="Need a second pay stub"))
    assert app.info_requested_reason == "Need a second pay stub"
    assert app.info_requested_by == "lee"
    assert app.info_requested_at == NOW

    _apply(app, S.UNDER_REVIEW, actor=Actor.APPLICANT, actor_id="alex")
    assert app.status == S.UNDER_REVIEW
    assert app.info_requested_reason is None
    assert app.info_requested_at is None
    assert app.info_requested_by is None
    assert app.info_requested_due_date is None


def test_conditional_approval_creates_requirements_in_order():
    app = make_app(status=S.UNDER_REVIEW)
    payload = _conditional_payload(
        requirements=[
            RequirementIn(description="Pay stubs"),
            RequirementIn(type="verification", description="Employer call", required=False),
        ]
    )
    _apply(app, S.CONDITIONAL_APPROVAL, payload)
    assert [r.description for r in app.requirements] == ["Pay stubs", "Employer call"]
    assert [r.position for r in app.requirements] == [0, 1]
    assert all(r.satisfied is False for r in app.requirements)
    assert app.conditional_approval_reason == "Income verification pending"
    assert app.conditional_approval_due_date == NOW + timedelta(days=7)
    assert app.expires_at is None


def test_rejection_records_category_and_reviewer():
    app = make_app(status=S.UNDER_REVIEW)
    _apply(
        app,
        S.REJECTED,
        TransitionPayload(category=RejectionCategory.INCOME_INSUFFICIENT, reason="Income below 3x rent"),
        actor=Actor.ADMIN,
        actor_id="admin-user",
    )
    assert app.rejection_category == RejectionCategory.INCOME_INSUFFICIENT
    assert app.rejection_reason == "Income below 3x rent"
    assert app.reviewed_by == "admin-user"
    assert app.expires_at is None
    assert app.rejection_details == {
        "categories": ["income_insufficient"],
        "explanation": "Income below 3x rent",
        "appealable": True,
    }


def test_rejection_stores_explicit_details():
    app = make_app(status=S.CONDITIONAL_APPROVAL)
    details = RejectionDetails(
        categories=[RejectionCategory.MISSING_DOCUMENTS, RejectionCategory.VERIFICATION_FAILED],
        explanation="Pay stubs were not provided before the due date.",
        appealable=False,
    )
    _apply(app, S.REJECTED, TransitionPayload(reason="Conditions not met", rejection_details=details))
    assert app.rejection_category == RejectionCategory.MISSING_DOCUMENTS
    assert app.rejection_reason == "Conditions not met"
    assert app.rejection_details == {
        "categories": ["missing_documents", "verification_failed"],
        "explanation": "Pay stubs were not provided before the due date.",
        "appealable": False,
    }


def test_expiry_stamps_expired_at():
    app = make_app(status=S.INFO_REQUESTED)
    app.info_requested_reason = "stale"
    _apply(app, S.EXPIRED, actor=Actor.SYSTEM, actor_id="system")
    assert app.expired_at == NOW
    assert app.info_requested_reason is None
