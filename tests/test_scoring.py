# This project was developed with assistance from AI tools.
"""Tests for the screening score computed at submission."""

import pytest

from rental_api.services.scoring import MAX_SCORE, score_application

from tests.factories import COMPLETE_FIELDS

_ALL_DOCUMENTS_VERIFIED = {
    "id": {"uploaded": True, "verified": True},
    "proof_of_income": {"uploaded": True, "verified": True},
    "employment_verification": {"uploaded": True, "verified": True},
}


def test_strong_application_scores_the_maximum():
    fields = {
        **COMPLETE_FIELDS,
        "rentalDuration": "4 years",
        "employmentDuration": "3 years",
        "documentStatus": _ALL_DOCUMENTS_VERIFIED,
        "agreeToBackgroundCheck": True,
    }
    breakdown = score_application(fields)
    assert breakdown.total == MAX_SCORE == 75
    assert breakdown.flags == ()


def test_empty_field_map_is_flagged_everywhere():
    breakdown = score_application({})
    assert breakdown.to_dict() == {
        "income": 0,
        "rental_history": 5,
        "employment": 3,
        "documents": 0,
        "total": 8,
        "max_score": MAX_SCORE,
        "flags": [
            "no_income_provided",
            "limited_rental_history",
            "unemployed",
            "missing_documents",
            "no_credit_check_authorization",
        ],
    }


@pytest.mark.parametrize(
    "income,points",
    [("$5,000", 25), ("4500", 22), ("3,000", 18), ("2000", 12), ("1200", 5), ("lots", 0)],
)
def test_income_bands(income, points):
    assert score_application({"monthlyIncome": income}).income == points


def test_co_applicant_income_is_added():
    fields = {"monthlyIncome": "2500", "coApplicants": [{"monthlyIncome": "1000"}, {"income": "1600"}]}
    assert score_application(fields).income == 25


def test_low_income_is_flagged():
    assert "low_income" in score_application({"monthlyIncome": "900"}).flags


@pytest.mark.parametrize(
    "duration,points",
    [("3 years", 20), ("2 yrs", 16), ("18 months", 12), ("6 months", 8), ("", 5)],
)
def test_rental_history_bands(duration, points):
    assert score_application({"rentalDuration": duration}).rental_history == points


@pytest.mark.parametrize("eviction", [True, "yes", "true"])
def test_eviction_costs_fifteen_points(eviction):
    breakdown = score_application({"rentalDuration": "3 years", "hasEviction": eviction})
    assert breakdown.rental_history == 5
    assert "previous_eviction" in breakdown.flags


def test_eviction_penalty_does_not_go_negative():
    assert score_application({"hasEviction": True}).rental_history == 0


def test_no_eviction_answer_is_not_penalised():
    assert score_application({"rentalDuration": "3 years", "hasEviction": "no"}).rental_history == 20


@pytest.mark.parametrize(
    "fields,points",
    [
        ({"employerName": "Harbor", "employmentDuration": "2 years"}, 15),
        ({"employerName": "Harbor", "employmentDuration": "14 months"}, 12),
        ({"employerName": "Harbor"}, 8),
        ({"employerName": "Harbor", "employmentStatus": "unemployed"}, 3),
        ({"employerName": "  "}, 3),
    ],
)
def test_employment_points(fields, points):
    assert score_application(fields).employment == points


def test_documents_uploaded_but_unverified():
    status = {doc: {"uploaded": True} for doc in ("id", "proof_of_income", "employment_verification")}
    assert score_application({"documentStatus": status}).documents == 12
    status.pop("id")
    assert score_application({"documentStatus": status}).documents == 8


def test_declined_background_check_is_flagged():
    breakdown = score_application({**COMPLETE_FIELDS, "agreeToBackgroundCheck": False})
    assert "no_credit_check_authorization" in breakdown.flags


def test_malformed_document_status_is_ignored():
    breakdown = score_application({"documentStatus": ["id"]})
    assert breakdown.documents == 0
    assert "missing_documents" in breakdown.flags
