# This project was developed with assistance from AI tools.
"""Tests for intake step definitions and submission validation."""

from rental_api.services.intake import (
    INTAKE_STEP_COUNT,
    INTAKE_STEPS,
    clean_field_delta,
    validate_submission,
)

from tests.factories import COMPLETE_FIELDS


def test_six_steps_numbered_in_order():
    assert INTAKE_STEP_COUNT == 6
    assert [s.number for s in INTAKE_STEPS] == [1, 2, 3, 4, 5, 6]
    assert INTAKE_STEPS[-1].label == "Review & Submit"


def test_required_fields_belong_to_their_step():
    for step in INTAKE_STEPS:
        assert set(step.required) <= set(step.fields)


def test_complete_fields_pass():
    assert validate_submission(COMPLETE_FIELDS) == {}


def test_missing_and_blank_fields_are_reported():
    fields = {**COMPLETE_FIELDS, "employerName": "   "}
    del fields["phone"]
    errors = validate_submission(fields)
    assert set(errors) == {"employerName", "phone"}
    assert errors["phone"] == "Required field missing"


def test_present_but_malformed_fields_are_reported():
    errors = validate_submission(
        {**COMPLETE_FIELDS, "email": "not-an-email", "phone": "555-12", "monthlyIncome": "lots"}
    )
    assert errors == {
        "email": "Invalid email format",
        "phone": "Phone number must have at least 10 digits",
        "monthlyIncome": "Could not parse income amount",
    }


def test_empty_map_lists_every_required_field():
    errors = validate_submission({})
    assert set(errors) == {"firstName", "lastName", "email", "phone", "employerName", "monthlyIncome"}


def test_clean_field_delta_drops_lifecycle_keys():
    delta = clean_field_delta({"firstName": "Alex", "status": "approved", "id": 7, "paymentStatus": "paid"})
    assert delta == {"firstName": "Alex"}
