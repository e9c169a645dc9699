# This project was developed with assistance from AI tools.
"""Functional tests: application fee payments and conditional requirements."""

import pytest

from rental_db.enums import ApplicationStatus, PaymentStatus

from tests.factories import make_app, make_attempt, make_requirement

from .mock_db import make_mock_session
from .personas import landlord_lee, renter_alex

pytestmark = pytest.mark.functional

S = ApplicationStatus


class TestPayments:
    def test_applicant_pays_by_card(self, make_client):
        app = make_app(status=S.SUBMITTED)
        client = make_client(renter_alex(), make_mock_session(app, None))

        resp = client.post(
            "/api/applications/100/payments",
            json={"amount": "45.00", "method": "card", "outcome": "success"},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["payment_status"] == "paid"
        assert body["data"]["reference_id"].startswith("PAY-")
        assert app.payment_status == PaymentStatus.PAID

    def test_second_payment_after_paid_is_409(self, make_client):
        app = make_app(status=S.SUBMITTED, payment_status=PaymentStatus.PAID)
        client = make_client(renter_alex(), make_mock_session(app))

        resp = client.post(
            "/api/applications/100/payments",
            json={"amount": "45.00", "method": "card", "outcome": "success"},
        )

        assert resp.status_code == 409
        assert resp.json()["code"] == "already_paid"

    def test_failed_attempt_requires_message(self, make_client):
        client = make_client(renter_alex(), make_mock_session(make_app(status=S.SUBMITTED)))

        resp = client.post(
            "/api/applications/100/payments",
            json={"amount": "45.00", "method": "card", "outcome": "failed"},
        )

        assert resp.status_code == 422
        assert resp.json()["errors"] == {"error_message": "Required"}

    @pytest.mark.parametrize("amount", ["0.001", "123456789012.50", "0"])
    def test_amount_outside_ledger_column_is_422(self, make_client, amount):
        app = make_app(status=S.SUBMITTED)
        client = make_client(renter_alex(), make_mock_session(app, None))

        resp = client.post(
            "/api/applications/100/payments",
            json={"amount": amount, "method": "card", "outcome": "success"},
        )

        assert resp.status_code == 422
        assert app.payment_status == PaymentStatus.PENDING

    def test_over_long_reference_is_422(self, make_client):
        client = make_client(renter_alex(), make_mock_session(make_app(status=S.SUBMITTED), None))

        resp = client.post(
            "/api/applications/100/payments",
            json={"amount": "45.00", "method": "card", "outcome": "success", "reference_id": "R" * 101},
        )

        assert resp.status_code == 422

    def test_landlord_records_manual_verification(self, make_client):
        app = make_app(status=S.UNDER_REVIEW)
        client = make_client(landlord_lee(), make_mock_session(app, None))

        resp = client.post(
            "/api/applications/100/payments",
            json={"amount": "45.00", "method": "check", "outcome": "success"},
        )

        assert resp.status_code == 201
        assert resp.json()["data"]["reference_id"].startswith("MV-")

    def test_ledger(self, make_client):
        app = make_app(status=S.SUBMITTED, payment_status=PaymentStatus.FAILED)
        client = make_client(renter_alex(), make_mock_session(app, [make_attempt(id=1)]))

        resp = client.get("/api/applications/100/payments")

        assert resp.status_code == 200
        body = resp.json()
        assert body["payment_status"] == "failed"
        assert body["data"][0]["error_message"] == "Card declined"


class TestRequirements:
    def test_landlord_satisfies_requirement(self, make_client):
        app = make_app(status=S.CONDITIONAL_APPROVAL, requirements=[make_requirement(id=3)])
        client = make_client(landlord_lee(), make_mock_session(app))

        resp = client.post(
            "/api/applications/100/requirements/3/satisfy",
            json={"notes": "Policy on file", "file_id": "doc-77"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "conditional_approval"
        data = body["requirements"][0]
        assert data["satisfied"] is True
        assert data["satisfied_by"] == "lee-okafor-landlord"
        assert data["file_id"] == "doc-77"

    def test_satisfy_without_body(self, make_client):
        app = make_app(status=S.CONDITIONAL_APPROVAL, requirements=[make_requirement(id=3)])
        client = make_client(landlord_lee(), make_mock_session(app))

        resp = client.post("/api/applications/100/requirements/3/satisfy")

        assert resp.status_code == 200

    def test_requirements_frozen_after_approval(self, make_client):
        app = make_app(status=S.APPROVED, requirements=[make_requirement(id=3)])
        client = make_client(landlord_lee(), make_mock_session(app))

        resp = client.post("/api/applications/100/requirements/3/satisfy", json={})

        assert resp.status_code == 409
