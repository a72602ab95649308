"""Tests for the HTTP API."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src import __version__
from src.core.enums import BookingStatus
from src.core.exceptions import DatabaseNotConnectedError
from src.services.booking.results import ItemOutcome, ProcessingSummary, SubmissionResult
from web.app import create_app

HREF = "https://portal.example.com/Appointments/Request?clinician=42&slot=9001"


@pytest.fixture
def services(mock_store):
    processor = MagicMock()
    processor.is_running = False
    processor.process_pending = AsyncMock(return_value=ProcessingSummary())
    submitter = MagicMock()
    submitter.submit = AsyncMock()
    return SimpleNamespace(store=mock_store, processor=processor, submitter=submitter, checker=None)


@pytest.fixture
def app(services):
    app = create_app()
    app.state.booking_services = services
    return app


@pytest.fixture
def client(app):
    """Create a test client without running the lifespan (no database)."""
    return TestClient(app)


class TestListAppointments:
    def test_list_all(self, client, services, record_factory):
        services.store.list_all.return_value = [record_factory(id=2), record_factory(id=1)]

        response = client.get("/api/appointments", params={"limit": 50})

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [2, 1]
        services.store.list_all.assert_awaited_once_with(limit=50)

    def test_limit_validated(self, client):
        response = client.get("/api/appointments", params={"limit": 0})
        assert response.status_code == 422
        assert response.headers["content-type"].startswith("application/problem+json")

    def test_services_missing_is_503(self):
        response = TestClient(create_app()).get("/api/appointments")
        assert response.status_code == 503
        assert response.json()["title"] == "Service Unavailable"


class TestUnknownAppointments:
    def test_newest_first_and_triggers_processing(self, client, services, record_factory):
        services.store.find_all_by_status.return_value = [
            record_factory(id=1, href="https://portal.example.com/a"),
            record_factory(id=2, href="https://portal.example.com/b"),
        ]

        response = client.get("/api/appointments/unknown")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [2, 1]
        services.store.find_all_by_status.assert_awaited_once_with(BookingStatus.UNKNOWN)
        services.processor.process_pending.assert_awaited_once()

    def test_no_second_run_while_processing(self, client, services):
        services.processor.is_running = True
        response = client.get("/api/appointments/unknown")
        assert response.status_code == 200
        services.processor.process_pending.assert_not_awaited()


class TestLookup:
    def test_found(self, client, services, record_factory):
        services.store.find.return_value = record_factory(href=HREF)
        response = client.get("/api/appointments/lookup", params={"href": HREF})
        assert response.status_code == 200
        assert response.json()["href"] == HREF
        assert response.json()["status"] == "unknown"

    def test_not_found(self, client):
        response = client.get("/api/appointments/lookup", params={"href": HREF})
        assert response.status_code == 404
        body = response.json()
        assert body["detail"] == "Appointment not found"
        assert body["instance"] == "/api/appointments/lookup"

    def test_relative_href_is_400(self, client, services):
        response = client.get("/api/appointments/lookup", params={"href": "/Appointments/Request"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        services.store.find.assert_not_awaited()


class TestSubmit:
    def test_submit(self, client, services):
        services.submitter.submit.return_value = SubmissionResult(
            success=True,
            message="Appointment request submitted successfully",
            status=BookingStatus.BOOKED,
            confirmation="Your request has been received",
        )

        response = client.post(
            "/api/appointments/submit",
            json={"href": HREF, "patient": {"first_name": "Jane", "previous_therapy": "No"}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "booked"
        assert body["confirmation"] == "Your request has been received"
        patient, href = services.submitter.submit.await_args.args
        assert href == HREF
        assert patient.first_name == "Jane"

    def test_already_booked_is_not_an_error(self, client, services):
        services.submitter.submit.return_value = SubmissionResult.booked_elsewhere(
            "This appointment slot is already booked in our records"
        )
        response = client.post("/api/appointments/submit", json={"href": HREF, "patient": {}})
        assert response.status_code == 200
        assert response.json()["already_booked"] is True

    def test_relative_href_rejected(self, client, services):
        response = client.post("/api/appointments/submit", json={"href": "/Request?x=1"})
        assert response.status_code == 422
        assert "href" in response.json()["errors"]
        services.submitter.submit.assert_not_awaited()

    def test_invalid_patient_email(self, client):
        response = client.post(
            "/api/appointments/submit", json={"href": HREF, "patient": {"email": "nope"}}
        )
        assert response.status_code == 422


class TestProcess:
    def test_process_summary(self, client, services):
        services.processor.process_pending.return_value = ProcessingSummary.from_outcomes(
            [
                ItemOutcome(href="https://portal.example.com/a", success=True, attempts=1),
                ItemOutcome(
                    href="https://portal.example.com/b",
                    success=False,
                    attempts=3,
                    error="Could not submit the form",
                ),
            ]
        )

        response = client.post("/api/appointments/process")

        assert response.status_code == 200
        body = response.json()
        assert (body["total"], body["success"], body["failed"]) == (2, 1, 1)
        assert body["details"][1]["attempts"] == 3

    def test_skipped(self, client, services):
        services.processor.process_pending.return_value = ProcessingSummary(skipped=True)
        assert client.post("/api/appointments/process").json()["skipped"] is True


class TestErrors:
    def test_database_error_maps_to_503(self, client, services):
        services.store.list_all.side_effect = DatabaseNotConnectedError()
        response = client.get("/api/appointments")
        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "DatabaseNotConnectedError"
        assert body["recoverable"] is True


class TestHealth:
    def test_healthy(self, client):
        with patch(
            "web.routes.health.check_database",
            AsyncMock(return_value={"status": "healthy", "pool": {}}),
        ):
            response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == __version__
        assert body["components"]["reconciliation"] == {"running": False}

    def test_unhealthy_database(self, client):
        with patch(
            "web.routes.health.check_database",
            AsyncMock(return_value={"status": "unhealthy", "error": "down"}),
        ):
            response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_liveness(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"
