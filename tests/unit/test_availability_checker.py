"""Tests for the availability checker."""

from unittest.mock import AsyncMock

import pytest

from src.core.enums import BookingStatus
from src.services.booking.availability_checker import AvailabilityChecker


@pytest.fixture
def make_checker(mock_store, selectors, fake_session_cls):
    def _make(page=None, error=None):
        sessions = fake_session_cls(page, error=error)
        checker = AvailabilityChecker(mock_store, session_factory=sessions, selectors=selectors)
        return checker, sessions

    return _make


class TestIsBooked:
    @pytest.mark.asyncio
    async def test_store_hit_skips_page(self, make_checker, mock_store, record_factory, test_href):
        mock_store.find.return_value = record_factory(status=BookingStatus.BOOKED)
        checker, sessions = make_checker()

        assert await checker.is_booked(test_href) is True
        assert sessions.opened == 0

    @pytest.mark.asyncio
    async def test_banner_marks_booked_and_records(
        self, make_checker, fake_page_cls, mock_store, test_href
    ):
        page = fake_page_cls(
            texts={"div.standard-banner-message": ["Sorry, this slot is no longer available."]}
        )
        checker, sessions = make_checker(page)

        assert await checker.is_booked(test_href) is True
        assert page.visited == [test_href]
        assert sessions.closed == 1

        href, patient, status = mock_store.upsert.await_args.args
        assert (href, patient, status) == (test_href, None, BookingStatus.BOOKED)
        assert "no longer available" in mock_store.upsert.await_args.kwargs["message"]

    @pytest.mark.asyncio
    async def test_body_text_phrase(self, make_checker, fake_page_cls, test_href):
        page = fake_page_cls(body="Sorry, this time slot has been taken.")
        checker, _ = make_checker(page)
        assert await checker.is_booked(test_href) is True

    @pytest.mark.asyncio
    async def test_contact_office_outside_banner_is_available(
        self, make_checker, fake_page_cls, mock_store, test_href
    ):
        page = fake_page_cls(
            body="Questions about insurance? Please contact the office at 555-0100."
        )
        checker, _ = make_checker(page)

        assert await checker.is_booked(test_href) is False
        mock_store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_contact_office_in_banner_is_booked(self, make_checker, fake_page_cls, test_href):
        page = fake_page_cls(
            texts={".banner-message": ["Please contact the office to request another time."]}
        )
        checker, _ = make_checker(page)
        assert await checker.is_booked(test_href) is True

    @pytest.mark.asyncio
    async def test_phrases_are_case_sensitive(self, make_checker, fake_page_cls, test_href):
        page = fake_page_cls(body="Questions? please contact the office. SLOT IS NO LONGER AVAILABLE")
        checker, _ = make_checker(page)
        assert await checker.is_booked(test_href) is False

    @pytest.mark.asyncio
    async def test_available_slot(self, make_checker, fake_page_cls, mock_store, test_href):
        page = fake_page_cls(body="Request an appointment with Dr. Smith")
        checker, _ = make_checker(page)

        assert await checker.is_booked(test_href) is False
        mock_store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_record_still_checks_page(
        self, make_checker, fake_page_cls, mock_store, record_factory, test_href
    ):
        mock_store.find.return_value = record_factory(status=BookingStatus.EXPIRED)
        page = fake_page_cls()
        checker, sessions = make_checker(page)

        assert await checker.is_booked(test_href) is False
        assert sessions.opened == 1

    @pytest.mark.asyncio
    async def test_navigation_failure_fails_open(self, make_checker, fake_page_cls, test_href):
        checker, _ = make_checker(fake_page_cls(goto_ok=False, body="has already been booked"))
        assert await checker.is_booked(test_href) is False

    @pytest.mark.asyncio
    async def test_browser_error_fails_open(self, make_checker, test_href):
        checker, _ = make_checker(error=RuntimeError("cannot connect to browser"))
        assert await checker.is_booked(test_href) is False

    @pytest.mark.asyncio
    async def test_store_lookup_error_falls_back_to_page(
        self, make_checker, fake_page_cls, mock_store, test_href
    ):
        mock_store.find = AsyncMock(side_effect=RuntimeError("db down"))
        checker, sessions = make_checker(fake_page_cls())
        assert await checker.is_booked(test_href) is False
        assert sessions.opened == 1

    @pytest.mark.asyncio
    async def test_record_failure_still_reports_booked(
        self, make_checker, fake_page_cls, mock_store, test_href
    ):
        mock_store.upsert = AsyncMock(side_effect=RuntimeError("db down"))
        checker, _ = make_checker(fake_page_cls(body="time slot has been taken"))
        assert await checker.is_booked(test_href) is True
