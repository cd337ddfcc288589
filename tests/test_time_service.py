"""Tests for TimeService - calendar boundaries, refresh hour rollover and parsing."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from custom_components.pstryk_prices.coordinator.time_service import (
    PstrykPricesTimeService,
)

WARSAW = ZoneInfo("Europe/Warsaw")


def _service(*args: int) -> PstrykPricesTimeService:
    return PstrykPricesTimeService(datetime(*args, tzinfo=WARSAW))


# =============================================================================
# Reference Time
# =============================================================================


def test_reference_time_converted_to_local() -> None:
    """Test a UTC reference time is exposed in the local time zone."""
    time_service = PstrykPricesTimeService(datetime(2025, 1, 15, 23, 30, tzinfo=UTC))

    assert time_service.now() == datetime(2025, 1, 16, 0, 30, tzinfo=WARSAW)
    assert time_service.get_local_date() == date(2025, 1, 16)


def test_now_is_stable() -> None:
    """Test now() returns the same value for the lifetime of the instance."""
    time_service = PstrykPricesTimeService()

    assert time_service.now() == time_service.now()


def test_current_hour_start_truncates() -> None:
    """Test the window anchor drops minutes and seconds."""
    time_service = PstrykPricesTimeService(datetime(2025, 1, 15, 12, 59, 59, 999, tzinfo=WARSAW))

    assert time_service.current_hour_start() == datetime(2025, 1, 15, 12, 0, tzinfo=WARSAW)


def test_current_hour_start_distinguishes_repeated_hour() -> None:
    """
    Test the two 02:00 hours of the DST fall-back night anchor to different instants.

    Scenario: 02:30 CEST (00:30Z) and 02:30 CET (01:30Z) on 2026-10-25
    Expected: Anchors 00:00Z and 01:00Z, one hour apart
    """
    first = PstrykPricesTimeService(datetime(2026, 10, 25, 0, 30, tzinfo=UTC))
    second = PstrykPricesTimeService(datetime(2026, 10, 25, 1, 30, tzinfo=UTC))

    assert first.now().hour == second.now().hour == 2
    assert first.current_hour_start() == datetime(2026, 10, 25, 0, 0, tzinfo=UTC)
    assert second.current_hour_start() == datetime(2026, 10, 25, 1, 0, tzinfo=UTC)
    assert second.current_hour_start() - first.current_hour_start() == timedelta(hours=1)


# =============================================================================
# Refresh Hour and Calendar Boundaries
# =============================================================================


def test_next_refresh_time_later_today() -> None:
    """Test refresh hour still ahead today."""
    assert _service(2025, 1, 15, 10, 0).next_refresh_time(15) == datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW)


def test_next_refresh_time_exactly_now_rolls_over() -> None:
    """Test a refresh hour equal to now moves to tomorrow."""
    assert _service(2025, 1, 15, 15, 0).next_refresh_time(15) == datetime(2025, 1, 16, 15, 0, tzinfo=WARSAW)


def test_next_refresh_time_passed_rolls_over() -> None:
    """Test a refresh hour already passed moves to tomorrow."""
    assert _service(2025, 1, 15, 18, 0).next_refresh_time(15) == datetime(2025, 1, 16, 15, 0, tzinfo=WARSAW)


def test_next_calendar_boundary_prefers_earlier() -> None:
    """Test boundary is the earlier of local midnight and the refresh hour."""
    assert _service(2025, 1, 15, 10, 0).next_calendar_boundary(15) == datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW)
    assert _service(2025, 1, 15, 16, 0).next_calendar_boundary(15) == datetime(2025, 1, 16, 0, 0, tzinfo=WARSAW)


def test_local_midnight_across_dst_change() -> None:
    """Test midnight offsets use the local calendar on the spring-forward day."""
    time_service = _service(2025, 3, 29, 12, 0)

    midnight = time_service.get_local_midnight(1)
    next_midnight = time_service.get_local_midnight(2)

    assert midnight == datetime(2025, 3, 30, 0, 0, tzinfo=WARSAW)
    # 23 real hours on the day clocks go forward
    assert next_midnight.astimezone(UTC) - midnight.astimezone(UTC) == timedelta(hours=23)


# =============================================================================
# Fetch Window
# =============================================================================


def test_fetch_window() -> None:
    """Test the window runs from two hours before the current hour to midnight two days ahead."""
    start, end = _service(2025, 1, 15, 10, 20).get_fetch_window(timedelta(hours=2), 2)

    assert start == datetime(2025, 1, 15, 8, 0, tzinfo=WARSAW)
    assert end == datetime(2025, 1, 17, 0, 0, tzinfo=WARSAW)


# =============================================================================
# Parsing and Helpers
# =============================================================================


def test_parse_datetime_aware() -> None:
    """Test ISO strings with offset are parsed into local time."""
    parsed = _service(2025, 1, 15, 10, 0).parse_datetime("2025-01-15T09:00:00+00:00")

    assert parsed == datetime(2025, 1, 15, 10, 0, tzinfo=WARSAW)


def test_parse_datetime_rejects_naive_and_garbage() -> None:
    """Test strings without offset or not ISO 8601 are rejected."""
    time_service = _service(2025, 1, 15, 10, 0)

    assert time_service.parse_datetime("2025-01-15T09:00:00") is None
    assert time_service.parse_datetime("not a date") is None


def test_with_reference_time() -> None:
    """Test time travel creates an independent instance."""
    original = _service(2025, 1, 15, 10, 0)
    shifted = original.with_reference_time(datetime(2025, 1, 16, 10, 0, tzinfo=WARSAW))

    assert original.get_local_date() == date(2025, 1, 15)
    assert shifted.get_local_date() == date(2025, 1, 16)
