"""
Tests for the refresh scheduler.

The scheduler owns one cancellable timer handle: it re-arms for the next
calendar boundary after each run, or for a retry delay after a failure.
"""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, Mock, patch
from zoneinfo import ZoneInfo

import pytest

from custom_components.pstryk_prices.api.exceptions import PstrykPricesApiClientCommunicationError
from custom_components.pstryk_prices.coordinator.scheduler import PstrykPricesRefreshScheduler
from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService

WARSAW = ZoneInfo("Europe/Warsaw")
MODULE = "custom_components.pstryk_prices.coordinator.scheduler"


def _fetcher(*, due: bool = True, error: Exception | None = None) -> Mock:
    fetcher = Mock()
    fetcher.should_refresh = Mock(return_value=due)
    fetcher.refresh_all = AsyncMock(side_effect=error, return_value=True)
    return fetcher


def _time(hour: int, minute: int = 0) -> PstrykPricesTimeService:
    return PstrykPricesTimeService(datetime(2025, 1, 15, hour, minute, tzinfo=WARSAW))


@pytest.mark.unit
def test_boundary_is_refresh_hour_before_midnight() -> None:
    """
    Test the next boundary during the day.

    Scenario: 10:00 with refresh hour 15
    Expected: Handle armed for 15:00 today
    """
    hass = Mock()
    scheduler = PstrykPricesRefreshScheduler(hass, _fetcher(), "[TEST]", 15)

    with patch(f"{MODULE}.async_track_point_in_time") as mock_track:
        mock_track.return_value = Mock()
        fire_at = scheduler.schedule_next_boundary(_time(10))

    expected = datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW)
    assert fire_at == expected
    assert scheduler.next_fire == expected
    assert mock_track.call_args.args[0] is hass
    assert mock_track.call_args.args[2] == expected


@pytest.mark.unit
def test_boundary_is_midnight_after_refresh_hour() -> None:
    """
    Test the next boundary in the evening.

    Scenario: 20:00 with refresh hour 15
    Expected: Local midnight comes before tomorrow's 15:00
    """
    scheduler = PstrykPricesRefreshScheduler(Mock(), _fetcher(), "[TEST]", 15)

    with patch(f"{MODULE}.async_track_point_in_time", return_value=Mock()):
        fire_at = scheduler.schedule_next_boundary(_time(20))

    assert fire_at == datetime(2025, 1, 16, 0, 0, tzinfo=WARSAW)


@pytest.mark.unit
def test_rearming_cancels_previous_handle() -> None:
    """Test only one timer handle is alive at any time."""
    scheduler = PstrykPricesRefreshScheduler(Mock(), _fetcher(), "[TEST]", 15)
    first_cancel = Mock()
    second_cancel = Mock()

    with patch(f"{MODULE}.async_track_point_in_time", side_effect=[first_cancel, second_cancel]):
        scheduler.schedule_next_boundary(_time(10))
        scheduler.schedule_next_boundary(_time(11))

    first_cancel.assert_called_once()
    second_cancel.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_successful_run_arms_boundary() -> None:
    """
    Test a due refresh followed by re-arming.

    Expected: refresh_all awaited once, boundary handle armed, no retry pending
    """
    fetcher = _fetcher()
    scheduler = PstrykPricesRefreshScheduler(Mock(), fetcher, "[TEST]", 15)

    with (
        patch(f"{MODULE}.async_track_point_in_time", return_value=Mock()) as mock_track,
        patch(f"{MODULE}.async_call_later") as mock_later,
    ):
        await scheduler.async_run(_time(10))

    fetcher.refresh_all.assert_awaited_once()
    mock_track.assert_called_once()
    mock_later.assert_not_called()
    assert scheduler.retry_attempt == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_not_due_skips_fetch() -> None:
    """Test a valid cache only re-arms the timer."""
    fetcher = _fetcher(due=False)
    scheduler = PstrykPricesRefreshScheduler(Mock(), fetcher, "[TEST]", 15)

    with patch(f"{MODULE}.async_track_point_in_time", return_value=Mock()) as mock_track:
        await scheduler.async_run(_time(10))

    fetcher.refresh_all.assert_not_awaited()
    mock_track.assert_called_once()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failures_back_off_then_wait_for_boundary() -> None:
    """
    Test retry backoff.

    Scenario: Four consecutive failed runs
    Expected: Retries after 5, 10 and 20 seconds, then the next calendar boundary
    """
    fetcher = _fetcher(error=PstrykPricesApiClientCommunicationError("down"))
    hass = Mock()
    scheduler = PstrykPricesRefreshScheduler(hass, fetcher, "[TEST]", 15)

    with (
        patch(f"{MODULE}.async_track_point_in_time", return_value=Mock()) as mock_track,
        patch(f"{MODULE}.async_call_later", return_value=Mock()) as mock_later,
    ):
        for _ in range(3):
            await scheduler.async_run(_time(10))

        delays = [call.args[1] for call in mock_later.call_args_list]
        assert delays == [5, 10, 20]
        assert scheduler.retry_attempt == 3
        assert scheduler.next_fire is None
        mock_track.assert_not_called()

        await scheduler.async_run(_time(10))

    mock_track.assert_called_once()
    assert mock_later.call_count == 3
    assert scheduler.retry_attempt == 0
    assert scheduler.next_fire == datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_success_after_retry_resets_backoff() -> None:
    """Test a successful retry restarts the backoff sequence."""
    fetcher = _fetcher(error=PstrykPricesApiClientCommunicationError("down"))
    scheduler = PstrykPricesRefreshScheduler(Mock(), fetcher, "[TEST]", 15)

    with (
        patch(f"{MODULE}.async_track_point_in_time", return_value=Mock()),
        patch(f"{MODULE}.async_call_later", return_value=Mock()) as mock_later,
    ):
        await scheduler.async_run(_time(10))
        fetcher.refresh_all.side_effect = None
        await scheduler.async_run(_time(10))
        fetcher.refresh_all.side_effect = PstrykPricesApiClientCommunicationError("down again")
        await scheduler.async_run(_time(10))

    assert [call.args[1] for call in mock_later.call_args_list] == [5, 5]


@pytest.mark.unit
def test_tick_schedules_run() -> None:
    """Test the timer callback hands the run to the event loop."""
    hass = Mock()
    scheduler = PstrykPricesRefreshScheduler(hass, _fetcher(), "[TEST]", 15)
    scheduler._cancel_handle = Mock()  # noqa: SLF001

    with patch.object(scheduler, "async_run", Mock(return_value="coro")):
        scheduler._handle_tick(datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW))  # noqa: SLF001

    hass.async_create_task.assert_called_once_with("coro")
    assert scheduler._cancel_handle is None  # noqa: SLF001


@pytest.mark.unit
def test_cancel_releases_handle() -> None:
    """Test cancel() calls the stored handle and clears state."""
    scheduler = PstrykPricesRefreshScheduler(Mock(), _fetcher(), "[TEST]", 15)
    cancel_handle = Mock()

    with patch(f"{MODULE}.async_track_point_in_time", return_value=cancel_handle):
        scheduler.schedule_next_boundary(_time(10))

    scheduler.cancel()

    cancel_handle.assert_called_once()
    assert scheduler.next_fire is None
    # Idempotent
    scheduler.cancel()
    cancel_handle.assert_called_once()
