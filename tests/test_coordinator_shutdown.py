"""Test coordinator shutdown, update cycle and manual refresh wiring."""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

# Import at module level to avoid PLC0415
from custom_components.pstryk_prices.api.exceptions import (
    PstrykPricesApiClientAuthenticationError,
    PstrykPricesApiClientCommunicationError,
)
from custom_components.pstryk_prices.const import DATA_STATUS_ERROR, DATA_STATUS_FRESH
from custom_components.pstryk_prices.coordinator.cache import PstrykPricesPriceCache
from custom_components.pstryk_prices.coordinator.core import (
    PstrykPricesDataUpdateCoordinator,
)
from custom_components.pstryk_prices.coordinator.periods import PstrykPricesPeriodCalculator
from custom_components.pstryk_prices.coordinator.ranking import PstrykPricesRankingEngine
from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService
from custom_components.pstryk_prices.coordinator.types import PriceFrame
from homeassistant.exceptions import ConfigEntryAuthFailed
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

WARSAW = ZoneInfo("Europe/Warsaw")


def _bare_coordinator() -> PstrykPricesDataUpdateCoordinator:
    """Create a coordinator bypassing __init__ with real cache, ranking and periods."""
    coordinator = object.__new__(PstrykPricesDataUpdateCoordinator)
    coordinator.price_cache = PstrykPricesPriceCache("[TEST]")
    coordinator.ranking = PstrykPricesRankingEngine(coordinator.price_cache)
    coordinator._period_calculator = PstrykPricesPeriodCalculator("[TEST]", 10)  # noqa: SLF001
    coordinator._listener_manager = MagicMock()  # noqa: SLF001
    coordinator._scheduler = MagicMock()  # noqa: SLF001
    coordinator._scheduler.async_run = AsyncMock()  # noqa: SLF001
    coordinator._data_fetcher = MagicMock()  # noqa: SLF001
    coordinator._data_fetcher.last_error = None  # noqa: SLF001
    coordinator._data_fetcher.status = DATA_STATUS_FRESH  # noqa: SLF001
    coordinator._remove_status_listener = MagicMock()  # noqa: SLF001
    coordinator._is_updating = False  # noqa: SLF001
    coordinator._log = lambda *_a, **_kw: None  # noqa: SLF001
    coordinator.time = PstrykPricesTimeService(datetime(2025, 1, 15, 9, 59, tzinfo=WARSAW))
    return coordinator


def _fill_cache(coordinator: PstrykPricesDataUpdateCoordinator) -> None:
    start = datetime(2025, 1, 15, 10, 0, tzinfo=WARSAW)
    frame = PriceFrame(start, start.replace(hour=11), 0.5, is_cheap=False, is_expensive=False)
    coordinator.price_cache.update(
        (frame,),
        0.5,
        datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW),
        date(2025, 1, 15),
        fetched_at=start,
    )


@pytest.mark.asyncio
async def test_coordinator_shutdown_releases_everything() -> None:
    """
    Test that shutdown cancels every timer and drops the cache.

    Nothing may fire after the config entry was unloaded.
    """
    coordinator = _bare_coordinator()
    _fill_cache(coordinator)

    with patch.object(DataUpdateCoordinator, "async_shutdown", AsyncMock()) as mock_super:
        await coordinator.async_shutdown()

    coordinator._listener_manager.cancel_timers.assert_called_once()  # noqa: SLF001
    coordinator._scheduler.cancel.assert_called_once()  # noqa: SLF001
    coordinator._remove_status_listener.assert_called_once()  # noqa: SLF001
    assert coordinator.price_cache.last_snapshot() is None
    mock_super.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_without_data_raises_auth_failed() -> None:
    """Test a rejected API key without cached data starts reauthentication."""
    coordinator = _bare_coordinator()
    coordinator._data_fetcher.last_error = PstrykPricesApiClientAuthenticationError("bad key")  # noqa: SLF001

    with pytest.raises(ConfigEntryAuthFailed):
        await coordinator._async_update_data()  # noqa: SLF001


@pytest.mark.asyncio
async def test_update_without_data_raises_update_failed() -> None:
    """Test a transport error without cached data marks the update as failed."""
    coordinator = _bare_coordinator()
    coordinator._data_fetcher.last_error = PstrykPricesApiClientCommunicationError("down")  # noqa: SLF001
    coordinator._data_fetcher.status = DATA_STATUS_ERROR  # noqa: SLF001

    with pytest.raises(UpdateFailed):
        await coordinator._async_update_data()  # noqa: SLF001


@pytest.mark.asyncio
async def test_update_returns_snapshot_and_periods() -> None:
    """Test a poll with cached data returns the snapshot and both block lists."""
    coordinator = _bare_coordinator()
    _fill_cache(coordinator)

    data = await coordinator._async_update_data()  # noqa: SLF001

    coordinator._scheduler.async_run.assert_awaited_once()  # noqa: SLF001
    assert data["snapshot"] is coordinator.price_cache.last_snapshot()
    assert set(data["periods"]) == {"maximise", "minimise"}
    assert data["status"] == DATA_STATUS_FRESH
    assert coordinator._is_updating is False  # noqa: SLF001


def test_hour_refresh_notifies_without_fetching() -> None:
    """Test the hour boundary recomputes from cache and wakes time-sensitive entities."""
    coordinator = _bare_coordinator()
    coordinator.ranking = MagicMock()

    coordinator._handle_hour_refresh()  # noqa: SLF001

    coordinator.ranking.invalidate.assert_called_once()
    coordinator._listener_manager.async_update_time_sensitive_listeners.assert_called_once()  # noqa: SLF001
    coordinator._scheduler.async_run.assert_not_called()  # noqa: SLF001


def test_timer_handlers_use_fire_time() -> None:
    """
    Test timer callbacks evaluate at the moment the timer fired.

    Scenario: Hour timer fires at 10:00Z (11:00 local), usage flag timer at 10:00:30Z
    Expected: Listeners receive time services pinned to those moments
    """
    coordinator = _bare_coordinator()
    listeners = coordinator._listener_manager  # noqa: SLF001

    coordinator._handle_hour_refresh(datetime(2025, 1, 15, 10, 0, tzinfo=UTC))  # noqa: SLF001
    coordinator._handle_usage_flag_refresh(datetime(2025, 1, 15, 10, 0, 30, tzinfo=UTC))  # noqa: SLF001

    hour_time = listeners.async_update_time_sensitive_listeners.call_args.args[0]
    flag_time = listeners.async_update_usage_flag_listeners.call_args.args[0]
    assert hour_time.now() == datetime(2025, 1, 15, 11, 0, tzinfo=WARSAW)
    assert coordinator.time is hour_time
    assert flag_time.now() == datetime(2025, 1, 15, 11, 0, 30, tzinfo=WARSAW)


def test_status_change_pushes_new_data() -> None:
    """Test a refresh finished outside the poll updates entities immediately."""
    coordinator = _bare_coordinator()
    _fill_cache(coordinator)
    coordinator.async_set_updated_data = MagicMock()

    coordinator._handle_status_change(DATA_STATUS_FRESH)  # noqa: SLF001
    coordinator._handle_status_change(DATA_STATUS_ERROR)  # noqa: SLF001

    coordinator.async_set_updated_data.assert_called_once()


def test_status_change_during_poll_is_left_to_poll() -> None:
    """Test no duplicate push while _async_update_data is running."""
    coordinator = _bare_coordinator()
    coordinator._is_updating = True  # noqa: SLF001
    coordinator.async_set_updated_data = MagicMock()

    coordinator._handle_status_change(DATA_STATUS_FRESH)  # noqa: SLF001

    coordinator.async_set_updated_data.assert_not_called()


@pytest.mark.asyncio
async def test_deferred_manual_refresh() -> None:
    """Test a non-immediate refresh flags the fetcher and requests a coordinator refresh."""
    coordinator = _bare_coordinator()
    coordinator.async_request_refresh = AsyncMock()

    assert await coordinator.async_request_price_refresh(immediate=False) is False

    coordinator._data_fetcher.request_manual_refresh.assert_called_once()  # noqa: SLF001
    coordinator.async_request_refresh.assert_awaited_once()


@pytest.mark.asyncio
async def test_immediate_manual_refresh() -> None:
    """Test an immediate refresh goes through the fetcher's cooldown path."""
    coordinator = _bare_coordinator()
    coordinator._data_fetcher.request_manual_refresh_immediate = AsyncMock(return_value=True)  # noqa: SLF001

    assert await coordinator.async_request_price_refresh(immediate=True) is True

    coordinator._data_fetcher.request_manual_refresh_immediate.assert_awaited_once()  # noqa: SLF001
