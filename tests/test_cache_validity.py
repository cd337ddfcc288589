"""
Unit tests for price cache validity and atomic replacement.

The cache decides whether a refresh is required: a snapshot is only served
for its own local calendar day and until its expiry.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from custom_components.pstryk_prices.coordinator.cache import PstrykPricesPriceCache
from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService
from custom_components.pstryk_prices.coordinator.types import CachedPriceData, PriceFrame

WARSAW = ZoneInfo("Europe/Warsaw")


def _frames(day: date, prices: list[float]) -> tuple[PriceFrame, ...]:
    start = datetime(day.year, day.month, day.day, 0, 0, tzinfo=WARSAW)
    return tuple(
        PriceFrame(
            start=start + timedelta(hours=hour),
            end=start + timedelta(hours=hour + 1),
            price_gross=price,
            is_cheap=False,
            is_expensive=False,
        )
        for hour, price in enumerate(prices)
    )


def _time(*args: int) -> PstrykPricesTimeService:
    return PstrykPricesTimeService(datetime(*args, tzinfo=WARSAW))


@pytest.mark.unit
def test_cache_empty_is_invalid() -> None:
    """
    Test an empty cache requires a refresh.

    Scenario: Nothing fetched yet
    Expected: is_valid False, get returns None
    """
    cache = PstrykPricesPriceCache("[TEST]")
    time = _time(2025, 1, 15, 10, 0)

    assert cache.is_valid(time=time) is False
    assert cache.get(time=time) is None
    assert cache.last_snapshot() is None
    assert cache.generation == 0


@pytest.mark.unit
def test_cache_valid_same_day_before_expiry() -> None:
    """
    Test cache is valid on its own day before expiry.

    Scenario: Snapshot dated 2025-01-15 expiring 15:00, now 10:00 same day
    Expected: Valid, get returns the snapshot
    """
    cache = PstrykPricesPriceCache("[TEST]")
    day = date(2025, 1, 15)
    snapshot = cache.update(
        _frames(day, [0.5, 0.6]),
        0.55,
        datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW),
        day,
        fetched_at=datetime(2025, 1, 15, 9, 0, tzinfo=WARSAW),
    )
    time = _time(2025, 1, 15, 10, 0)

    assert cache.is_valid(time=time) is True
    assert cache.get(time=time) == snapshot
    assert snapshot.is_stale is False


@pytest.mark.unit
def test_cache_invalid_after_date_rollover_before_expiry() -> None:
    """
    Test the calendar date alone invalidates the cache.

    Scenario: Snapshot dated 2025-01-15 expiring 2025-01-16 15:00, now 2025-01-16 00:10
    Expected: Invalid (date mismatch) although expires_at is still ahead
    """
    cache = PstrykPricesPriceCache("[TEST]")
    day = date(2025, 1, 15)
    cache.update(
        _frames(day, [0.5]),
        0.5,
        datetime(2025, 1, 16, 15, 0, tzinfo=WARSAW),
        day,
        fetched_at=datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW),
    )

    assert cache.is_valid(time=_time(2025, 1, 16, 0, 10)) is False
    # The snapshot itself stays available for analytics and stale fallback
    assert cache.last_snapshot() is not None


@pytest.mark.unit
def test_cache_invalid_after_expiry() -> None:
    """
    Test expires_at invalidates the cache on the same day.

    Scenario: Snapshot expiring 15:00, now 15:00:01
    Expected: Invalid
    """
    cache = PstrykPricesPriceCache("[TEST]")
    day = date(2025, 1, 15)
    cache.update(
        _frames(day, [0.5]),
        0.5,
        datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW),
        day,
        fetched_at=datetime(2025, 1, 15, 9, 0, tzinfo=WARSAW),
    )

    assert cache.is_valid(time=_time(2025, 1, 15, 15, 0)) is True
    assert cache.is_valid(time=PstrykPricesTimeService(datetime(2025, 1, 15, 15, 0, 1, tzinfo=WARSAW))) is False


@pytest.mark.unit
def test_cache_without_frames_is_invalid() -> None:
    """Test a snapshot with an empty frame set never counts as valid."""
    cache = PstrykPricesPriceCache("[TEST]")
    day = date(2025, 1, 15)
    cache.update(
        (),
        0.0,
        datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW),
        day,
        fetched_at=datetime(2025, 1, 15, 9, 0, tzinfo=WARSAW),
    )

    assert cache.is_valid(time=_time(2025, 1, 15, 10, 0)) is False


@pytest.mark.unit
def test_cache_replacement_is_atomic() -> None:
    """
    Test readers never see a mix of two generations.

    Scenario: Reader holds generation 1, cache is updated to generation 2
    Expected: Held snapshot still pairs generation 1 frames with generation 1 average;
              new snapshot pairs generation 2 frames with generation 2 average
    """
    cache = PstrykPricesPriceCache("[TEST]")
    day = date(2025, 1, 15)
    expires = datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW)
    fetched = datetime(2025, 1, 15, 9, 0, tzinfo=WARSAW)

    first = cache.update(_frames(day, [0.1, 0.3]), 0.2, expires, day, fetched_at=fetched)
    held = cache.last_snapshot()
    second = cache.update(_frames(day, [0.7, 0.9]), 0.8, expires, day, fetched_at=fetched)

    assert held is first
    assert held.generation == 1
    assert [frame.price_gross for frame in held.frames] == [0.1, 0.3]
    assert held.daily_average == 0.2

    current = cache.last_snapshot()
    assert current is second
    assert current.generation == 2
    assert [frame.price_gross for frame in current.frames] == [0.7, 0.9]
    assert current.daily_average == 0.8
    assert cache.generation == 2


@pytest.mark.unit
def test_install_keeps_stale_flag_and_bumps_generation() -> None:
    """
    Test install() stores a prepared stale snapshot under a new generation.

    Scenario: Stale fallback snapshot (generation 1 content) is installed
    Expected: is_stale preserved, generation incremented
    """
    cache = PstrykPricesPriceCache("[TEST]")
    day = date(2025, 1, 15)
    fresh = cache.update(
        _frames(day, [0.5]),
        0.5,
        datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW),
        day,
        fetched_at=datetime(2025, 1, 15, 9, 0, tzinfo=WARSAW),
    )

    stale = CachedPriceData(
        frames=fresh.frames,
        daily_average=fresh.daily_average,
        date=day,
        expires_at=datetime(2025, 1, 15, 17, 0, tzinfo=WARSAW),
        fetched_at=fresh.fetched_at,
        is_stale=True,
        generation=fresh.generation,
    )
    installed = cache.install(stale)

    assert installed.is_stale is True
    assert installed.generation == 2
    assert cache.is_valid(time=_time(2025, 1, 15, 16, 0)) is True


@pytest.mark.unit
def test_clear_drops_snapshot() -> None:
    """Test clear() empties the cache on unload."""
    cache = PstrykPricesPriceCache("[TEST]")
    day = date(2025, 1, 15)
    cache.update(
        _frames(day, [0.5]),
        0.5,
        datetime(2025, 1, 15, 15, 0, tzinfo=WARSAW),
        day,
        fetched_at=datetime(2025, 1, 15, 9, 0, tzinfo=WARSAW),
    )

    cache.clear()

    assert cache.last_snapshot() is None
    assert cache.is_valid(time=_time(2025, 1, 15, 10, 0)) is False
