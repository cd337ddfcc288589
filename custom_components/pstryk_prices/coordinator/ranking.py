"""
Ranking of the current hour within a look-ahead window.

The module-level functions are pure: they receive the valid frames and the
local "now" and never touch Home Assistant state. PstrykPricesRankingEngine
binds them to the price cache and memoizes tied positions. The window for N hours is
[current hour start, current hour start + N h); the frame covering now is
always part of it, even if its start lies before the current hour.
"""

from __future__ import annotations

import logging
import operator
from datetime import UTC, timedelta
from itertools import groupby
from typing import TYPE_CHECKING, NamedTuple

from custom_components.pstryk_prices.const import (
    OPERATOR_EQUAL,
    OPERATOR_GREATER_OR_EQUAL,
    OPERATOR_GREATER_THAN,
    OPERATOR_LESS_OR_EQUAL,
    OPERATOR_LESS_THAN,
    OPERATOR_NOT_EQUAL,
)

from .constants import POSITION_CACHE_TTL
from .helpers import find_current_frame
from .types import PriceTier

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from .cache import PstrykPricesPriceCache
    from .time_service import PstrykPricesTimeService
    from .types import PriceFrame

_LOGGER = logging.getLogger(__name__)

# Prices are grouped into tiers after rounding to this many decimals
TIER_PRICE_PRECISION = 6

# Ranks reported by the legacy rank (1 = cheapest .. 3)
LEGACY_RANK_LIMIT = 3

# Frames considered by the cheapest-upcoming-hours lookup
UPCOMING_HOURS_HORIZON = timedelta(hours=24)

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    OPERATOR_LESS_THAN: operator.lt,
    OPERATOR_LESS_OR_EQUAL: operator.le,
    OPERATOR_EQUAL: operator.eq,
    OPERATOR_GREATER_OR_EQUAL: operator.ge,
    OPERATOR_GREATER_THAN: operator.gt,
    OPERATOR_NOT_EQUAL: operator.ne,
}


def hour_start(now: datetime) -> datetime:
    """Start of the local hour containing now, as a UTC instant."""
    return now.replace(minute=0, second=0, microsecond=0).astimezone(UTC)


def select_window_frames(
    frames: Sequence[PriceFrame],
    now: datetime,
    hour_window: int,
) -> tuple[list[PriceFrame], PriceFrame | None]:
    """
    Select the frames of an N-hour look-ahead window.

    Args:
        frames: Valid frames in time order.
        now: Local reference time.
        hour_window: Window length in hours.

    Returns:
        Tuple of (window frames in time order, current frame or None).

    """
    window_start = hour_start(now)
    window_end = window_start + timedelta(hours=hour_window)
    window = [frame for frame in frames if window_start <= frame.start < window_end]

    current = find_current_frame(frames, now)
    if current is not None and current not in window:
        window.insert(0, current)

    return window, current


def calculate_cheapest_hour_rank(frames: Sequence[PriceFrame], now: datetime, hour_window: int) -> int:
    """
    Legacy rank of the current hour among the cheapest hours of the window.

    Returns 1, 2 or 3 if the current frame sits at that index of the ascending
    sort, else 0. Ties are not grouped: of k equally cheap hours only the first
    three (in time order) get a rank.
    """
    window, current = select_window_frames(frames, now, hour_window)
    if current is None or not window:
        return 0

    ordered = sorted(window, key=lambda frame: frame.price_gross)
    index = ordered.index(current)
    return index + 1 if index < LEGACY_RANK_LIMIT else 0


def calculate_exact_price_position(
    frames: Sequence[PriceFrame],
    now: datetime,
    hour_window: int,
    *,
    cheapest_first: bool = True,
) -> tuple[int, int] | None:
    """
    Exact 1-based position of the current hour in the full window sort.

    Returns:
        Tuple of (position, window size), or None without a current frame.

    """
    window, current = select_window_frames(frames, now, hour_window)
    if current is None or not window:
        return None

    ordered = sorted(window, key=lambda frame: frame.price_gross, reverse=not cheapest_first)
    return ordered.index(current) + 1, len(ordered)


def build_price_tiers(
    frames: Sequence[PriceFrame],
    precision: int = TIER_PRICE_PRECISION,
) -> list[PriceTier]:
    """
    Group frames into ascending price tiers.

    Frames whose prices are equal after rounding share one tier and therefore
    one position; positions are consecutive starting at 1.
    """

    def tier_price(frame: PriceFrame) -> float:
        return round(frame.price_gross, precision)

    ordered = sorted(frames, key=tier_price)
    return [
        PriceTier(price=price, frames=tuple(members), position=position)
        for position, (price, members) in enumerate(groupby(ordered, key=tier_price), start=1)
    ]


def calculate_tied_price_position(
    frames: Sequence[PriceFrame],
    now: datetime,
    hour_window: int,
    precision: int = TIER_PRICE_PRECISION,
) -> float:
    """
    Tie-aware position of the current hour within the window.

    All hours sharing the cheapest price report 1.0, the next distinct price
    2.0, and so on. The result is anchored to the hour, so it does not change
    between HH:00 and HH:59.

    Returns:
        Position rounded to one decimal, or float(hour_window) when there is
        no data for the window.

    """
    window, current = select_window_frames(frames, now, hour_window)
    if current is None or not window:
        _LOGGER.debug("No current frame for %dh window, using fallback position", hour_window)
        return float(hour_window)

    for tier in build_price_tiers(window, precision):
        if current in tier.frames:
            return round(float(tier.position), 1)

    return float(hour_window)


def compare_position(value: float, operator_name: str, target: float) -> bool:
    """
    Evaluate a position condition such as "position lte 3".

    Raises:
        ValueError: If operator_name is not a supported comparison.

    """
    comparator = _COMPARATORS.get(operator_name)
    if comparator is None:
        msg = f"Unsupported comparison operator: {operator_name}"
        raise ValueError(msg)
    return comparator(value, target)


def find_cheapest_upcoming_frames(
    frames: Sequence[PriceFrame],
    now: datetime,
    count: int,
) -> list[PriceFrame]:
    """
    Cheapest frames starting after now within the next 24 hours.

    Returns:
        Up to count frames ordered by price (earlier start first on ties).

    """
    horizon_end = now.astimezone(UTC) + UPCOMING_HOURS_HORIZON
    upcoming = [frame for frame in frames if now < frame.start <= horizon_end]
    return sorted(upcoming, key=lambda frame: (frame.price_gross, frame.start))[:count]


class _CachedPosition(NamedTuple):
    value: float
    generation: int
    hour_start: datetime
    computed_at: datetime


class PstrykPricesRankingEngine:
    """
    Ranking bound to the coordinator's price cache.

    Works on the most recent snapshot; cache validity only decides when the
    fetcher refreshes, frames outside the window simply drop out. Tied positions
    are memoized per window for POSITION_CACHE_TTL and dropped when a new cache
    generation is installed or the hour changes.
    """

    def __init__(self, cache: PstrykPricesPriceCache, precision: int = TIER_PRICE_PRECISION) -> None:
        """Initialize the ranking engine."""
        self._cache = cache
        self._precision = precision
        self._positions: dict[int, _CachedPosition] = {}

    def invalidate(self) -> None:
        """Drop memoized positions (hour boundary or new data)."""
        self._positions.clear()

    def _frames(self) -> tuple[PriceFrame, ...]:
        snapshot = self._cache.last_snapshot()
        return snapshot.frames if snapshot is not None else ()

    def current_frame(self, *, time: PstrykPricesTimeService) -> PriceFrame | None:
        """Frame covering now, if any."""
        return find_current_frame(self._frames(), time.now())

    def cheapest_hour_rank(self, hour_window: int, *, time: PstrykPricesTimeService) -> int:
        """Legacy tie-blind rank of the current hour (0 = not among the 3 cheapest)."""
        return calculate_cheapest_hour_rank(self._frames(), time.now(), hour_window)

    def exact_price_position(
        self,
        hour_window: int,
        *,
        time: PstrykPricesTimeService,
        cheapest_first: bool = True,
    ) -> tuple[int, int] | None:
        """Exact (position, window size) of the current hour."""
        return calculate_exact_price_position(
            self._frames(),
            time.now(),
            hour_window,
            cheapest_first=cheapest_first,
        )

    def tied_price_position(self, hour_window: int, *, time: PstrykPricesTimeService) -> float:
        """Tie-aware position of the current hour, memoized per window."""
        now = time.now()
        current_hour = time.current_hour_start()
        generation = self._cache.generation

        cached = self._positions.get(hour_window)
        if (
            cached is not None
            and cached.generation == generation
            and cached.hour_start == current_hour
            and now - cached.computed_at < POSITION_CACHE_TTL
        ):
            return cached.value

        value = calculate_tied_price_position(self._frames(), now, hour_window, self._precision)
        self._positions[hour_window] = _CachedPosition(
            value=value,
            generation=generation,
            hour_start=current_hour,
            computed_at=now,
        )
        return value

    def cheapest_upcoming(self, count: int, *, time: PstrykPricesTimeService) -> list[PriceFrame]:
        """Cheapest hours starting within the next 24 hours."""
        return find_cheapest_upcoming_frames(self._frames(), time.now(), count)
