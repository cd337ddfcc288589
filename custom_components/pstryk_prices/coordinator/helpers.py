"""Pure utility functions for coordinator module."""

from __future__ import annotations

import logging
from datetime import UTC
from statistics import fmean
from typing import TYPE_CHECKING, Any

from .types import PriceFrame

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date, datetime

    from .time_service import PstrykPricesTimeService

_LOGGER = logging.getLogger(__name__)


def parse_price_frame(raw: Any, *, time: PstrykPricesTimeService) -> PriceFrame | None:
    """
    Convert one raw API frame into a PriceFrame.

    Frames without parseable timestamps or price are dropped (None). Missing
    is_cheap / is_expensive flags are kept as None; see filter_valid_frames.
    start and end are stored as UTC instants so the repeated local hour of a
    DST fall-back night stays two distinct frames.
    """
    if not isinstance(raw, dict):
        return None

    start_str = raw.get("start")
    end_str = raw.get("end")
    start = time.parse_datetime(start_str) if isinstance(start_str, str) else None
    end = time.parse_datetime(end_str) if isinstance(end_str, str) else None
    if start is None or end is None:
        _LOGGER.debug("Dropping frame with unparseable timestamps: %s", raw)
        return None

    try:
        price = float(raw["price_gross"])
    except (KeyError, TypeError, ValueError):
        _LOGGER.debug("Dropping frame without price: %s", raw)
        return None

    return PriceFrame(
        start=time.as_utc(start),
        end=time.as_utc(end),
        price_gross=price,
        is_cheap=raw.get("is_cheap"),
        is_expensive=raw.get("is_expensive"),
        is_live=bool(raw.get("is_live", False)),
    )


def filter_valid_frames(frames: Iterable[PriceFrame]) -> tuple[PriceFrame, ...]:
    """Keep valid frames only, unique by start instant, in time order."""
    by_start: dict[datetime, PriceFrame] = {}
    dropped = 0
    for frame in frames:
        if not frame.is_valid:
            dropped += 1
            continue
        # Later duplicates win (upstream sends the most recent revision last)
        by_start[frame.start.astimezone(UTC)] = frame

    if dropped:
        _LOGGER.debug("Filtered %d frames with missing price classification", dropped)

    return tuple(frame for _, frame in sorted(by_start.items()))


def find_current_frame(frames: Sequence[PriceFrame], now: datetime) -> PriceFrame | None:
    """
    Resolve the frame covering now.

    Derived locally from start <= now < end; the upstream is_live marker is only
    a fallback for when no frame contains now.
    """
    for frame in frames:
        if frame.contains(now):
            return frame
    for frame in frames:
        if frame.is_live:
            return frame
    return None


def calculate_daily_average(
    frames: Sequence[PriceFrame],
    upstream_average: float | None,
    *,
    day: date,
    time: PstrykPricesTimeService,
) -> float:
    """
    Daily average price.

    Uses the upstream value when present, otherwise the mean of the frames
    starting on the given local day (all frames if none match).
    """
    if upstream_average is not None:
        return upstream_average

    day_prices = [frame.price_gross for frame in frames if time.get_local_date(frame.start) == day]
    if day_prices:
        return fmean(day_prices)
    if frames:
        return fmean(frame.price_gross for frame in frames)
    return 0.0


def percent_difference(price: float, reference: float) -> float:
    """
    Absolute percent difference of price relative to reference.

    A zero reference only matches an identical price (0.0), anything else is
    treated as infinitely far away.
    """
    if reference == 0:
        return 0.0 if price == 0 else float("inf")
    return abs(price - reference) / abs(reference) * 100
