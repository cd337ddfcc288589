"""
TimeService - Centralized time management for PSTRYK Prices integration.

This service provides:
1. Single source of truth for current time
2. Timezone-aware operations (respects HA user timezone)
3. Calendar boundaries used by the cache (local midnight, daily refresh hour)

All datetime operations go through TimeService so a whole update cycle sees
the same "now" and tests can inject a fixed moment.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from homeassistant.util import dt as dt_util

if TYPE_CHECKING:
    from datetime import date

# =============================================================================
# This is the ONLY module allowed to import dt_util for time arithmetic.
# All business logic uses TimeService instead.
# =============================================================================


class PstrykPricesTimeService:
    """
    Time context for one update cycle.

    Usage:
        time_service = PstrykPricesTimeService()
        now = time_service.now()
        hour_start = time_service.current_hour_start()
        next_refresh = time_service.next_refresh_time(15)
    """

    def __init__(self, reference_time: datetime | None = None) -> None:
        """
        Initialize TimeService with reference time.

        Args:
            reference_time: Optional fixed time for this context.
                          If None, uses actual current time.

        """
        self._reference_time = dt_util.as_local(reference_time or dt_util.now())

    # =========================================================================
    # Low-Level API: Direct dt_util wrappers
    # =========================================================================

    def now(self) -> datetime:
        """
        Get current reference time in user's local timezone.

        Returns same value throughout the lifetime of this instance.
        """
        return self._reference_time

    def as_local(self, dt: datetime) -> datetime:
        """Convert datetime to user's local timezone."""
        return dt_util.as_local(dt)

    def as_utc(self, dt: datetime) -> datetime:
        """Convert datetime to UTC."""
        return dt_util.as_utc(dt)

    def parse_datetime(self, dt_str: str) -> datetime | None:
        """
        Parse ISO 8601 datetime string.

        Args:
            dt_str: ISO 8601 formatted string (e.g., "2025-01-15T13:00:00+00:00").

        Returns:
            Timezone-aware datetime in local time, or None if parsing fails.

        """
        parsed = dt_util.parse_datetime(dt_str)
        if parsed is None or parsed.tzinfo is None:
            return None
        return self.as_local(parsed)

    def start_of_local_day(self, dt: datetime | None = None) -> datetime:
        """Get midnight (00:00) of the given datetime in user's local timezone."""
        target = dt if dt is not None else self._reference_time
        return dt_util.start_of_local_day(target)

    # =========================================================================
    # High-Level API: Domain-Specific Methods
    # =========================================================================

    def get_local_date(self, dt: datetime | None = None) -> date:
        """Calendar date of dt (default: now) in user's local timezone."""
        target = dt if dt is not None else self._reference_time
        return self.as_local(target).date()

    def current_hour_start(self) -> datetime:
        """
        Start of the current local hour (anchor of all look-ahead windows).

        Returned in UTC: the two 02:00 hours of a DST fall-back night are
        different instants but equal as local wall-clock times.
        """
        return self.as_utc(self._reference_time.replace(minute=0, second=0, microsecond=0))

    def get_local_midnight(self, offset_days: int = 0) -> datetime:
        """
        Get midnight (00:00) for day at offset from reference date.

        Examples:
            offset_days=0  → today 00:00
            offset_days=1  → tomorrow 00:00

        """
        target_date = self._reference_time.date() + timedelta(days=offset_days)
        return dt_util.start_of_local_day(target_date)

    def next_refresh_time(self, refresh_hour: int) -> datetime:
        """
        Next occurrence of the daily refresh hour.

        Rolls over to tomorrow when today's refresh hour already passed
        (or is exactly now).
        """
        candidate = self.get_local_midnight().replace(hour=refresh_hour)
        if candidate <= self._reference_time:
            candidate = self.get_local_midnight(1).replace(hour=refresh_hour)
        return candidate

    def next_calendar_boundary(self, refresh_hour: int) -> datetime:
        """Earliest moment at which the cache can turn invalid by calendar rules."""
        return min(self.get_local_midnight(1), self.next_refresh_time(refresh_hour))

    def get_fetch_window(self, lookbehind: timedelta, lookahead_days: int) -> tuple[datetime, datetime]:
        """
        Time range requested from the pricing API.

        Returns:
            (current hour start - lookbehind, local midnight lookahead_days ahead)

        """
        return self.current_hour_start() - lookbehind, self.get_local_midnight(lookahead_days)

    # -------------------------------------------------------------------------
    # Time-Travel Support
    # -------------------------------------------------------------------------

    def with_reference_time(self, new_time: datetime) -> PstrykPricesTimeService:
        """Create new TimeService with different reference time."""
        return PstrykPricesTimeService(reference_time=new_time)
