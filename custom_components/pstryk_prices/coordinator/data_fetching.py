"""Data fetching logic for the coordinator."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from custom_components.pstryk_prices.api.exceptions import PstrykPricesApiClientError
from custom_components.pstryk_prices.const import (
    DATA_STATUS_ERROR,
    DATA_STATUS_FRESH,
    DATA_STATUS_REFRESHING,
    DATA_STATUS_STALE,
)
from homeassistant.core import callback

from .constants import (
    FETCH_LOOKAHEAD_DAYS,
    FETCH_LOOKBEHIND,
    MANUAL_REFRESH_COOLDOWN,
    STALE_GRACE_PERIOD,
)
from .exceptions import PstrykPricesRefreshCooldownError
from .helpers import calculate_daily_average, filter_valid_frames, parse_price_frame
from .types import CachedPriceData

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from custom_components.pstryk_prices.api import PstrykPricesApiClient

    from .cache import PstrykPricesPriceCache
    from .time_service import PstrykPricesTimeService

_LOGGER = logging.getLogger(__name__)


class PstrykPricesDataFetcher:
    """
    Decides when to refresh and performs the single consolidated fetch.

    All consumers read from the injected price cache; the fetcher is the only
    writer. Concurrent refresh triggers collapse into one upstream request.
    """

    def __init__(
        self,
        api: PstrykPricesApiClient,
        cache: PstrykPricesPriceCache,
        log_prefix: str,
        refresh_hour: int,
    ) -> None:
        """Initialize the data fetcher."""
        self.api = api
        self.cache = cache
        self._log_prefix = log_prefix
        self._refresh_hour = refresh_hour

        self._is_refreshing = False
        self._manual_refresh_requested = False
        self._last_manual_refresh: datetime | None = None
        self._status: str | None = None
        self._last_error: Exception | None = None
        self._status_listeners: list[Callable[[str], None]] = []

    def _log(self, level: str, message: str, *args: object, **kwargs: object) -> None:
        """Log with coordinator-specific prefix."""
        prefixed_message = f"{self._log_prefix} {message}"
        getattr(_LOGGER, level)(prefixed_message, *args, **kwargs)

    @property
    def is_refreshing(self) -> bool:
        """Return True while an upstream fetch is in flight."""
        return self._is_refreshing

    @property
    def manual_refresh_requested(self) -> bool:
        """Return True if a manual refresh is pending."""
        return self._manual_refresh_requested

    @property
    def status(self) -> str | None:
        """Last published data status."""
        return self._status

    @property
    def last_error(self) -> Exception | None:
        """Error of the most recent failed fetch, cleared by a fresh fetch."""
        return self._last_error

    @callback
    def async_add_status_listener(self, update_callback: Callable[[str], None]) -> Callable[[], None]:
        """
        Register a callback receiving every data status change.

        Returns:
            Callback that removes the listener.

        """
        self._status_listeners.append(update_callback)

        @callback
        def remove_listener() -> None:
            """Remove status listener."""
            if update_callback in self._status_listeners:
                self._status_listeners.remove(update_callback)

        return remove_listener

    def _notify_status(self, status: str) -> None:
        """Publish a data status to every listener."""
        self._status = status
        for update_callback in list(self._status_listeners):
            update_callback(status)

    def should_refresh(self, *, time: PstrykPricesTimeService) -> bool:
        """
        Determine if an upstream fetch is due.

        Returns False while a fetch is already running; otherwise True when the
        cache is invalid or a manual refresh was requested.
        """
        if self._is_refreshing:
            return False
        if self._manual_refresh_requested:
            self._log("debug", "Manual refresh requested")
            return True
        if not self.cache.is_valid(time=time):
            self._log("debug", "Cache invalid or expired, refresh required")
            return True
        return False

    async def fetch_fresh(self, *, time: PstrykPricesTimeService) -> CachedPriceData:
        """
        Fetch a complete snapshot with one upstream request.

        Returns:
            A fresh snapshot, or on failure the previous snapshot marked stale
            with a short grace expiry.

        Raises:
            PstrykPricesApiClientError: If the fetch failed and nothing was cached before.

        """
        now = time.now()
        window_start, window_end = time.get_fetch_window(FETCH_LOOKBEHIND, FETCH_LOOKAHEAD_DAYS)

        try:
            raw_frames, upstream_average = await self.api.async_get_price_frames(window_start, window_end)
            frames = filter_valid_frames(
                frame for raw in raw_frames if (frame := parse_price_frame(raw, time=time)) is not None
            )
            if not frames:
                raise PstrykPricesApiClientError(
                    PstrykPricesApiClientError.EMPTY_DATA_ERROR.format(
                        window_start=window_start.isoformat(),
                        window_end=window_end.isoformat(),
                    )
                )
        except PstrykPricesApiClientError as error:
            self._last_error = error
            previous = self.cache.last_snapshot()
            if previous is None:
                raise
            self._log(
                "warning",
                "Fetching prices failed, serving data from %s as stale until %s: %s",
                previous.fetched_at,
                now + STALE_GRACE_PERIOD,
                error,
            )
            return previous._replace(
                date=time.get_local_date(),
                expires_at=now + STALE_GRACE_PERIOD,
                is_stale=True,
            )

        today = time.get_local_date()
        self._last_error = None
        return CachedPriceData(
            frames=frames,
            daily_average=calculate_daily_average(frames, upstream_average, day=today, time=time),
            date=today,
            expires_at=time.next_refresh_time(self._refresh_hour),
            fetched_at=now,
            is_stale=False,
        )

    async def refresh_all(self, *, time: PstrykPricesTimeService) -> bool:
        """
        Refresh the cache and notify all status listeners.

        Returns:
            True if a fetch was performed, False if another one was already running.

        Raises:
            PstrykPricesApiClientError: If the fetch failed and no fallback exists.

        """
        if self._is_refreshing:
            self._log("debug", "Refresh already in progress, skipping")
            return False

        self._is_refreshing = True
        try:
            snapshot = await self.fetch_fresh(time=time)
        except PstrykPricesApiClientError as error:
            self._log("error", "Price refresh failed and no cached data is available: %s", error)
            self._notify_status(DATA_STATUS_ERROR)
            raise
        finally:
            self._is_refreshing = False

        if snapshot.is_stale:
            self.cache.install(snapshot)
        else:
            self.cache.update(
                snapshot.frames,
                snapshot.daily_average,
                snapshot.expires_at,
                snapshot.date,
                fetched_at=snapshot.fetched_at,
            )
            self._log(
                "info",
                "Fetched %d price frames, next refresh at %s",
                len(snapshot.frames),
                snapshot.expires_at,
            )

        self._manual_refresh_requested = False
        self._notify_status(DATA_STATUS_STALE if snapshot.is_stale else DATA_STATUS_FRESH)
        return True

    def request_manual_refresh(self) -> None:
        """Mark a refresh as required on the next check."""
        self._manual_refresh_requested = True

    async def request_manual_refresh_immediate(self, *, time: PstrykPricesTimeService) -> bool:
        """
        Refresh right now, subject to a cooldown.

        Raises:
            PstrykPricesRefreshCooldownError: If the previous immediate refresh was too recent.
            PstrykPricesApiClientError: If the fetch failed and no fallback exists.

        """
        now = time.now()
        if self._last_manual_refresh is not None:
            elapsed = now - self._last_manual_refresh
            if elapsed < MANUAL_REFRESH_COOLDOWN:
                remaining = math.ceil((MANUAL_REFRESH_COOLDOWN - elapsed).total_seconds())
                self._log("debug", "Immediate refresh rejected, cooldown active for %d more seconds", remaining)
                raise PstrykPricesRefreshCooldownError(remaining)

        self._last_manual_refresh = now
        self._manual_refresh_requested = True
        self._notify_status(DATA_STATUS_REFRESHING)
        return await self.refresh_all(time=time)
