"""Calendar-aware refresh scheduling with retry backoff."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from custom_components.pstryk_prices.api.exceptions import PstrykPricesApiClientError
from homeassistant.core import CALLBACK_TYPE, callback
from homeassistant.helpers.event import async_call_later, async_track_point_in_time

from .constants import REFRESH_RETRY_DELAYS
from .time_service import PstrykPricesTimeService

if TYPE_CHECKING:
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from .data_fetching import PstrykPricesDataFetcher

_LOGGER = logging.getLogger(__name__)


class PstrykPricesRefreshScheduler:
    """
    Drives the data fetcher from one cancellable timer handle.

    After every firing the handle is re-armed for the next calendar boundary
    (local midnight or the daily refresh hour, whichever comes first). A failed
    refresh re-arms the same handle with the next retry delay instead; once the
    retries are used up the scheduler waits for the next boundary.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        fetcher: PstrykPricesDataFetcher,
        log_prefix: str,
        refresh_hour: int,
    ) -> None:
        """Initialize the refresh scheduler."""
        self.hass = hass
        self._fetcher = fetcher
        self._log_prefix = log_prefix
        self._refresh_hour = refresh_hour

        self._cancel_handle: CALLBACK_TYPE | None = None
        self._retry_attempt = 0
        self._next_fire: datetime | None = None

    def _log(self, level: str, message: str, *args: object, **kwargs: object) -> None:
        """Log with coordinator-specific prefix."""
        prefixed_message = f"{self._log_prefix} {message}"
        getattr(_LOGGER, level)(prefixed_message, *args, **kwargs)

    @property
    def next_fire(self) -> datetime | None:
        """When the handle fires next (None for retries and when cancelled)."""
        return self._next_fire

    @property
    def retry_attempt(self) -> int:
        """Number of retries already scheduled since the last success."""
        return self._retry_attempt

    def _replace_handle(self, cancel_handle: CALLBACK_TYPE) -> None:
        if self._cancel_handle is not None:
            self._cancel_handle()
        self._cancel_handle = cancel_handle

    def schedule_next_boundary(self, time: PstrykPricesTimeService) -> datetime:
        """Arm the handle for the next calendar boundary."""
        fire_at = time.next_calendar_boundary(self._refresh_hour)
        self._replace_handle(async_track_point_in_time(self.hass, self._handle_tick, fire_at))
        self._next_fire = fire_at
        self._log("debug", "Next scheduled refresh check at %s", fire_at)
        return fire_at

    def _schedule_retry(self) -> int:
        delay = REFRESH_RETRY_DELAYS[self._retry_attempt]
        self._retry_attempt += 1
        self._replace_handle(async_call_later(self.hass, delay, self._handle_tick))
        self._next_fire = None
        return delay

    @callback
    def _handle_tick(self, _now: datetime) -> None:
        """Timer callback; the handle is spent once it fires."""
        self._cancel_handle = None
        self.hass.async_create_task(self.async_run())

    async def async_run(self, time: PstrykPricesTimeService | None = None) -> None:
        """Refresh if due, then re-arm the handle (retry delay or next boundary)."""
        time = time or PstrykPricesTimeService()

        try:
            if self._fetcher.should_refresh(time=time):
                await self._fetcher.refresh_all(time=time)
        except PstrykPricesApiClientError as error:
            if self._retry_attempt < len(REFRESH_RETRY_DELAYS):
                delay = self._schedule_retry()
                self._log(
                    "warning",
                    "Price refresh failed (attempt %d/%d), retrying in %d seconds: %s",
                    self._retry_attempt,
                    len(REFRESH_RETRY_DELAYS),
                    delay,
                    error,
                )
                return

            self._log(
                "error",
                "Price refresh failed after %d retries, waiting for next scheduled check: %s",
                len(REFRESH_RETRY_DELAYS),
                error,
            )

        self._retry_attempt = 0
        self.schedule_next_boundary(time)

    @callback
    def cancel(self) -> None:
        """Release the timer handle."""
        if self._cancel_handle is not None:
            self._cancel_handle()
            self._cancel_handle = None
        self._next_fire = None
        self._retry_attempt = 0
