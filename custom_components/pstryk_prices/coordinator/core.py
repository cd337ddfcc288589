"""Coordinator for PSTRYK hourly price data with a shared in-memory cache."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from custom_components.pstryk_prices.api.exceptions import PstrykPricesApiClientAuthenticationError
from custom_components.pstryk_prices.const import (
    CONF_PRICE_SIMILARITY_THRESHOLD,
    CONF_REFRESH_HOUR,
    DATA_STATUS_FRESH,
    DATA_STATUS_STALE,
    DEFAULT_PRICE_SIMILARITY_THRESHOLD,
    DEFAULT_REFRESH_HOUR,
    DOMAIN,
)
from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryAuthFailed
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .cache import PstrykPricesPriceCache
from .constants import UPDATE_INTERVAL
from .data_fetching import PstrykPricesDataFetcher
from .listeners import PstrykPricesListenerManager
from .periods import PstrykPricesPeriodCalculator
from .ranking import PstrykPricesRankingEngine
from .scheduler import PstrykPricesRefreshScheduler
from .time_service import PstrykPricesTimeService

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from custom_components.pstryk_prices.api import PstrykPricesApiClient
    from homeassistant.config_entries import ConfigEntry

    from .listeners import TimeServiceCallback
    from .types import CachedPriceData, PriceFrame, UsageBlock

_LOGGER = logging.getLogger(__name__)


# =============================================================================
# TIMER SYSTEM - four independent mechanisms, all cancelled on shutdown:
# =============================================================================
#
# Refresh scheduler (one cancellable handle)
#   - Fires at the next calendar boundary: local midnight or the daily refresh
#     hour, whichever comes first
#   - Runs the fetcher if a refresh is due, retries failures after 5/10/20 s
#
# DataUpdateCoordinator poll (every UPDATE_INTERVAL)
#   - Fallback for missed scheduler ticks; runs the same check
#   - Raises UpdateFailed only when no snapshot at all can be served
#
# Hour refresh (exact :00)
#   - Drops memoized positions, recalculates usage blocks, notifies
#     time-sensitive entities. Never fetches.
#
# Usage flag refresh (:00 and :30 of every minute)
#   - Notifies the "maximise/minimise usage now" entities
#
# Fresh data reaches entities through the fetcher's status listeners, so a
# refresh started by the scheduler or a service call updates every entity
# without waiting for the next poll.
# =============================================================================


class PstrykPricesDataUpdateCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Owns the price cache and wires fetcher, scheduler, ranking and periods to it."""

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        api_client: PstrykPricesApiClient,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=UPDATE_INTERVAL,
        )

        self.config_entry = config_entry
        self.api = api_client

        # Log prefix for identifying this coordinator instance
        self._log_prefix = f"[{config_entry.title}]"

        options = config_entry.options
        self._refresh_hour = int(options.get(CONF_REFRESH_HOUR, DEFAULT_REFRESH_HOUR))
        similarity_threshold = float(options.get(CONF_PRICE_SIMILARITY_THRESHOLD, DEFAULT_PRICE_SIMILARITY_THRESHOLD))

        # Single source of truth for all time operations in the current cycle
        self.time = PstrykPricesTimeService()

        # The cache is created here and injected into every consumer
        self.price_cache = PstrykPricesPriceCache(self._log_prefix)
        self._listener_manager = PstrykPricesListenerManager(hass, self._log_prefix)
        self._data_fetcher = PstrykPricesDataFetcher(
            api=self.api,
            cache=self.price_cache,
            log_prefix=self._log_prefix,
            refresh_hour=self._refresh_hour,
        )
        self._scheduler = PstrykPricesRefreshScheduler(
            hass,
            self._data_fetcher,
            self._log_prefix,
            self._refresh_hour,
        )
        self.ranking = PstrykPricesRankingEngine(self.price_cache)
        self._period_calculator = PstrykPricesPeriodCalculator(self._log_prefix, similarity_threshold)

        self._is_updating = False
        self._remove_status_listener = self._data_fetcher.async_add_status_listener(self._handle_status_change)

        # Start timers
        self._listener_manager.schedule_hour_refresh(self._handle_hour_refresh)
        self._listener_manager.schedule_usage_flag_refresh(self._handle_usage_flag_refresh)

    def _log(self, level: str, message: str, *args: Any, **kwargs: Any) -> None:
        """Log with coordinator-specific prefix."""
        prefixed_message = f"{self._log_prefix} {message}"
        getattr(_LOGGER, level)(prefixed_message, *args, **kwargs)

    # -------------------------------------------------------------------------
    # Listener registration
    # -------------------------------------------------------------------------

    @callback
    def async_add_time_sensitive_listener(self, update_callback: TimeServiceCallback) -> CALLBACK_TYPE:
        """Listen for updates at every hour boundary."""
        return self._listener_manager.async_add_time_sensitive_listener(update_callback)

    @callback
    def async_add_usage_flag_listener(self, update_callback: TimeServiceCallback) -> CALLBACK_TYPE:
        """Listen for the 30-second usage flag refresh."""
        return self._listener_manager.async_add_usage_flag_listener(update_callback)

    @callback
    def async_add_status_listener(self, update_callback: Callable[[str], None]) -> CALLBACK_TYPE:
        """Listen for data status changes (fresh, stale, refreshing, error)."""
        return self._data_fetcher.async_add_status_listener(update_callback)

    # -------------------------------------------------------------------------
    # Timer and status handlers
    # -------------------------------------------------------------------------

    @callback
    def _handle_hour_refresh(self, now: datetime | None = None) -> None:
        """
        Handle the hour boundary.

        Does NOT fetch new data; rankings and blocks are recomputed from the
        cached snapshot for the new hour.
        """
        time_service = self._timer_time_service(now)
        self.time = time_service
        self._log("debug", "Hour refresh triggered at %s", time_service.now().isoformat())

        self.ranking.invalidate()
        self._recalculate_periods(time_service)
        self._listener_manager.async_update_time_sensitive_listeners(time_service)

    @callback
    def _handle_usage_flag_refresh(self, now: datetime | None = None) -> None:
        """Handle the 30-second usage flag refresh."""
        self._listener_manager.async_update_usage_flag_listeners(self._timer_time_service(now))

    def _timer_time_service(self, fired_at: datetime | None) -> PstrykPricesTimeService:
        """Time context pinned to the moment a timer fired (real clock if unknown)."""
        if fired_at is None:
            return PstrykPricesTimeService()
        return self.time.with_reference_time(fired_at)

    @callback
    def _handle_status_change(self, status: str) -> None:
        """Push new data to entities when a refresh outside the poll completed."""
        if status not in (DATA_STATUS_FRESH, DATA_STATUS_STALE):
            return

        self.ranking.invalidate()
        if self._is_updating:
            # _async_update_data returns the new data itself
            return

        time_service = PstrykPricesTimeService()
        self.time = time_service
        self.async_set_updated_data(self._build_data(time_service))

    def _recalculate_periods(self, time_service: PstrykPricesTimeService) -> dict[str, list[UsageBlock]]:
        snapshot = self.price_cache.last_snapshot()
        if snapshot is None:
            return self._period_calculator.blocks
        return self._period_calculator.calculate(snapshot.frames, snapshot.generation, time=time_service)

    def _build_data(self, time_service: PstrykPricesTimeService) -> dict[str, Any]:
        snapshot = self.price_cache.last_snapshot()
        return {
            "snapshot": snapshot,
            "periods": self._recalculate_periods(time_service),
            "status": self._data_fetcher.status,
            "last_update": time_service.now(),
        }

    # -------------------------------------------------------------------------
    # DataUpdateCoordinator
    # -------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Run the refresh check (fallback poll) and return the current data."""
        self.time = PstrykPricesTimeService()
        self._log("debug", "Coordinator poll triggered")

        self._is_updating = True
        try:
            await self._scheduler.async_run(self.time)
        finally:
            self._is_updating = False

        if self.price_cache.last_snapshot() is None:
            error = self._data_fetcher.last_error
            if isinstance(error, PstrykPricesApiClientAuthenticationError):
                msg = "Invalid API key"
                raise ConfigEntryAuthFailed(msg) from error
            msg = f"Error communicating with API: {error}"
            raise UpdateFailed(msg) from error

        return self._build_data(self.time)

    async def async_shutdown(self) -> None:
        """Cancel every timer and drop the cache."""
        self._listener_manager.cancel_timers()
        self._scheduler.cancel()
        self._remove_status_listener()
        self.price_cache.clear()
        self._period_calculator.reset()
        await super().async_shutdown()

    # -------------------------------------------------------------------------
    # Manual refresh
    # -------------------------------------------------------------------------

    async def async_request_price_refresh(self, *, immediate: bool) -> bool:
        """
        Refresh prices on user request.

        Args:
            immediate: Fetch now (subject to cooldown) instead of at the next check.

        Returns:
            True if a fetch was performed.

        Raises:
            PstrykPricesRefreshCooldownError: Immediate refresh requested too soon.
            PstrykPricesApiClientError: Fetch failed without a cached fallback.

        """
        if not immediate:
            self._data_fetcher.request_manual_refresh()
            await self.async_request_refresh()
            return False

        time_service = PstrykPricesTimeService()
        self.time = time_service
        return await self._data_fetcher.request_manual_refresh_immediate(time=time_service)

    # -------------------------------------------------------------------------
    # Accessors used by entities and services
    # -------------------------------------------------------------------------

    @property
    def data_status(self) -> str | None:
        """Last published data status."""
        return self._data_fetcher.status

    @property
    def last_fetch_error(self) -> Exception | None:
        """Error of the most recent failed fetch."""
        return self._data_fetcher.last_error

    @property
    def next_scheduled_check(self) -> datetime | None:
        """Next calendar boundary the scheduler is armed for."""
        return self._scheduler.next_fire

    def get_snapshot(self) -> CachedPriceData | None:
        """Most recent cache snapshot (may be stale)."""
        return self.price_cache.last_snapshot()

    def get_current_frame(self) -> PriceFrame | None:
        """Frame covering the coordinator's current time."""
        return self.ranking.current_frame(time=self.time)

    def get_usage_blocks(self, direction: str) -> list[UsageBlock]:
        """Current usage blocks for a direction."""
        return self._period_calculator.get_blocks(direction)

    def is_usage_active(self, direction: str, time_service: PstrykPricesTimeService | None = None) -> bool:
        """Check whether now lies inside a usage block of the direction."""
        return self._period_calculator.is_usage_active(direction, time=time_service or self.time)
