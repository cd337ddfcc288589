"""Listener management and entity refresh timers for the coordinator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.core import CALLBACK_TYPE, callback
from homeassistant.helpers.event import async_track_utc_time_change

from .constants import USAGE_FLAG_REFRESH_SECONDS

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from .time_service import PstrykPricesTimeService

    # Callback type that accepts PstrykPricesTimeService parameter
    TimeServiceCallback = Callable[[PstrykPricesTimeService], None]

_LOGGER = logging.getLogger(__name__)


class PstrykPricesListenerManager:
    """Manages entity listeners and the hour / 30-second refresh timers."""

    def __init__(self, hass: HomeAssistant, log_prefix: str) -> None:
        """Initialize the listener manager."""
        self.hass = hass
        self._log_prefix = log_prefix

        self._time_sensitive_listeners: list[TimeServiceCallback] = []
        self._usage_flag_listeners: list[TimeServiceCallback] = []

        self._hour_timer_cancel: CALLBACK_TYPE | None = None
        self._usage_flag_timer_cancel: CALLBACK_TYPE | None = None

    def _log(self, level: str, message: str, *args: object, **kwargs: object) -> None:
        """Log with coordinator-specific prefix."""
        prefixed_message = f"{self._log_prefix} {message}"
        getattr(_LOGGER, level)(prefixed_message, *args, **kwargs)

    @staticmethod
    def _add_listener(
        listeners: list[TimeServiceCallback],
        update_callback: TimeServiceCallback,
    ) -> CALLBACK_TYPE:
        listeners.append(update_callback)

        @callback
        def remove_listener() -> None:
            """Remove update listener."""
            if update_callback in listeners:
                listeners.remove(update_callback)

        return remove_listener

    @callback
    def async_add_time_sensitive_listener(self, update_callback: TimeServiceCallback) -> CALLBACK_TYPE:
        """
        Listen for updates at every hour boundary.

        Entities whose value depends on the current hour (price, ranks,
        positions, periods) use this instead of async_add_listener.

        Returns:
            Callback that can be used to remove the listener

        """
        return self._add_listener(self._time_sensitive_listeners, update_callback)

    @callback
    def async_update_time_sensitive_listeners(self, time_service: PstrykPricesTimeService) -> None:
        """Update all hour-dependent entities without a full coordinator update."""
        for update_callback in list(self._time_sensitive_listeners):
            update_callback(time_service)

        self._log(
            "debug",
            "Updated %d time-sensitive entities at hour boundary",
            len(self._time_sensitive_listeners),
        )

    @callback
    def async_add_usage_flag_listener(self, update_callback: TimeServiceCallback) -> CALLBACK_TYPE:
        """
        Listen for the 30-second usage flag refresh.

        Returns:
            Callback that can be used to remove the listener

        """
        return self._add_listener(self._usage_flag_listeners, update_callback)

    @callback
    def async_update_usage_flag_listeners(self, time_service: PstrykPricesTimeService) -> None:
        """Update the usage flag entities."""
        for update_callback in list(self._usage_flag_listeners):
            update_callback(time_service)

    def schedule_hour_refresh(self, handler_callback: Callable[[datetime], None]) -> None:
        """Schedule entity refresh at every full hour."""
        if self._hour_timer_cancel:
            self._hour_timer_cancel()
            self._hour_timer_cancel = None

        self._hour_timer_cancel = async_track_utc_time_change(
            self.hass,
            handler_callback,
            minute=0,
            second=0,
        )
        self._log("debug", "Scheduled hourly refresh (minute=0, second=0)")

    def schedule_usage_flag_refresh(self, handler_callback: Callable[[datetime], None]) -> None:
        """Schedule 30-second refresh for the usage flag entities."""
        if self._usage_flag_timer_cancel:
            self._usage_flag_timer_cancel()
            self._usage_flag_timer_cancel = None

        self._usage_flag_timer_cancel = async_track_utc_time_change(
            self.hass,
            handler_callback,
            second=USAGE_FLAG_REFRESH_SECONDS,
        )
        self._log(
            "debug",
            "Scheduled usage flag refresh (second=%s)",
            USAGE_FLAG_REFRESH_SECONDS,
        )

    def cancel_timers(self) -> None:
        """Cancel all scheduled timers."""
        if self._hour_timer_cancel:
            self._hour_timer_cancel()
            self._hour_timer_cancel = None

        if self._usage_flag_timer_cancel:
            self._usage_flag_timer_cancel()
            self._usage_flag_timer_cancel = None
