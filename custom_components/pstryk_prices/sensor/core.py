"""Core sensor class for PSTRYK Prices integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from custom_components.pstryk_prices.const import (
    CHEAPEST_UPCOMING_HOURS,
    CONF_TODAY_LABEL,
    CONF_TOMORROW_LABEL,
    DEFAULT_TODAY_LABEL,
    DEFAULT_TOMORROW_LABEL,
    POSITION_HOUR_WINDOWS,
    RANK_HOUR_WINDOWS,
    USAGE_MAXIMISE,
    USAGE_MINIMISE,
)
from custom_components.pstryk_prices.coordinator import TIME_SENSITIVE_ENTITY_KEYS
from custom_components.pstryk_prices.entity import PstrykPricesEntity
from homeassistant.components.sensor import SensorEntity, SensorEntityDescription
from homeassistant.core import callback

from .helpers import format_usage_blocks

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from custom_components.pstryk_prices.coordinator import PstrykPricesDataUpdateCoordinator
    from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService

USAGE_PERIOD_KEYS = {
    "maximise_usage_periods": USAGE_MAXIMISE,
    "minimise_usage_periods": USAGE_MINIMISE,
}


class PstrykPricesSensor(PstrykPricesEntity, SensorEntity):
    """pstryk_prices Sensor class."""

    # Attributes excluded from recorder history
    # See: https://developers.home-assistant.io/docs/core/entity/#excluding-state-attributes-from-recorder-history
    _unrecorded_attributes = frozenset(
        {
            "periods",
            "last_update",
            "expires_at",
            "cache_date",
            "last_error",
            "next_check",
        }
    )

    def __init__(
        self,
        coordinator: PstrykPricesDataUpdateCoordinator,
        entity_description: SensorEntityDescription,
    ) -> None:
        """Initialize the sensor class."""
        super().__init__(coordinator)
        self.entity_description = entity_description
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_{entity_description.key}"
        self._value_getter: Callable | None = self._get_value_getter()
        self._time_sensitive_remove_listener: Callable | None = None
        self._status_remove_listener: Callable | None = None

    async def async_added_to_hass(self) -> None:
        """When entity is added to hass."""
        await super().async_added_to_hass()

        # Register with coordinator for hour-boundary updates if applicable
        if self.entity_description.key in TIME_SENSITIVE_ENTITY_KEYS:
            self._time_sensitive_remove_listener = self.coordinator.async_add_time_sensitive_listener(
                self._handle_time_sensitive_update
            )

        # The status sensor also follows "refreshing" / "error", which never
        # reach the coordinator data
        if self.entity_description.key == "data_status":
            self._status_remove_listener = self.coordinator.async_add_status_listener(self._handle_status_update)

    async def async_will_remove_from_hass(self) -> None:
        """When entity will be removed from hass."""
        await super().async_will_remove_from_hass()

        if self._time_sensitive_remove_listener:
            self._time_sensitive_remove_listener()
            self._time_sensitive_remove_listener = None

        if self._status_remove_listener:
            self._status_remove_listener()
            self._status_remove_listener = None

    @callback
    def _handle_time_sensitive_update(self, time_service: PstrykPricesTimeService) -> None:
        """
        Handle hour-boundary update from coordinator.

        Args:
            time_service: PstrykPricesTimeService instance with reference time for this update cycle

        """
        self.coordinator.time = time_service
        self.async_write_ha_state()

    @callback
    def _handle_status_update(self, _status: str) -> None:
        """Handle data status change from the fetcher."""
        self.async_write_ha_state()

    def _get_value_getter(self) -> Callable | None:
        """Return the appropriate value getter method based on the sensor type."""
        handlers: dict[str, Callable] = {
            "current_hour_price": self._get_current_price,
            "daily_average_price": self._get_daily_average,
            "maximise_usage_periods": lambda: self._get_usage_periods_text(USAGE_MAXIMISE),
            "minimise_usage_periods": lambda: self._get_usage_periods_text(USAGE_MINIMISE),
            "data_status": lambda: self.coordinator.data_status,
        }

        for hours in RANK_HOUR_WINDOWS:
            handlers[f"cheapest_hour_rank_{hours}h"] = lambda hours=hours: self.coordinator.ranking.cheapest_hour_rank(
                hours, time=self.coordinator.time
            )

        for hours in POSITION_HOUR_WINDOWS:
            handlers[f"price_position_{hours}h"] = lambda hours=hours: self.coordinator.ranking.tied_price_position(
                hours, time=self.coordinator.time
            )

        for index in range(1, CHEAPEST_UPCOMING_HOURS + 1):
            handlers[f"cheapest_hour_{index}"] = lambda index=index: self._get_cheapest_hour_start(index)

        return handlers.get(self.entity_description.key)

    # ========================================================================
    # VALUE METHODS
    # ========================================================================

    def _get_current_price(self) -> float | None:
        frame = self.coordinator.get_current_frame()
        return frame.price_gross if frame else None

    def _get_daily_average(self) -> float | None:
        snapshot = self.coordinator.get_snapshot()
        return snapshot.daily_average if snapshot else None

    def _get_cheapest_hour_start(self, index: int) -> datetime | None:
        """Start of the index-th cheapest hour within the next 24 hours (1-based)."""
        frames = self.coordinator.ranking.cheapest_upcoming(CHEAPEST_UPCOMING_HOURS, time=self.coordinator.time)
        if len(frames) < index:
            return None
        return frames[index - 1].start

    def _get_usage_periods_text(self, direction: str) -> str:
        options = self.coordinator.config_entry.options
        return format_usage_blocks(
            self.coordinator.get_usage_blocks(direction),
            time=self.coordinator.time,
            today_label=options.get(CONF_TODAY_LABEL, DEFAULT_TODAY_LABEL),
            tomorrow_label=options.get(CONF_TOMORROW_LABEL, DEFAULT_TOMORROW_LABEL),
        )

    # ========================================================================
    # STATE
    # ========================================================================

    @property
    def available(self) -> bool:
        """Data status is always available so errors before the first snapshot are visible."""
        if self.entity_description.key == "data_status":
            return True
        return super().available

    @property
    def native_value(self) -> float | str | datetime | None:
        """Return the native value of the sensor."""
        try:
            if not self._value_getter:
                return None
            if self.entity_description.key != "data_status" and not self.coordinator.data:
                return None
            return self._value_getter()
        except (KeyError, ValueError, TypeError) as ex:
            self.coordinator.logger.exception(
                "Error getting sensor value",
                extra={
                    "error": str(ex),
                    "entity": self.entity_description.key,
                },
            )
            return None

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return additional state attributes."""
        try:
            if self.entity_description.key != "data_status" and not self.coordinator.data:
                return None
            return self._get_sensor_attributes()
        except (KeyError, ValueError, TypeError) as ex:
            self.coordinator.logger.exception(
                "Error getting sensor attributes",
                extra={
                    "error": str(ex),
                    "entity": self.entity_description.key,
                },
            )
            return None

    def _get_sensor_attributes(self) -> dict[str, Any] | None:
        """Get attributes based on sensor type."""
        key = self.entity_description.key
        time = self.coordinator.time

        if key == "current_hour_price":
            frame = self.coordinator.get_current_frame()
            if frame is None:
                return None
            return {
                "start": time.as_local(frame.start).isoformat(),
                "end": time.as_local(frame.end).isoformat(),
                "is_cheap": frame.is_cheap,
                "is_expensive": frame.is_expensive,
            }

        if key.startswith("price_position_"):
            hours = int(key.removeprefix("price_position_").removesuffix("h"))
            cheapest = self.coordinator.ranking.exact_price_position(hours, time=time, cheapest_first=True)
            expensive = self.coordinator.ranking.exact_price_position(hours, time=time, cheapest_first=False)
            return {
                "exact_position_cheapest": cheapest[0] if cheapest else None,
                "exact_position_expensive": expensive[0] if expensive else None,
                "window_size": cheapest[1] if cheapest else 0,
            }

        if key.startswith("cheapest_hour_") and not key.startswith("cheapest_hour_rank_"):
            index = int(key.removeprefix("cheapest_hour_"))
            frames = self.coordinator.ranking.cheapest_upcoming(CHEAPEST_UPCOMING_HOURS, time=time)
            if len(frames) < index:
                return None
            return {"price": frames[index - 1].price_gross}

        if key in USAGE_PERIOD_KEYS:
            blocks = self.coordinator.get_usage_blocks(USAGE_PERIOD_KEYS[key])
            return {"periods": [block.to_dict() for block in blocks]}

        if key == "data_status":
            return self._get_data_status_attributes()

        return None

    def _get_data_status_attributes(self) -> dict[str, Any]:
        snapshot = self.coordinator.get_snapshot()
        error = self.coordinator.last_fetch_error
        next_check = self.coordinator.next_scheduled_check
        return {
            "last_update": snapshot.fetched_at.isoformat() if snapshot else None,
            "expires_at": snapshot.expires_at.isoformat() if snapshot else None,
            "cache_date": snapshot.date.isoformat() if snapshot else None,
            "frames": len(snapshot.frames) if snapshot else 0,
            "last_error": str(error) if error else None,
            "next_check": next_check.isoformat() if next_check else None,
        }
