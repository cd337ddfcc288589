"""Binary sensor core class for pstryk_prices."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from custom_components.pstryk_prices.const import USAGE_MAXIMISE, USAGE_MINIMISE
from custom_components.pstryk_prices.coordinator import (
    TIME_SENSITIVE_ENTITY_KEYS,
    USAGE_FLAG_ENTITY_KEYS,
)
from custom_components.pstryk_prices.entity import PstrykPricesEntity
from homeassistant.components.binary_sensor import (
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.core import callback
from homeassistant.helpers.restore_state import RestoreEntity

if TYPE_CHECKING:
    from collections.abc import Callable

    from custom_components.pstryk_prices.coordinator import PstrykPricesDataUpdateCoordinator
    from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService

USAGE_FLAG_DIRECTIONS = {
    "maximise_usage_now": USAGE_MAXIMISE,
    "minimise_usage_now": USAGE_MINIMISE,
}


class PstrykPricesBinarySensor(PstrykPricesEntity, BinarySensorEntity, RestoreEntity):
    """pstryk_prices binary_sensor class with state restoration."""

    # Attributes excluded from recorder history
    # See: https://developers.home-assistant.io/docs/core/entity/#excluding-state-attributes-from-recorder-history
    _unrecorded_attributes = frozenset({"periods", "start", "end"})

    def __init__(
        self,
        coordinator: PstrykPricesDataUpdateCoordinator,
        entity_description: BinarySensorEntityDescription,
    ) -> None:
        """Initialize the binary_sensor class."""
        super().__init__(coordinator)
        self.entity_description = entity_description
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_{entity_description.key}"
        self._state_getter: Callable | None = self._get_value_getter()
        self._time_sensitive_remove_listener: Callable | None = None
        self._usage_flag_remove_listener: Callable | None = None

    async def async_added_to_hass(self) -> None:
        """When entity is added to hass."""
        await super().async_added_to_hass()

        # Restore last state if available
        if (last_state := await self.async_get_last_state()) is not None and last_state.state in ("on", "off"):
            # Used until the first coordinator update
            self._attr_is_on = last_state.state == "on"

        if self.entity_description.key in TIME_SENSITIVE_ENTITY_KEYS:
            self._time_sensitive_remove_listener = self.coordinator.async_add_time_sensitive_listener(
                self._handle_time_sensitive_update
            )

        if self.entity_description.key in USAGE_FLAG_ENTITY_KEYS:
            self._usage_flag_remove_listener = self.coordinator.async_add_usage_flag_listener(
                self._handle_time_sensitive_update
            )

    async def async_will_remove_from_hass(self) -> None:
        """When entity will be removed from hass."""
        await super().async_will_remove_from_hass()

        if self._time_sensitive_remove_listener:
            self._time_sensitive_remove_listener()
            self._time_sensitive_remove_listener = None

        if self._usage_flag_remove_listener:
            self._usage_flag_remove_listener()
            self._usage_flag_remove_listener = None

    @callback
    def _handle_time_sensitive_update(self, time_service: PstrykPricesTimeService) -> None:
        """
        Handle timer update from coordinator (hour boundary or usage flag tick).

        Args:
            time_service: PstrykPricesTimeService instance with reference time for this update cycle

        """
        self.coordinator.time = time_service
        self.async_write_ha_state()

    def _get_value_getter(self) -> Callable | None:
        """Return the appropriate value getter method based on the sensor type."""
        key = self.entity_description.key

        state_getters = {
            "maximise_usage_now": lambda: self.coordinator.is_usage_active(USAGE_MAXIMISE),
            "minimise_usage_now": lambda: self.coordinator.is_usage_active(USAGE_MINIMISE),
            "currently_cheap": self._currently_cheap_state,
            "currently_expensive": self._currently_expensive_state,
        }

        return state_getters.get(key)

    def _currently_cheap_state(self) -> bool | None:
        """Return the upstream is_cheap flag of the current hour."""
        frame = self.coordinator.get_current_frame()
        return frame.is_cheap if frame else None

    def _currently_expensive_state(self) -> bool | None:
        """Return the upstream is_expensive flag of the current hour."""
        frame = self.coordinator.get_current_frame()
        return frame.is_expensive if frame else None

    @property
    def is_on(self) -> bool | None:
        """Return true if the binary_sensor is on."""
        try:
            if not self.coordinator.data or not self._state_getter:
                return None

            return self._state_getter()

        except (KeyError, ValueError, TypeError) as ex:
            self.coordinator.logger.exception(
                "Error getting binary sensor state",
                extra={
                    "error": str(ex),
                    "entity": self.entity_description.key,
                },
            )
            return None

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return the block currently running (usage flags) or the current frame (upstream flags)."""
        try:
            if not self.coordinator.data:
                return None

            key = self.entity_description.key
            time = self.coordinator.time

            if key in USAGE_FLAG_DIRECTIONS:
                blocks = self.coordinator.get_usage_blocks(USAGE_FLAG_DIRECTIONS[key])
                now = time.now()
                active = next((block for block in blocks if block.start_time <= now <= block.end_time), None)
                upcoming = next((block for block in blocks if block.start_time > now), None)
                return {
                    "start": time.as_local(active.start_time).isoformat() if active else None,
                    "end": time.as_local(active.end_time).isoformat() if active else None,
                    "next_start": time.as_local(upcoming.start_time).isoformat() if upcoming else None,
                    "periods": [block.to_dict() for block in blocks],
                }

            frame = self.coordinator.get_current_frame()
            if frame is None:
                return None
            return {
                "start": time.as_local(frame.start).isoformat(),
                "end": time.as_local(frame.end).isoformat(),
                "price": frame.price_gross,
            }

        except (KeyError, ValueError, TypeError) as ex:
            self.coordinator.logger.exception(
                "Error getting binary sensor attributes",
                extra={
                    "error": str(ex),
                    "entity": self.entity_description.key,
                },
            )
            return None
