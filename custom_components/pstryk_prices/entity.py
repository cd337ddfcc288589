"""PstrykPricesEntity class."""

from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import ATTRIBUTION, DEFAULT_NAME, DOMAIN, MANUFACTURER
from .coordinator import PstrykPricesDataUpdateCoordinator


class PstrykPricesEntity(CoordinatorEntity[PstrykPricesDataUpdateCoordinator]):
    """PstrykPricesEntity class."""

    _attr_has_entity_name = True
    _attr_attribution = ATTRIBUTION

    def __init__(self, coordinator: PstrykPricesDataUpdateCoordinator) -> None:
        """Initialize."""
        super().__init__(coordinator)

        self._attr_device_info = DeviceInfo(
            entry_type=DeviceEntryType.SERVICE,
            identifiers={
                (
                    DOMAIN,
                    coordinator.config_entry.unique_id or coordinator.config_entry.entry_id,
                )
            },
            name=coordinator.config_entry.title or DEFAULT_NAME,
            manufacturer=MANUFACTURER,
            model="Hourly electricity prices",
            configuration_url="https://pstryk.pl",
        )

    @property
    def available(self) -> bool:
        """
        Return if entity is available.

        Entity is unavailable until a price snapshot exists. A failed refresh
        with a cached (stale) snapshot keeps entities available.
        """
        return self.coordinator.get_snapshot() is not None and bool(self.coordinator.data)
