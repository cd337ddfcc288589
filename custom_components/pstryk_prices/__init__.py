"""
Custom integration to integrate PSTRYK hourly electricity prices with Home Assistant.

Provides the current price, legacy cheapest-hour ranks, tie-aware price
positions and cheap / expensive usage periods for use in automations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntryState
from homeassistant.const import CONF_API_KEY, Platform
from homeassistant.exceptions import ConfigEntryAuthFailed, ConfigEntryNotReady
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.loader import async_get_loaded_integration

from .api import PstrykPricesApiClient
from .const import DOMAIN, LOGGER
from .coordinator import PstrykPricesDataUpdateCoordinator
from .data import PstrykPricesData
from .services import SERVICE_NAMES, async_setup_services

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .data import PstrykPricesConfigEntry

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.BINARY_SENSOR,
]


# https://developers.home-assistant.io/docs/config_entries_index/#setting-up-an-entry
async def async_setup_entry(
    hass: HomeAssistant,
    entry: PstrykPricesConfigEntry,
) -> bool:
    """Set up this integration using UI."""
    LOGGER.debug("[%s] async_setup_entry called for entry_id=%s", entry.title, entry.entry_id)

    # Register services when a config entry is loaded
    async_setup_services(hass)

    integration = async_get_loaded_integration(hass, entry.domain)

    api_client = PstrykPricesApiClient(
        api_key=entry.data[CONF_API_KEY],
        session=async_get_clientsession(hass),
        version=str(integration.version) if integration.version else "unknown",
    )

    coordinator = PstrykPricesDataUpdateCoordinator(
        hass=hass,
        config_entry=entry,
        api_client=api_client,
    )

    entry.runtime_data = PstrykPricesData(
        client=api_client,
        integration=integration,
        coordinator=coordinator,
    )

    # https://developers.home-assistant.io/docs/integration_fetching_data#coordinated-single-api-poll-for-data-for-all-entities
    if entry.state == ConfigEntryState.SETUP_IN_PROGRESS:
        try:
            await coordinator.async_config_entry_first_refresh()
        except (ConfigEntryAuthFailed, ConfigEntryNotReady):
            # Setup is retried with a new coordinator, release this one's timers
            await coordinator.async_shutdown()
            raise
        entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    else:
        await coordinator.async_refresh()

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    return True


async def async_unload_entry(
    hass: HomeAssistant,
    entry: PstrykPricesConfigEntry,
) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok and entry.runtime_data is not None:
        await entry.runtime_data.coordinator.async_shutdown()

    # Unregister services if this was the last loaded config entry
    remaining = [
        other
        for other in hass.config_entries.async_entries(DOMAIN)
        if other.entry_id != entry.entry_id and other.state == ConfigEntryState.LOADED
    ]
    if not remaining:
        for service in SERVICE_NAMES:
            if hass.services.has_service(DOMAIN, service):
                hass.services.async_remove(DOMAIN, service)

    return unload_ok


async def async_reload_entry(
    hass: HomeAssistant,
    entry: PstrykPricesConfigEntry,
) -> None:
    """Reload config entry (options changed)."""
    await hass.config_entries.async_reload(entry.entry_id)
