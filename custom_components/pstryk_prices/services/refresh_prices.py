"""
Price refresh service handler.

Implements the `refresh_prices` service, the manual refresh action. An
immediate refresh fetches right away and is rate limited by a cooldown;
otherwise the refresh is flagged and picked up by the next coordinator check.

Service: pstryk_prices.refresh_prices
Response: JSON with refresh status

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

import voluptuous as vol

from custom_components.pstryk_prices.api.exceptions import PstrykPricesApiClientError
from custom_components.pstryk_prices.const import DOMAIN
from custom_components.pstryk_prices.coordinator.exceptions import PstrykPricesRefreshCooldownError
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from .helpers import get_loaded_coordinator

if TYPE_CHECKING:
    from homeassistant.core import ServiceCall

_LOGGER = logging.getLogger(__name__)

# Service constants
REFRESH_PRICES_SERVICE_NAME: Final = "refresh_prices"
ATTR_ENTRY_ID: Final = "entry_id"
ATTR_IMMEDIATE: Final = "immediate"

# Service schema
REFRESH_PRICES_SERVICE_SCHEMA: Final = vol.Schema(
    {
        vol.Required(ATTR_ENTRY_ID): cv.string,
        vol.Optional(ATTR_IMMEDIATE, default=True): cv.boolean,
    }
)


async def handle_refresh_prices(call: ServiceCall) -> dict[str, Any]:
    """
    Refresh prices for a specific config entry.

    See services.yaml for detailed parameter documentation.

    Returns:
        Dictionary with refresh status and the resulting data status

    Raises:
        ServiceValidationError: If entry_id is invalid or the cooldown is active
        HomeAssistantError: If the fetch failed and no cached prices exist

    """
    entry_id: str = call.data[ATTR_ENTRY_ID]
    immediate: bool = call.data.get(ATTR_IMMEDIATE, True)

    coordinator = get_loaded_coordinator(call.hass, entry_id)

    try:
        refreshed = await coordinator.async_request_price_refresh(immediate=immediate)
    except PstrykPricesRefreshCooldownError as err:
        raise ServiceValidationError(
            translation_domain=DOMAIN,
            translation_key="refresh_cooldown",
            translation_placeholders={"seconds": str(err.retry_in_seconds)},
        ) from err
    except PstrykPricesApiClientError as err:
        _LOGGER.warning("Manual price refresh for %s failed: %s", entry_id, err)
        raise HomeAssistantError(
            translation_domain=DOMAIN,
            translation_key="refresh_failed",
            translation_placeholders={"error": str(err)},
        ) from err

    snapshot = coordinator.get_snapshot()
    return {
        "refreshed": refreshed,
        "immediate": immediate,
        "status": coordinator.data_status,
        "frames": len(snapshot.frames) if snapshot else 0,
        "fetched_at": snapshot.fetched_at.isoformat() if snapshot else None,
    }
