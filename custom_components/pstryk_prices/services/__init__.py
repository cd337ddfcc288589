"""
Service handlers for PSTRYK Prices integration.

- refresh_prices: Manual price refresh (immediate with cooldown, or deferred)
- check_price_position: Position condition for the current hour

Architecture:
- helpers.py: Common utilities (get_loaded_coordinator)
- refresh_prices.py: Manual refresh handler
- check_price_position.py: Position condition handler

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from custom_components.pstryk_prices.const import DOMAIN
from homeassistant.core import SupportsResponse, callback

from .check_price_position import (
    CHECK_PRICE_POSITION_SERVICE_NAME,
    CHECK_PRICE_POSITION_SERVICE_SCHEMA,
    handle_check_price_position,
)
from .refresh_prices import (
    REFRESH_PRICES_SERVICE_NAME,
    REFRESH_PRICES_SERVICE_SCHEMA,
    handle_refresh_prices,
)

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

__all__ = [
    "SERVICE_NAMES",
    "async_setup_services",
]

SERVICE_NAMES = (
    REFRESH_PRICES_SERVICE_NAME,
    CHECK_PRICE_POSITION_SERVICE_NAME,
)


@callback
def async_setup_services(hass: HomeAssistant) -> None:
    """Set up services for PSTRYK Prices integration."""
    hass.services.async_register(
        DOMAIN,
        REFRESH_PRICES_SERVICE_NAME,
        handle_refresh_prices,
        schema=REFRESH_PRICES_SERVICE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        DOMAIN,
        CHECK_PRICE_POSITION_SERVICE_NAME,
        handle_check_price_position,
        schema=CHECK_PRICE_POSITION_SERVICE_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
