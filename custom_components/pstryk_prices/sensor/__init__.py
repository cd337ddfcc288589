"""
Sensor platform for PSTRYK Prices integration.

Provides hourly electricity price sensors:
- Current hour: price of the running hour and today's average
- Ranking: legacy cheapest-hour rank and tie-aware price position per window
- Cheapest upcoming hours: when the three cheapest hours of the next day start
- Usage periods: cheap blocks to maximise and expensive blocks to minimise usage
- Diagnostic: freshness of the cached prices

See definitions.py for complete sensor catalog.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .core import PstrykPricesSensor
from .definitions import ENTITY_DESCRIPTIONS

if TYPE_CHECKING:
    from custom_components.pstryk_prices.data import PstrykPricesConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: PstrykPricesConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up PSTRYK Prices sensor based on a config entry."""
    async_add_entities(
        PstrykPricesSensor(
            coordinator=entry.runtime_data.coordinator,
            entity_description=entity_description,
        )
        for entity_description in ENTITY_DESCRIPTIONS
    )
