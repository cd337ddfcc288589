"""
Binary sensor platform for PSTRYK Prices integration.

Provides binary (on/off) sensors for price-based automation:
- Usage periods: now inside a cheap (maximise) or expensive (minimise) block
- Upstream flags: the current hour is marked cheap or expensive by PSTRYK

These sensors enable simple automations like "run the dishwasher while
maximise usage is on" without template logic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .core import PstrykPricesBinarySensor
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
    """Set up PSTRYK Prices binary sensor based on a config entry."""
    async_add_entities(
        PstrykPricesBinarySensor(
            coordinator=entry.runtime_data.coordinator,
            entity_description=entity_description,
        )
        for entity_description in ENTITY_DESCRIPTIONS
    )
