"""Custom types for pstryk_prices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.loader import Integration

    from .api import PstrykPricesApiClient
    from .coordinator import PstrykPricesDataUpdateCoordinator


@dataclass
class PstrykPricesData:
    """Data for the pstryk_prices integration."""

    client: PstrykPricesApiClient
    coordinator: PstrykPricesDataUpdateCoordinator
    integration: Integration


if TYPE_CHECKING:
    type PstrykPricesConfigEntry = ConfigEntry[PstrykPricesData]
