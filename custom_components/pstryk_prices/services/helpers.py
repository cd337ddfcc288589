"""Shared utilities for service handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from custom_components.pstryk_prices.const import DOMAIN
from homeassistant.exceptions import ServiceValidationError

if TYPE_CHECKING:
    from custom_components.pstryk_prices.coordinator import PstrykPricesDataUpdateCoordinator
    from homeassistant.core import HomeAssistant


def get_loaded_coordinator(hass: HomeAssistant, entry_id: str) -> PstrykPricesDataUpdateCoordinator:
    """
    Resolve the coordinator of a loaded PSTRYK Prices entry.

    Raises:
        ServiceValidationError: If entry_id is empty, unknown, or the entry is not loaded

    """
    if not entry_id:
        raise ServiceValidationError(translation_domain=DOMAIN, translation_key="missing_entry_id")

    runtime_data = next(
        (
            getattr(entry, "runtime_data", None)
            for entry in hass.config_entries.async_entries(DOMAIN)
            if entry.entry_id == entry_id
        ),
        None,
    )
    if runtime_data is None:
        raise ServiceValidationError(translation_domain=DOMAIN, translation_key="invalid_entry_id")
    return runtime_data.coordinator
