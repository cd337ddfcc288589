"""Binary sensor entity descriptions for pstryk_prices."""

from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorEntityDescription

ENTITY_DESCRIPTIONS = (
    BinarySensorEntityDescription(
        key="maximise_usage_now",
        translation_key="maximise_usage_now",
        name="Maximise Usage Now",
        icon="mdi:clock-check",
    ),
    BinarySensorEntityDescription(
        key="minimise_usage_now",
        translation_key="minimise_usage_now",
        name="Minimise Usage Now",
        icon="mdi:clock-alert",
    ),
    BinarySensorEntityDescription(
        key="currently_cheap",
        translation_key="currently_cheap",
        name="Currently Cheap",
        icon="mdi:cash-check",
    ),
    BinarySensorEntityDescription(
        key="currently_expensive",
        translation_key="currently_expensive",
        name="Currently Expensive",
        icon="mdi:cash-remove",
    ),
)
