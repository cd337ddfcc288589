"""
Sensor entity definitions for PSTRYK Prices.

Definitions are declarative and grouped by how the value is produced:
    1. Current hour: price of the frame covering now, daily average
    2. Ranking: legacy cheapest-hour rank and tie-aware price position per window
    3. Cheapest upcoming hours: start timestamps of the cheapest hours ahead
    4. Usage periods: formatted maximise / minimise blocks
    5. Diagnostic: data status
"""

from __future__ import annotations

from custom_components.pstryk_prices.const import (
    CHEAPEST_UPCOMING_HOURS,
    POSITION_HOUR_WINDOWS,
    POSITION_HOUR_WINDOWS_DISABLED_BY_DEFAULT,
    PRICE_UNIT,
    RANK_HOUR_WINDOWS,
)
from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import EntityCategory

# ----------------------------------------------------------------------------
# 1. CURRENT HOUR SENSORS
# ----------------------------------------------------------------------------

CURRENT_PRICE_SENSORS = (
    SensorEntityDescription(
        key="current_hour_price",
        translation_key="current_hour_price",
        name="Current Electricity Price",
        icon="mdi:cash",
        device_class=SensorDeviceClass.MONETARY,
        state_class=SensorStateClass.TOTAL,  # MONETARY requires TOTAL or None
        native_unit_of_measurement=PRICE_UNIT,
        suggested_display_precision=4,
    ),
    SensorEntityDescription(
        key="daily_average_price",
        translation_key="daily_average_price",
        name="Average Price Today",
        icon="mdi:chart-line",
        device_class=SensorDeviceClass.MONETARY,
        state_class=SensorStateClass.TOTAL,
        native_unit_of_measurement=PRICE_UNIT,
        suggested_display_precision=4,
    ),
)

# ----------------------------------------------------------------------------
# 2. RANKING SENSORS (one per look-ahead window)
# ----------------------------------------------------------------------------

CHEAPEST_HOUR_RANK_SENSORS = tuple(
    SensorEntityDescription(
        key=f"cheapest_hour_rank_{hours}h",
        translation_key=f"cheapest_hour_rank_{hours}h",
        name=f"Cheapest Hour Rank ({hours}h)",
        icon="mdi:podium",
        state_class=SensorStateClass.MEASUREMENT,
    )
    for hours in RANK_HOUR_WINDOWS
)

PRICE_POSITION_SENSORS = tuple(
    SensorEntityDescription(
        key=f"price_position_{hours}h",
        translation_key=f"price_position_{hours}h",
        name=f"Price Position ({hours}h)",
        icon="mdi:sort-numeric-ascending",
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=1,
        entity_registry_enabled_default=hours not in POSITION_HOUR_WINDOWS_DISABLED_BY_DEFAULT,
    )
    for hours in POSITION_HOUR_WINDOWS
)

# ----------------------------------------------------------------------------
# 3. CHEAPEST UPCOMING HOURS
# ----------------------------------------------------------------------------

CHEAPEST_HOUR_SENSORS = tuple(
    SensorEntityDescription(
        key=f"cheapest_hour_{index}",
        translation_key=f"cheapest_hour_{index}",
        name=f"Cheapest Hour #{index}",
        icon="mdi:clock-star-four-points",
        device_class=SensorDeviceClass.TIMESTAMP,
    )
    for index in range(1, CHEAPEST_UPCOMING_HOURS + 1)
)

# ----------------------------------------------------------------------------
# 4. USAGE PERIOD SENSORS
# ----------------------------------------------------------------------------

USAGE_PERIOD_SENSORS = (
    SensorEntityDescription(
        key="maximise_usage_periods",
        translation_key="maximise_usage_periods",
        name="Maximise Usage Periods",
        icon="mdi:clock-check",
    ),
    SensorEntityDescription(
        key="minimise_usage_periods",
        translation_key="minimise_usage_periods",
        name="Minimise Usage Periods",
        icon="mdi:clock-alert",
    ),
)

# ----------------------------------------------------------------------------
# 5. DIAGNOSTIC SENSORS
# ----------------------------------------------------------------------------

# NOTE: Enum options are defined inline (not imported from const.py) to avoid
# import timing issues with Home Assistant's entity platform initialization.
# Keep in sync with DATA_STATUS_OPTIONS in const.py!
DIAGNOSTIC_SENSORS = (
    SensorEntityDescription(
        key="data_status",
        translation_key="data_status",
        name="Data Status",
        icon="mdi:database-check",
        device_class=SensorDeviceClass.ENUM,
        options=["fresh", "stale", "refreshing", "error"],
        entity_category=EntityCategory.DIAGNOSTIC,
    ),
)

ENTITY_DESCRIPTIONS = (
    *CURRENT_PRICE_SENSORS,
    *CHEAPEST_HOUR_RANK_SENSORS,
    *PRICE_POSITION_SENSORS,
    *CHEAPEST_HOUR_SENSORS,
    *USAGE_PERIOD_SENSORS,
    *DIAGNOSTIC_SENSORS,
)
