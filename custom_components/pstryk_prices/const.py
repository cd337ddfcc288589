"""Constants for the PSTRYK Prices integration."""

import logging

DOMAIN = "pstryk_prices"
LOGGER = logging.getLogger(__package__)

ATTRIBUTION = "Data provided by PSTRYK"

# Integration name should match manifest.json
DEFAULT_NAME = "PSTRYK Prices"
MANUFACTURER = "PSTRYK"

API_BASE_URL = "https://api.pstryk.pl/integrations/pricing/"
API_RESOLUTION = "hour"

CONF_REFRESH_HOUR = "refresh_hour"
CONF_PRICE_SIMILARITY_THRESHOLD = "price_similarity_threshold"
CONF_TODAY_LABEL = "today_label"
CONF_TOMORROW_LABEL = "tomorrow_label"

# Hour of day (local time) when the day-ahead prices are re-fetched.
# Upstream publishes tomorrow's prices in the early afternoon.
DEFAULT_REFRESH_HOUR = 15
# Max percent difference between adjacent hours that still counts as "similar"
# when building usage periods
DEFAULT_PRICE_SIMILARITY_THRESHOLD = 10
DEFAULT_TODAY_LABEL = "Today"
DEFAULT_TOMORROW_LABEL = "Tomorrow"

MIN_REFRESH_HOUR = 0
MAX_REFRESH_HOUR = 23
MIN_PRICE_SIMILARITY_THRESHOLD = 1
MAX_PRICE_SIMILARITY_THRESHOLD = 50

PRICE_UNIT = "PLN/kWh"

# Look-ahead windows (hours) for the legacy cheapest-hour rank sensors
RANK_HOUR_WINDOWS = (4, 8, 12, 24, 36)
# Look-ahead windows (hours) supported by the price position sensors and service
POSITION_HOUR_WINDOWS = (4, 8, 12, 16, 24, 36, 48)
# Windows whose position sensors are created disabled
POSITION_HOUR_WINDOWS_DISABLED_BY_DEFAULT = frozenset({16, 48})

# Number of cheapest upcoming hours exposed as timestamp sensors
CHEAPEST_UPCOMING_HOURS = 3

DIRECTION_CHEAPEST = "cheapest"
DIRECTION_MOST_EXPENSIVE = "most_expensive"
DIRECTIONS = [DIRECTION_CHEAPEST, DIRECTION_MOST_EXPENSIVE]

# Comparison operators accepted by position conditions
OPERATOR_LESS_THAN = "lt"
OPERATOR_LESS_OR_EQUAL = "lte"
OPERATOR_EQUAL = "eq"
OPERATOR_GREATER_OR_EQUAL = "gte"
OPERATOR_GREATER_THAN = "gt"
OPERATOR_NOT_EQUAL = "ne"
OPERATORS = [
    OPERATOR_LESS_THAN,
    OPERATOR_LESS_OR_EQUAL,
    OPERATOR_EQUAL,
    OPERATOR_GREATER_OR_EQUAL,
    OPERATOR_GREATER_THAN,
    OPERATOR_NOT_EQUAL,
]

# Data status values published to the status listeners and the data_status sensor
DATA_STATUS_FRESH = "fresh"
DATA_STATUS_STALE = "stale"
DATA_STATUS_REFRESHING = "refreshing"
DATA_STATUS_ERROR = "error"
DATA_STATUS_OPTIONS = [
    DATA_STATUS_FRESH,
    DATA_STATUS_STALE,
    DATA_STATUS_REFRESHING,
    DATA_STATUS_ERROR,
]

# Text shown by the period sensors when no block is known
NO_PERIODS_TEXT = "-"

# Usage period directions: cheap blocks maximise usage, expensive blocks minimise it
USAGE_MAXIMISE = "maximise"
USAGE_MINIMISE = "minimise"
USAGE_DIRECTIONS = [USAGE_MAXIMISE, USAGE_MINIMISE]


def get_default_options() -> dict[str, int | str]:
    """Return the option values used when an entry has no options yet."""
    return {
        CONF_REFRESH_HOUR: DEFAULT_REFRESH_HOUR,
        CONF_PRICE_SIMILARITY_THRESHOLD: DEFAULT_PRICE_SIMILARITY_THRESHOLD,
        CONF_TODAY_LABEL: DEFAULT_TODAY_LABEL,
        CONF_TOMORROW_LABEL: DEFAULT_TOMORROW_LABEL,
    }
