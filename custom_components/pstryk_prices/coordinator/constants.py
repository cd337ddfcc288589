"""Constants for coordinator module."""

from datetime import timedelta

# Fallback poll of the DataUpdateCoordinator.
# It only checks whether a refresh is due; API calls happen when:
# - The cache is empty or dated for another day
# - The cache expired (daily refresh hour passed, or stale grace ended)
# - A manual refresh was requested
UPDATE_INTERVAL = timedelta(minutes=15)

# Fetch window relative to the current hour
FETCH_LOOKBEHIND = timedelta(hours=2)
FETCH_LOOKAHEAD_DAYS = 2

# Grace window for serving stale data after a failed fetch
STALE_GRACE_PERIOD = timedelta(hours=2)

# Minimum time between two immediate manual refreshes
MANUAL_REFRESH_COOLDOWN = timedelta(minutes=5)

# Scheduler retry delays (seconds) after a failed refresh
REFRESH_RETRY_DELAYS = (5, 10, 20)

# Price position results are reused for this long per window
POSITION_CACHE_TTL = timedelta(minutes=5)

# Usage flags ("maximise/minimise usage now") are re-evaluated at most this often
USAGE_FLAG_THROTTLE = timedelta(seconds=30)

# Seconds of each minute at which usage-flag entities refresh
USAGE_FLAG_REFRESH_SECONDS = [0, 30]

# Entity keys that change at every hour boundary
# All other entities only update when new API data arrives
TIME_SENSITIVE_ENTITY_KEYS = frozenset(
    {
        "current_hour_price",
        "cheapest_hour_rank_4h",
        "cheapest_hour_rank_8h",
        "cheapest_hour_rank_12h",
        "cheapest_hour_rank_24h",
        "cheapest_hour_rank_36h",
        "price_position_4h",
        "price_position_8h",
        "price_position_12h",
        "price_position_16h",
        "price_position_24h",
        "price_position_36h",
        "price_position_48h",
        "cheapest_hour_1",
        "cheapest_hour_2",
        "cheapest_hour_3",
        "maximise_usage_periods",
        "minimise_usage_periods",
        "currently_cheap",
        "currently_expensive",
    }
)

# Entity keys refreshed every 30 seconds
USAGE_FLAG_ENTITY_KEYS = frozenset(
    {
        "maximise_usage_now",
        "minimise_usage_now",
    }
)
