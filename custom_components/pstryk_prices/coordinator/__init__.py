"""
Data update coordination package.

This package orchestrates price fetching, caching, and entity updates:
- Shared in-memory price cache with date / refresh-hour validity
- Single consolidated fetch with stale fallback
- Calendar-aware refresh scheduling with retry backoff
- Tie-aware ranking of the current hour
- Usage period (cheap / expensive block) calculation

Main components:
- core.py: PstrykPricesDataUpdateCoordinator (main coordinator class)
- cache.py: Immutable snapshot cache
- data_fetching.py: Fetch orchestration, manual refresh and cooldown
- scheduler.py: Refresh scheduling
- ranking.py: Rank and position calculations
- periods.py + period_handlers/: Usage period calculation
- listeners.py: Entity refresh timers
"""

from .constants import (
    TIME_SENSITIVE_ENTITY_KEYS,
    USAGE_FLAG_ENTITY_KEYS,
)
from .core import PstrykPricesDataUpdateCoordinator
from .exceptions import PstrykPricesRefreshCooldownError
from .time_service import PstrykPricesTimeService

__all__ = [
    "TIME_SENSITIVE_ENTITY_KEYS",
    "USAGE_FLAG_ENTITY_KEYS",
    "PstrykPricesDataUpdateCoordinator",
    "PstrykPricesRefreshCooldownError",
    "PstrykPricesTimeService",
]
