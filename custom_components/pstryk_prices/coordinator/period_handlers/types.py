"""Type definitions and constants for usage period calculation."""

from __future__ import annotations

from datetime import timedelta
from typing import NamedTuple

from custom_components.pstryk_prices.const import DEFAULT_PRICE_SIMILARITY_THRESHOLD

# Frames starting within this horizon from now are candidates for blocks
PERIOD_HORIZON = timedelta(hours=36)

# Maximum number of blocks per direction
MAX_BLOCKS = 3

# A block stops growing once it covers this many hours
MAX_BLOCK_DURATION = timedelta(hours=6)

# Blocks separated by at most this gap may be merged into one
MAX_MERGE_GAP = timedelta(hours=2)

# Average prices closer than this are "nearly identical" regardless of threshold
PRICE_EPSILON = 1e-6

# Log indentation levels for visual hierarchy
INDENT_L0 = ""  # Top level (calculate_usage_blocks)
INDENT_L1 = "  "  # Per-block loop
INDENT_L2 = "    "  # Extension / merge details


class PstrykPricesPeriodConfig(NamedTuple):
    """Configuration for one direction of the period finder."""

    reverse_sort: bool  # False = cheapest blocks ("maximise usage"), True = most expensive
    similarity_threshold: float = DEFAULT_PRICE_SIMILARITY_THRESHOLD  # percent
    max_blocks: int = MAX_BLOCKS
    max_duration: timedelta = MAX_BLOCK_DURATION
    horizon: timedelta = PERIOD_HORIZON
    max_merge_gap: timedelta = MAX_MERGE_GAP

    @property
    def merge_threshold(self) -> float:
        """Price similarity (percent) required to merge neighbouring blocks."""
        return self.similarity_threshold / 2
