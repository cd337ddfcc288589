"""
Usage period calculation utilities (sub-package for modular organization).

This package splits period calculation into focused modules:
- types: Configuration type and constants
- period_building: Seed-and-extend construction of contiguous blocks
- period_merging: Merging with previous blocks, overlap resolution, ranking

All public APIs are re-exported here.
"""

from __future__ import annotations

from .period_building import build_usage_blocks, select_candidate_frames
from .period_merging import merge_with_previous_blocks, select_final_blocks
from .types import (
    MAX_BLOCK_DURATION,
    MAX_BLOCKS,
    MAX_MERGE_GAP,
    PERIOD_HORIZON,
    PstrykPricesPeriodConfig,
)

__all__ = [
    "MAX_BLOCKS",
    "MAX_BLOCK_DURATION",
    "MAX_MERGE_GAP",
    "PERIOD_HORIZON",
    "PstrykPricesPeriodConfig",
    "build_usage_blocks",
    "merge_with_previous_blocks",
    "select_candidate_frames",
    "select_final_blocks",
]
