"""Block merging, overlap resolution and final selection."""

from __future__ import annotations

import logging
from datetime import timedelta
from statistics import fmean
from typing import TYPE_CHECKING

from custom_components.pstryk_prices.coordinator.types import UsageBlock

from .types import INDENT_L0, INDENT_L1, PRICE_EPSILON

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from custom_components.pstryk_prices.coordinator.types import PriceFrame

    from .types import PstrykPricesPeriodConfig

_LOGGER = logging.getLogger(__name__)


def prices_similar(first: float, second: float, threshold: float) -> bool:
    """
    Check whether two block averages are close enough to merge.

    The difference is measured relative to the larger magnitude of the two.
    """
    difference = abs(first - second)
    if difference <= PRICE_EPSILON:
        return True
    reference = max(abs(first), abs(second))
    return difference / reference * 100 <= threshold


def merge_blocks(first: UsageBlock, second: UsageBlock) -> UsageBlock:
    """
    Merge two blocks into one spanning both.

    The average is weighted by frame count; frames present in both blocks are
    counted once (the second block's copy wins).
    """
    frames_by_start: dict[datetime, PriceFrame] = {frame.start: frame for frame in first.frames}
    frames_by_start.update({frame.start: frame for frame in second.frames})
    frames = tuple(sorted(frames_by_start.values(), key=lambda frame: frame.start))

    return UsageBlock(
        start_time=min(first.start_time, second.start_time),
        end_time=max(first.end_time, second.end_time),
        frames=frames,
        avg_price=fmean(frame.price_gross for frame in frames),
    )


def _is_more_extreme(candidate: UsageBlock, other: UsageBlock, *, reverse_sort: bool) -> bool:
    if reverse_sort:
        return candidate.avg_price > other.avg_price
    return candidate.avg_price < other.avg_price


def merge_with_previous_blocks(
    new_blocks: Sequence[UsageBlock],
    previous_blocks: Sequence[UsageBlock],
    now: datetime,
    config: PstrykPricesPeriodConfig,
) -> list[UsageBlock]:
    """
    Combine freshly built blocks with still-running previous ones.

    Previous blocks that already ended are dropped. Neighbours separated by at
    most config.max_merge_gap whose averages are within half the similarity
    threshold are merged. Overlapping blocks that are not similar keep only the
    more extreme one.

    Returns:
        Non-overlapping blocks in chronological order.

    """
    active_previous = [block for block in previous_blocks if block.end_time > now]
    combined = sorted([*new_blocks, *active_previous], key=lambda block: (block.start_time, block.end_time))

    merged: list[UsageBlock] = []
    for block in combined:
        if not merged:
            merged.append(block)
            continue

        last = merged[-1]
        gap = block.start_time - last.end_time

        if gap <= config.max_merge_gap and prices_similar(last.avg_price, block.avg_price, config.merge_threshold):
            merged[-1] = merge_blocks(last, block)
            _LOGGER.debug(
                "%sMerged blocks %s - %s and %s - %s (gap %s)",
                INDENT_L1,
                last.start_time,
                last.end_time,
                block.start_time,
                block.end_time,
                gap,
            )
        elif gap < timedelta(0):
            if _is_more_extreme(block, last, reverse_sort=config.reverse_sort):
                merged[-1] = block
            _LOGGER.debug(
                "%sResolved overlap at %s, kept block %s - %s (avg %.4f)",
                INDENT_L1,
                block.start_time,
                merged[-1].start_time,
                merged[-1].end_time,
                merged[-1].avg_price,
            )
        else:
            merged.append(block)

    return merged


def select_final_blocks(blocks: Sequence[UsageBlock], config: PstrykPricesPeriodConfig) -> list[UsageBlock]:
    """
    Keep the config.max_blocks most extreme blocks, presented chronologically.

    Ranking: most extreme average first, then longer duration, then earlier start.
    """
    ranked = sorted(
        blocks,
        key=lambda block: (
            -block.avg_price if config.reverse_sort else block.avg_price,
            -block.duration_hours,
            block.start_time,
        ),
    )
    selected = sorted(ranked[: config.max_blocks], key=lambda block: block.start_time)
    if len(ranked) > len(selected):
        _LOGGER.debug("%sTruncated %d blocks to %d", INDENT_L0, len(ranked), len(selected))
    return selected
