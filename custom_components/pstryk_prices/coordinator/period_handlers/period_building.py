"""Seed-and-extend construction of contiguous usage blocks."""

from __future__ import annotations

import logging
from datetime import UTC
from statistics import fmean
from typing import TYPE_CHECKING

from custom_components.pstryk_prices.coordinator.helpers import percent_difference
from custom_components.pstryk_prices.coordinator.types import UsageBlock

from .types import INDENT_L0, INDENT_L1, INDENT_L2, PRICE_EPSILON

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime, timedelta

    from custom_components.pstryk_prices.coordinator.types import PriceFrame

    from .types import PstrykPricesPeriodConfig

_LOGGER = logging.getLogger(__name__)


def select_candidate_frames(
    frames: Sequence[PriceFrame],
    now: datetime,
    horizon: timedelta,
) -> list[PriceFrame]:
    """Frames overlapping (now, now + horizon), including the running hour."""
    horizon_end = now.astimezone(UTC) + horizon
    return [frame for frame in frames if frame.end > now and frame.start < horizon_end]


def _find_extension(
    block_frames: list[PriceFrame],
    working: list[PriceFrame],
    average: float,
    threshold: float,
    now: datetime,
) -> PriceFrame | None:
    """
    Pick the next frame to splice onto the block.

    Only frames touching the block (start == block end, or end == block start)
    whose price is within threshold percent of the running average qualify.
    An exact price match wins; otherwise the frame closest in time to now.
    """
    block_start = block_frames[0].start
    block_end = block_frames[-1].end

    candidates = [
        frame
        for frame in working
        if (frame.start == block_end or frame.end == block_start)
        and percent_difference(frame.price_gross, average) <= threshold
    ]
    if not candidates:
        return None

    exact = [frame for frame in candidates if abs(frame.price_gross - average) <= PRICE_EPSILON]
    pool = exact or candidates
    return min(pool, key=lambda frame: (abs(frame.start - now), frame.start))


def build_usage_blocks(
    frames: Sequence[PriceFrame],
    now: datetime,
    config: PstrykPricesPeriodConfig,
) -> list[UsageBlock]:
    """
    Build up to config.max_blocks non-overlapping blocks of extreme prices.

    The most extreme remaining frame seeds each block, which then grows with
    adjacent frames of similar price until it reaches config.max_duration.
    Every frame overlapping a finished block leaves the working set, so blocks
    never overlap.

    Args:
        frames: Valid frames in time order.
        now: Local reference time.
        config: Direction and limits.

    Returns:
        Blocks in the order they were found (most extreme seed first).

    """
    direction = "expensive" if config.reverse_sort else "cheap"
    candidates = select_candidate_frames(frames, now, config.horizon)
    working = sorted(
        candidates,
        key=lambda frame: (-frame.price_gross if config.reverse_sort else frame.price_gross, frame.start),
    )
    _LOGGER.debug(
        "%sBuilding %s blocks from %d candidate frames",
        INDENT_L0,
        direction,
        len(working),
    )

    blocks: list[UsageBlock] = []
    while working and len(blocks) < config.max_blocks:
        seed = working.pop(0)
        block_frames = [seed]
        average = seed.price_gross

        while block_frames[-1].end - block_frames[0].start < config.max_duration:
            extension = _find_extension(block_frames, working, average, config.similarity_threshold, now)
            if extension is None:
                break
            working.remove(extension)
            block_frames.append(extension)
            block_frames.sort(key=lambda frame: frame.start)
            average = fmean(frame.price_gross for frame in block_frames)
            _LOGGER.debug(
                "%sExtended block with %s (%.4f), running average %.4f",
                INDENT_L2,
                extension.start,
                extension.price_gross,
                average,
            )

        block_start = block_frames[0].start
        block_end = block_frames[-1].end
        working = [frame for frame in working if not (frame.start < block_end and frame.end > block_start)]

        block = UsageBlock(
            start_time=block_start,
            end_time=block_end,
            frames=tuple(block_frames),
            avg_price=average,
        )
        blocks.append(block)
        _LOGGER.debug(
            "%s%s block %s - %s (%d h, avg %.4f)",
            INDENT_L1,
            direction.capitalize(),
            block.start_time,
            block.end_time,
            len(block.frames),
            block.avg_price,
        )

    return blocks
