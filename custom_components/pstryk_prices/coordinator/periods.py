"""
Usage period calculation for the coordinator.

Runs the period finder once per direction (cheap blocks to maximise usage,
expensive blocks to minimise it), keeps the previous result so running blocks
survive a recalculation, and answers "is now inside a block" with a short
throttle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from custom_components.pstryk_prices.const import USAGE_DIRECTIONS, USAGE_MINIMISE

from .constants import USAGE_FLAG_THROTTLE
from .period_handlers import (
    PstrykPricesPeriodConfig,
    build_usage_blocks,
    merge_with_previous_blocks,
    select_final_blocks,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from .time_service import PstrykPricesTimeService
    from .types import PriceFrame, UsageBlock

_LOGGER = logging.getLogger(__name__)


class _UsageFlag(NamedTuple):
    value: bool
    evaluated_at: datetime


class PstrykPricesPeriodCalculator:
    """Computes and holds the current usage blocks for both directions."""

    def __init__(self, log_prefix: str, similarity_threshold: float) -> None:
        """Initialize the period calculator."""
        self._log_prefix = log_prefix
        self._similarity_threshold = similarity_threshold
        self._blocks: dict[str, list[UsageBlock]] = {direction: [] for direction in USAGE_DIRECTIONS}
        self._flags: dict[str, _UsageFlag] = {}
        self._last_calculation_key: tuple[int, datetime] | None = None

    def _log(self, level: str, message: str, *args: object, **kwargs: object) -> None:
        """Log with calculator-specific prefix."""
        prefixed_message = f"{self._log_prefix} {message}"
        getattr(_LOGGER, level)(prefixed_message, *args, **kwargs)

    def get_period_config(self, direction: str) -> PstrykPricesPeriodConfig:
        """Period finder configuration for a direction."""
        return PstrykPricesPeriodConfig(
            reverse_sort=direction == USAGE_MINIMISE,
            similarity_threshold=self._similarity_threshold,
        )

    def invalidate(self) -> None:
        """Force the next calculate() to run and forget throttled flags."""
        self._last_calculation_key = None
        self._flags.clear()

    def reset(self) -> None:
        """Drop all blocks (used on unload)."""
        self.invalidate()
        self._blocks = {direction: [] for direction in USAGE_DIRECTIONS}

    def calculate(
        self,
        frames: Sequence[PriceFrame],
        generation: int,
        *,
        time: PstrykPricesTimeService,
    ) -> dict[str, list[UsageBlock]]:
        """
        Recalculate blocks for both directions.

        Skipped when neither the cache generation nor the hour changed since the
        previous calculation.

        Returns:
            Mapping of direction to chronologically ordered blocks.

        """
        now = time.now()
        calculation_key = (generation, time.current_hour_start())
        if calculation_key == self._last_calculation_key:
            return self.blocks

        for direction in USAGE_DIRECTIONS:
            config = self.get_period_config(direction)
            new_blocks = build_usage_blocks(frames, now, config)
            merged = merge_with_previous_blocks(new_blocks, self._blocks[direction], now, config)
            self._blocks[direction] = select_final_blocks(merged, config)
            self._log(
                "debug",
                "%s usage blocks: %s",
                direction.capitalize(),
                ", ".join(
                    f"{time.as_local(block.start_time):%H:%M}-{time.as_local(block.end_time):%H:%M}"
                    for block in self._blocks[direction]
                )
                or "none",
            )

        self._last_calculation_key = calculation_key
        self._flags.clear()
        return self.blocks

    @property
    def blocks(self) -> dict[str, list[UsageBlock]]:
        """Current blocks per direction."""
        return {direction: list(blocks) for direction, blocks in self._blocks.items()}

    def get_blocks(self, direction: str) -> list[UsageBlock]:
        """Current blocks of one direction in chronological order."""
        return list(self._blocks.get(direction, []))

    def is_usage_active(self, direction: str, *, time: PstrykPricesTimeService) -> bool:
        """
        Check whether now lies inside one of the direction's blocks.

        The end of a block counts as inside. The answer is reused for
        USAGE_FLAG_THROTTLE after each evaluation.
        """
        now = time.now()
        cached = self._flags.get(direction)
        if cached is not None and now - cached.evaluated_at < USAGE_FLAG_THROTTLE:
            return cached.value

        value = any(block.start_time <= now <= block.end_time for block in self._blocks.get(direction, []))
        self._flags[direction] = _UsageFlag(value=value, evaluated_at=now)
        return value
