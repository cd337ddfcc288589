"""
Sensor platform-specific helper functions.

- format_day_label: "Today" / "Tomorrow" / "dd.mm" prefix for a local date
- format_usage_blocks: Multi-line text shown by the usage period sensors
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from custom_components.pstryk_prices.const import NO_PERIODS_TEXT

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService
    from custom_components.pstryk_prices.coordinator.types import UsageBlock


def format_day_label(
    moment: datetime,
    *,
    time: PstrykPricesTimeService,
    today_label: str,
    tomorrow_label: str,
) -> str:
    """
    Label the local calendar day of moment relative to now.

    Returns:
        today_label, tomorrow_label, or the date as "dd.mm" for any other day.

    """
    local_date = time.get_local_date(moment)
    today = time.get_local_date()
    offset = (local_date - today).days

    if offset == 0:
        return today_label
    if offset == 1:
        return tomorrow_label
    return time.as_local(moment).strftime("%d.%m")


def format_usage_blocks(
    blocks: Sequence[UsageBlock],
    *,
    time: PstrykPricesTimeService,
    today_label: str,
    tomorrow_label: str,
) -> str:
    """
    Render usage blocks one per line, e.g. "Today 10:00-13:00 (0.4123)".

    The end time gets its own day label only when the block crosses midnight
    into a day other than the start's.
    """
    if not blocks:
        return NO_PERIODS_TEXT

    lines = []
    for block in blocks:
        start = time.as_local(block.start_time)
        end = time.as_local(block.end_time)
        start_label = format_day_label(start, time=time, today_label=today_label, tomorrow_label=tomorrow_label)

        # A block ending exactly at midnight still belongs to the start day
        end_reference = end if end.hour or end.minute else start
        end_label = format_day_label(end_reference, time=time, today_label=today_label, tomorrow_label=tomorrow_label)

        end_text = f"{end:%H:%M}" if end_label == start_label else f"{end_label} {end:%H:%M}"
        lines.append(f"{start_label} {start:%H:%M}-{end_text} ({block.avg_price:.4f})")

    return "\n".join(lines)
