"""Value types shared by the coordinator components."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from datetime import date, datetime


class PriceFrame(NamedTuple):
    """
    One hour of priced electricity as delivered by the pricing API.

    Frames with a missing is_cheap or is_expensive flag are invalid and never
    reach the analytics. Ingested frames carry start and end in UTC.
    """

    start: datetime
    end: datetime
    price_gross: float
    is_cheap: bool | None
    is_expensive: bool | None
    is_live: bool = False

    @property
    def is_valid(self) -> bool:
        """Return True when both upstream classification flags are present."""
        return self.is_cheap is not None and self.is_expensive is not None

    def contains(self, moment: datetime) -> bool:
        """Return True if moment lies in [start, end)."""
        return self.start <= moment < self.end


class CachedPriceData(NamedTuple):
    """Immutable snapshot held by the price cache."""

    frames: tuple[PriceFrame, ...]
    daily_average: float
    date: date
    expires_at: datetime
    fetched_at: datetime
    is_stale: bool = False
    generation: int = 0


class PriceTier(NamedTuple):
    """Group of frames sharing one (rounded) price."""

    price: float
    frames: tuple[PriceFrame, ...]
    position: int


class UsageBlock(NamedTuple):
    """Contiguous run of hours with extreme, similar prices."""

    start_time: datetime
    end_time: datetime
    frames: tuple[PriceFrame, ...]
    avg_price: float

    @property
    def duration_hours(self) -> float:
        """Length of the block in hours."""
        return (self.end_time - self.start_time).total_seconds() / 3600

    def to_dict(self) -> dict[str, str | float | int]:
        """Serialize for entity attributes and service responses."""
        return {
            "start": self.start_time.isoformat(),
            "end": self.end_time.isoformat(),
            "avg_price": round(self.avg_price, 4),
            "duration_hours": self.duration_hours,
            "hours": len(self.frames),
        }
