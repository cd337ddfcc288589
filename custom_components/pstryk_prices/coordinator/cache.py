"""In-memory price cache shared by the coordinator components."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .types import CachedPriceData

if TYPE_CHECKING:
    from datetime import date, datetime

    from .time_service import PstrykPricesTimeService
    from .types import PriceFrame

_LOGGER = logging.getLogger(__name__)


class PstrykPricesPriceCache:
    """
    Holds the current price snapshot.

    The snapshot is an immutable CachedPriceData and is always replaced as a
    whole, so readers see either the previous generation or the new one,
    never a mix of both.
    """

    def __init__(self, log_prefix: str = "") -> None:
        """Create an empty cache."""
        self._log_prefix = log_prefix
        self._snapshot: CachedPriceData | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Generation of the installed snapshot (0 while empty)."""
        return self._generation

    def is_valid(self, *, time: PstrykPricesTimeService) -> bool:
        """
        Validate that the cached snapshot may still be served.

        Returns False if:
        - Nothing has been cached yet, or the snapshot has no frames
        - The local calendar date changed since the snapshot was built
        - expires_at has passed

        """
        snapshot = self._snapshot
        if snapshot is None or not snapshot.frames:
            return False

        current_local_date = time.get_local_date()
        if current_local_date != snapshot.date:
            _LOGGER.debug(
                "%s Cache date mismatch: cached=%s, current=%s",
                self._log_prefix,
                snapshot.date,
                current_local_date,
            )
            return False

        if time.now() > snapshot.expires_at:
            _LOGGER.debug("%s Cache expired at %s", self._log_prefix, snapshot.expires_at)
            return False

        return True

    def update(
        self,
        frames: tuple[PriceFrame, ...],
        daily_average: float,
        expires_at: datetime,
        cache_date: date,
        *,
        fetched_at: datetime,
    ) -> CachedPriceData:
        """Replace the cache with fresh data."""
        return self.install(
            CachedPriceData(
                frames=tuple(frames),
                daily_average=daily_average,
                date=cache_date,
                expires_at=expires_at,
                fetched_at=fetched_at,
                is_stale=False,
            )
        )

    def install(self, snapshot: CachedPriceData) -> CachedPriceData:
        """Install a fully-formed snapshot under a new generation number."""
        self._generation += 1
        installed = snapshot._replace(generation=self._generation)
        self._snapshot = installed
        _LOGGER.debug(
            "%s Installed cache generation %d (%d frames, stale=%s, expires=%s)",
            self._log_prefix,
            installed.generation,
            len(installed.frames),
            installed.is_stale,
            installed.expires_at,
        )
        return installed

    def get(self, *, time: PstrykPricesTimeService) -> CachedPriceData | None:
        """Return the snapshot if it is valid, None when a refresh is required."""
        if not self.is_valid(time=time):
            return None
        return self._snapshot

    def last_snapshot(self) -> CachedPriceData | None:
        """Return the latest snapshot regardless of validity."""
        return self._snapshot

    def clear(self) -> None:
        """Drop the snapshot (used on unload)."""
        self._snapshot = None
