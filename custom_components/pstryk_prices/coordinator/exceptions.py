"""Exceptions raised by the coordinator components."""

from __future__ import annotations


class PstrykPricesRefreshCooldownError(Exception):
    """Raised when an immediate manual refresh is requested too soon."""

    COOLDOWN_ACTIVE = "Manual refresh is on cooldown, retry in {seconds} seconds"

    def __init__(self, retry_in_seconds: int) -> None:
        """Store the remaining cooldown."""
        self.retry_in_seconds = retry_in_seconds
        super().__init__(self.COOLDOWN_ACTIVE.format(seconds=retry_in_seconds))
