"""Shared pytest configuration for PSTRYK Prices tests."""

from __future__ import annotations

from collections.abc import Iterator
from zoneinfo import ZoneInfo

import pytest

from homeassistant.util import dt as dt_util

WARSAW = ZoneInfo("Europe/Warsaw")


@pytest.fixture(autouse=True)
def warsaw_time_zone() -> Iterator[None]:
    """Run every test with Home Assistant's local time zone set to Europe/Warsaw."""
    dt_util.set_default_time_zone(WARSAW)
    yield
    dt_util.set_default_time_zone(dt_util.UTC)
