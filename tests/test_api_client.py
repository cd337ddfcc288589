"""
Tests for the PSTRYK pricing API client.

The aiohttp session is mocked; only request construction and the mapping of
HTTP and payload failures to client exceptions are exercised.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import aiohttp
import pytest

from custom_components.pstryk_prices.api import (
    PstrykPricesApiClient,
    PstrykPricesApiClientAuthenticationError,
    PstrykPricesApiClientCommunicationError,
    PstrykPricesApiClientError,
)
from custom_components.pstryk_prices.api.helpers import format_window_time, verify_price_response
from custom_components.pstryk_prices.const import API_BASE_URL

WARSAW = ZoneInfo("Europe/Warsaw")
WINDOW_START = datetime(2025, 1, 15, 8, 0, tzinfo=WARSAW)
WINDOW_END = datetime(2025, 1, 17, 0, 0, tzinfo=WARSAW)


def _client(status: int = 200, payload: Any = None, json_error: Exception | None = None) -> PstrykPricesApiClient:
    response = MagicMock()
    response.status = status
    response.headers = {"Retry-After": "30"}
    response.raise_for_status = MagicMock()
    response.json = AsyncMock(return_value=payload, side_effect=json_error)

    session = MagicMock()
    session.request = AsyncMock(return_value=response)
    return PstrykPricesApiClient(api_key="secret-key", session=session, version="1.0.0")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_fetch_returns_frames_and_average() -> None:
    """
    Test a successful request.

    Expected: Raw frames and the upstream average; one GET with the raw key header
    """
    frames = [{"start": "2025-01-15T09:00:00+00:00", "end": "2025-01-15T10:00:00+00:00", "price_gross": 0.5}]
    client = _client(payload={"frames": frames, "price_gross_avg": "0.61"})

    raw_frames, average = await client.async_get_price_frames(WINDOW_START, WINDOW_END)

    assert raw_frames == frames
    assert average == pytest.approx(0.61)

    session = client._session  # noqa: SLF001
    session.request.assert_awaited_once()
    kwargs = session.request.call_args.kwargs
    assert kwargs["method"] == "GET"
    assert kwargs["url"] == API_BASE_URL
    assert kwargs["headers"]["Authorization"] == "secret-key"
    assert kwargs["params"] == {
        "resolution": "hour",
        "window_start": "2025-01-15T07:00:00Z",
        "window_end": "2025-01-16T23:00:00Z",
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_window_rejected() -> None:
    """Test start >= end raises before any request is made."""
    client = _client(payload={"frames": []})

    with pytest.raises(PstrykPricesApiClientError, match="Invalid time range"):
        await client.async_get_price_frames(WINDOW_END, WINDOW_START)

    client._session.request.assert_not_awaited()  # noqa: SLF001


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_auth_errors(status: int) -> None:
    """Test 401/403 map to the authentication error."""
    client = _client(status=status)

    with pytest.raises(PstrykPricesApiClientAuthenticationError):
        await client.async_get_price_frames(WINDOW_START, WINDOW_END)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_rate_limit_error() -> None:
    """
    Test 429 handling.

    Expected: Plain client error (not a communication error) mentioning Retry-After
    """
    client = _client(status=429)

    with pytest.raises(PstrykPricesApiClientError, match="30 seconds") as exc_info:
        await client.async_get_price_frames(WINDOW_START, WINDOW_END)

    assert not isinstance(exc_info.value, PstrykPricesApiClientCommunicationError)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_non_json_body() -> None:
    """Test an undecodable body becomes a communication error."""
    client = _client(json_error=json.JSONDecodeError("Expecting value", "<html>", 0))

    with pytest.raises(PstrykPricesApiClientCommunicationError):
        await client.async_get_price_frames(WINDOW_START, WINDOW_END)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_frames_list() -> None:
    """Test a JSON body without a frames list is rejected."""
    client = _client(payload={"detail": "maintenance"})

    with pytest.raises(PstrykPricesApiClientCommunicationError):
        await client.async_get_price_frames(WINDOW_START, WINDOW_END)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transport_error() -> None:
    """Test aiohttp client errors become communication errors."""
    client = _client()
    client._session.request.side_effect = aiohttp.ClientError("reset")  # noqa: SLF001

    with pytest.raises(PstrykPricesApiClientCommunicationError):
        await client.async_get_price_frames(WINDOW_START, WINDOW_END)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_timeout_error() -> None:
    """Test a timeout becomes a communication error."""
    client = _client()
    client._session.request.side_effect = TimeoutError()  # noqa: SLF001

    with pytest.raises(PstrykPricesApiClientCommunicationError):
        await client.async_get_price_frames(WINDOW_START, WINDOW_END)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_validate_api_key_counts_frames() -> None:
    """Test key validation reports the number of frames received."""
    client = _client(payload={"frames": [{}, {}]})

    assert await client.async_validate_api_key(WINDOW_START, WINDOW_END) == 2


@pytest.mark.unit
def test_verify_price_response_ignores_bad_average() -> None:
    """Test an unparseable price_gross_avg is treated as missing."""
    frames, average = verify_price_response({"frames": [], "price_gross_avg": "n/a"})

    assert frames == []
    assert average is None


@pytest.mark.unit
def test_format_window_time_uses_utc() -> None:
    """Test window boundaries are sent as UTC with a Z suffix."""
    assert format_window_time(datetime(2025, 7, 1, 0, 0, tzinfo=WARSAW)) == "2025-06-30T22:00:00Z"
