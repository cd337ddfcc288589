"""Helper functions for API response processing."""

from __future__ import annotations

import logging
from datetime import UTC
from typing import TYPE_CHECKING, Any

from homeassistant.const import __version__ as ha_version

from .exceptions import (
    PstrykPricesApiClientAuthenticationError,
    PstrykPricesApiClientCommunicationError,
    PstrykPricesApiClientError,
)

if TYPE_CHECKING:
    from datetime import datetime

    import aiohttp

_LOGGER = logging.getLogger(__name__)
_LOGGER_DETAILS = logging.getLogger(__name__ + ".details")

HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_TOO_MANY_REQUESTS = 429


def verify_response_or_raise(response: aiohttp.ClientResponse) -> None:
    """
    Verify HTTP response and map to appropriate exceptions.

    Error Mapping:
    - 401 Unauthorized / 403 Forbidden → AuthenticationError
    - 429 Rate Limit → ApiClientError
    - 400 Bad Request → ApiClientError
    - 5xx and other errors → aiohttp.raise_for_status() (becomes CommunicationError)
    """
    if response.status == HTTP_UNAUTHORIZED:
        _LOGGER.error("PSTRYK API authentication failed - check API key")
        raise PstrykPricesApiClientAuthenticationError(PstrykPricesApiClientAuthenticationError.INVALID_CREDENTIALS)

    if response.status == HTTP_FORBIDDEN:
        _LOGGER.error("PSTRYK API access forbidden - API key lacks pricing access")
        raise PstrykPricesApiClientAuthenticationError(
            PstrykPricesApiClientAuthenticationError.INSUFFICIENT_PERMISSIONS
        )

    if response.status == HTTP_TOO_MANY_REQUESTS:
        retry_after = response.headers.get("Retry-After", "unknown")
        _LOGGER.warning("PSTRYK API rate limit exceeded - retry after %s seconds", retry_after)
        raise PstrykPricesApiClientError(PstrykPricesApiClientError.RATE_LIMIT_ERROR.format(retry_after=retry_after))

    if response.status == HTTP_BAD_REQUEST:
        _LOGGER.error("PSTRYK API rejected request parameters")
        raise PstrykPricesApiClientError(
            PstrykPricesApiClientError.INVALID_REQUEST_ERROR.format(message="Bad request")
        )

    # Let this be caught as aiohttp.ClientResponseError in the client
    response.raise_for_status()


def prepare_headers(api_key: str, version: str) -> dict[str, str]:
    """Prepare headers for API request (the key is sent as-is, without a scheme)."""
    return {
        "Authorization": api_key,
        "Accept": "application/json",
        "User-Agent": f"HomeAssistant/{ha_version} pstryk_prices/{version}",
    }


def format_window_time(dt: datetime) -> str:
    """Format a window boundary as ISO 8601 UTC with a Z suffix."""
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def verify_price_response(payload: Any) -> tuple[list[dict[str, Any]], float | None]:
    """
    Validate the decoded JSON body.

    Returns:
        Tuple of (raw frame dicts, upstream daily average or None).

    Raises:
        PstrykPricesApiClientCommunicationError: If the body has no frames list.

    """
    if not isinstance(payload, dict) or not isinstance(payload.get("frames"), list):
        raise PstrykPricesApiClientCommunicationError(
            PstrykPricesApiClientCommunicationError.PARSE_ERROR.format(exception="missing 'frames' list")
        )

    daily_average = payload.get("price_gross_avg")
    try:
        daily_average = float(daily_average) if daily_average is not None else None
    except (TypeError, ValueError):
        _LOGGER_DETAILS.debug("Ignoring unparseable price_gross_avg: %s", daily_average)
        daily_average = None

    return payload["frames"], daily_average

