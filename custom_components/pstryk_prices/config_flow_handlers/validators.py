"""Validation functions for PSTRYK Prices config flow."""

from __future__ import annotations

from typing import TYPE_CHECKING

from custom_components.pstryk_prices.api import (
    PstrykPricesApiClient,
    PstrykPricesApiClientAuthenticationError,
    PstrykPricesApiClientCommunicationError,
    PstrykPricesApiClientError,
)
from custom_components.pstryk_prices.const import (
    DOMAIN,
    MAX_PRICE_SIMILARITY_THRESHOLD,
    MAX_REFRESH_HOUR,
    MIN_PRICE_SIMILARITY_THRESHOLD,
    MIN_REFRESH_HOUR,
)
from custom_components.pstryk_prices.coordinator.constants import FETCH_LOOKAHEAD_DAYS, FETCH_LOOKBEHIND
from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_create_clientsession
from homeassistant.loader import async_get_integration

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class PstrykPricesInvalidAuthError(HomeAssistantError):
    """Error to indicate invalid authentication."""


class PstrykPricesCannotConnectError(HomeAssistantError):
    """Error to indicate we cannot connect."""


async def validate_api_key(hass: HomeAssistant, api_key: str) -> int:
    """
    Validate a PSTRYK API key with one pricing request.

    The request covers the same window the coordinator fetches, so a key that
    passes here also works for the first refresh.

    Returns:
        Number of price frames the API returned

    Raises:
        PstrykPricesInvalidAuthError: Invalid key
        PstrykPricesCannotConnectError: API connection failed

    """
    integration = await async_get_integration(hass, DOMAIN)
    client = PstrykPricesApiClient(
        api_key=api_key,
        session=async_create_clientsession(hass),
        version=str(integration.version) if integration.version else "unknown",
    )
    window_start, window_end = PstrykPricesTimeService().get_fetch_window(FETCH_LOOKBEHIND, FETCH_LOOKAHEAD_DAYS)

    try:
        return await client.async_validate_api_key(window_start, window_end)
    except PstrykPricesApiClientAuthenticationError as exception:
        raise PstrykPricesInvalidAuthError from exception
    except PstrykPricesApiClientCommunicationError as exception:
        raise PstrykPricesCannotConnectError from exception
    except PstrykPricesApiClientError as exception:
        raise PstrykPricesCannotConnectError from exception


def validate_refresh_hour(hour: int) -> bool:
    """
    Validate the daily refresh hour.

    Returns:
        True if hour is a full hour of the day (MIN_REFRESH_HOUR to MAX_REFRESH_HOUR)

    """
    return MIN_REFRESH_HOUR <= hour <= MAX_REFRESH_HOUR


def validate_price_similarity_threshold(threshold: float) -> bool:
    """
    Validate the price similarity threshold percentage.

    Returns:
        True if threshold is within MIN_PRICE_SIMILARITY_THRESHOLD to MAX_PRICE_SIMILARITY_THRESHOLD

    """
    return MIN_PRICE_SIMILARITY_THRESHOLD <= threshold <= MAX_PRICE_SIMILARITY_THRESHOLD


def validate_label(label: str) -> bool:
    """Validate a display label is not blank."""
    return bool(label and label.strip())
