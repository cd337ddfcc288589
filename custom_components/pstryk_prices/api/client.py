"""PSTRYK pricing API client."""

from __future__ import annotations

import asyncio
import json
import logging
import socket
from typing import TYPE_CHECKING, Any

import aiohttp

from custom_components.pstryk_prices.const import API_BASE_URL, API_RESOLUTION

from .exceptions import (
    PstrykPricesApiClientCommunicationError,
    PstrykPricesApiClientError,
)
from .helpers import (
    format_window_time,
    prepare_headers,
    verify_price_response,
    verify_response_or_raise,
)

if TYPE_CHECKING:
    from datetime import datetime

_LOGGER = logging.getLogger(__name__)
_LOGGER_API_DETAILS = logging.getLogger(__name__ + ".details")


class PstrykPricesApiClient:
    """PSTRYK pricing API client."""

    def __init__(
        self,
        api_key: str,
        session: aiohttp.ClientSession,
        version: str,
    ) -> None:
        """PSTRYK pricing API client."""
        self._api_key = api_key
        self._session = session
        self._version = version
        self._request_semaphore = asyncio.Semaphore(1)  # One request at a time per entry

        # Timeout configuration
        self._connect_timeout = 10  # Connection timeout in seconds
        self._request_timeout = 25  # Total request timeout in seconds
        self._socket_connect_timeout = 5  # Socket connection timeout

    async def async_get_price_frames(
        self,
        window_start: datetime,
        window_end: datetime,
    ) -> tuple[list[dict[str, Any]], float | None]:
        """
        Fetch hourly price frames for [window_start, window_end).

        Args:
            window_start: Start of the requested window (timezone-aware).
            window_end: End of the requested window (timezone-aware).

        Returns:
            Tuple of (raw frame dicts, upstream daily average or None).

        Raises:
            PstrykPricesApiClientError: On any transport, HTTP or parse failure.

        """
        if window_start >= window_end:
            msg = f"Invalid time range: window_start ({window_start}) must be before window_end ({window_end})"
            raise PstrykPricesApiClientError(msg)

        params = {
            "resolution": API_RESOLUTION,
            "window_start": format_window_time(window_start),
            "window_end": format_window_time(window_end),
        }
        _LOGGER.debug(
            "Fetching price frames for %s - %s",
            params["window_start"],
            params["window_end"],
        )

        async with self._request_semaphore:
            payload = await self._make_request(params)

        raw_frames, daily_average = verify_price_response(payload)
        _LOGGER.debug("Received %d frames, daily average: %s", len(raw_frames), daily_average)
        return raw_frames, daily_average

    async def async_validate_api_key(self, window_start: datetime, window_end: datetime) -> int:
        """
        Check the API key with a small request.

        Returns:
            Number of frames received.

        """
        frames, _ = await self.async_get_price_frames(window_start, window_end)
        return len(frames)

    async def _make_request(self, params: dict[str, str]) -> Any:
        """Make an API request with comprehensive error handling for network issues."""
        _LOGGER_API_DETAILS.debug("Making API request with params: %s", params)

        try:
            timeout = aiohttp.ClientTimeout(
                total=self._request_timeout,
                connect=self._connect_timeout,
                sock_connect=self._socket_connect_timeout,
            )

            response = await self._session.request(
                method="GET",
                url=API_BASE_URL,
                headers=prepare_headers(self._api_key, self._version),
                params=params,
                timeout=timeout,
            )

            verify_response_or_raise(response)
            response_json = await response.json(content_type=None)
            _LOGGER_API_DETAILS.debug("Received API response: %s", response_json)
            return response_json

        except (aiohttp.ContentTypeError, json.JSONDecodeError) as error:
            _LOGGER.error("Pricing API returned a non-JSON body: %s", error)
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.PARSE_ERROR.format(exception=str(error))
            ) from error

        except aiohttp.ClientResponseError as error:
            _LOGGER.error("HTTP error during API request: %s", error)
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.CONNECTION_ERROR.format(exception=str(error))
            ) from error

        except aiohttp.ClientConnectorError as error:
            _LOGGER.error("Connection error - server unreachable or network down: %s", error)
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.CONNECTION_ERROR.format(exception=str(error))
            ) from error

        except aiohttp.ServerDisconnectedError as error:
            _LOGGER.error("Server disconnected during request: %s", error)
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.CONNECTION_ERROR.format(exception=str(error))
            ) from error

        except TimeoutError as error:
            _LOGGER.error(
                "Request timeout after %d seconds - slow network or server overload",
                self._request_timeout,
            )
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.TIMEOUT_ERROR.format(exception=str(error))
            ) from error

        except socket.gaierror as error:
            _LOGGER.error("DNS resolution failed - check internet connection: %s", error)
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.CONNECTION_ERROR.format(exception=str(error))
            ) from error

        except aiohttp.ClientError as error:
            _LOGGER.error("Client error during API request: %s", error)
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.CONNECTION_ERROR.format(exception=str(error))
            ) from error

        except OSError as error:
            _LOGGER.error("Network error - internet may be down: %s", error)
            raise PstrykPricesApiClientCommunicationError(
                PstrykPricesApiClientCommunicationError.CONNECTION_ERROR.format(exception=str(error))
            ) from error
