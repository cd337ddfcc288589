"""Custom exceptions for API client."""

from __future__ import annotations


class PstrykPricesApiClientError(Exception):
    """Exception to indicate a general API error."""

    EMPTY_DATA_ERROR = "No valid price frames received for {window_start} - {window_end}"
    RATE_LIMIT_ERROR = "Rate limit exceeded. Please wait {retry_after} seconds before retrying"
    INVALID_REQUEST_ERROR = "Pricing API rejected the request: {message}"


class PstrykPricesApiClientCommunicationError(PstrykPricesApiClientError):
    """Exception to indicate a communication error."""

    TIMEOUT_ERROR = "Timeout error fetching information - {exception}"
    CONNECTION_ERROR = "Error fetching information - {exception}"
    PARSE_ERROR = "Could not parse pricing API response - {exception}"


class PstrykPricesApiClientAuthenticationError(PstrykPricesApiClientError):
    """Exception to indicate an authentication error."""

    INVALID_CREDENTIALS = "Invalid or revoked API key"
    INSUFFICIENT_PERMISSIONS = "API key is not allowed to read pricing data"
