"""
PSTRYK pricing API client package.

This package handles all communication with the PSTRYK pricing endpoint:
- Request construction (hourly resolution, fetch window, API key header)
- Error mapping for HTTP, network and parse failures
- Validation of the decoded price payload

Main components:
- client.py: PstrykPricesApiClient (aiohttp-based REST client)
- exceptions.py: API-specific error classes
- helpers.py: Response validation and parsing utilities
"""

from .client import PstrykPricesApiClient
from .exceptions import (
    PstrykPricesApiClientAuthenticationError,
    PstrykPricesApiClientCommunicationError,
    PstrykPricesApiClientError,
)

__all__ = [
    "PstrykPricesApiClient",
    "PstrykPricesApiClientAuthenticationError",
    "PstrykPricesApiClientCommunicationError",
    "PstrykPricesApiClientError",
]
