"""
Config flow handlers for PSTRYK Prices integration.

- user_flow.py: API key entry and reauthentication
- options_flow.py: Refresh hour, period similarity and display labels
- schemas.py: voluptuous schemas for all forms
- validators.py: API key check and option range validation
"""

from __future__ import annotations

from custom_components.pstryk_prices.config_flow_handlers.options_flow import (
    PstrykPricesOptionsFlowHandler,
)
from custom_components.pstryk_prices.config_flow_handlers.user_flow import (
    PstrykPricesConfigFlowHandler,
)

__all__ = [
    "PstrykPricesConfigFlowHandler",
    "PstrykPricesOptionsFlowHandler",
]
