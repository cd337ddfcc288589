"""
Config flow for PSTRYK Prices integration.

This module serves as the entry point for Home Assistant's config flow discovery.
The actual implementation is in the config_flow_handlers package.
"""

from __future__ import annotations

from .config_flow_handlers.options_flow import (
    PstrykPricesOptionsFlowHandler as OptionsFlowHandler,
)
from .config_flow_handlers.schemas import (
    get_options_init_schema,
    get_reauth_confirm_schema,
    get_user_schema,
)
from .config_flow_handlers.user_flow import PstrykPricesConfigFlowHandler as ConfigFlow
from .config_flow_handlers.validators import (
    PstrykPricesCannotConnectError,
    PstrykPricesInvalidAuthError,
    validate_api_key,
)

__all__ = [
    "ConfigFlow",
    "OptionsFlowHandler",
    "PstrykPricesCannotConnectError",
    "PstrykPricesInvalidAuthError",
    "get_options_init_schema",
    "get_reauth_confirm_schema",
    "get_user_schema",
    "validate_api_key",
]
