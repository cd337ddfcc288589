"""Schema definitions for PSTRYK Prices config flow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import voluptuous as vol

from custom_components.pstryk_prices.const import (
    CONF_PRICE_SIMILARITY_THRESHOLD,
    CONF_REFRESH_HOUR,
    CONF_TODAY_LABEL,
    CONF_TOMORROW_LABEL,
    DEFAULT_PRICE_SIMILARITY_THRESHOLD,
    DEFAULT_REFRESH_HOUR,
    DEFAULT_TODAY_LABEL,
    DEFAULT_TOMORROW_LABEL,
    MAX_PRICE_SIMILARITY_THRESHOLD,
    MAX_REFRESH_HOUR,
    MIN_PRICE_SIMILARITY_THRESHOLD,
    MIN_REFRESH_HOUR,
)
from homeassistant.const import CONF_API_KEY
from homeassistant.helpers.selector import (
    NumberSelector,
    NumberSelectorConfig,
    NumberSelectorMode,
    TextSelector,
    TextSelectorConfig,
    TextSelectorType,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


def get_user_schema(api_key: str | None = None) -> vol.Schema:
    """Return schema for user step (API key input)."""
    return vol.Schema(
        {
            vol.Required(
                CONF_API_KEY,
                default=api_key if api_key is not None else vol.UNDEFINED,
            ): TextSelector(
                TextSelectorConfig(
                    type=TextSelectorType.PASSWORD,
                ),
            ),
        }
    )


def get_reauth_confirm_schema() -> vol.Schema:
    """Return schema for reauth confirmation step."""
    return vol.Schema(
        {
            vol.Required(CONF_API_KEY): TextSelector(
                TextSelectorConfig(type=TextSelectorType.PASSWORD),
            ),
        }
    )


def get_options_init_schema(options: Mapping[str, Any]) -> vol.Schema:
    """Return schema for the options step (refresh hour, periods, labels)."""
    return vol.Schema(
        {
            vol.Optional(
                CONF_REFRESH_HOUR,
                default=int(options.get(CONF_REFRESH_HOUR, DEFAULT_REFRESH_HOUR)),
            ): vol.All(
                NumberSelector(
                    NumberSelectorConfig(
                        mode=NumberSelectorMode.BOX,
                        min=MIN_REFRESH_HOUR,
                        max=MAX_REFRESH_HOUR,
                        step=1,
                    )
                ),
                vol.Coerce(int),
            ),
            vol.Optional(
                CONF_PRICE_SIMILARITY_THRESHOLD,
                default=int(options.get(CONF_PRICE_SIMILARITY_THRESHOLD, DEFAULT_PRICE_SIMILARITY_THRESHOLD)),
            ): vol.All(
                NumberSelector(
                    NumberSelectorConfig(
                        mode=NumberSelectorMode.SLIDER,
                        min=MIN_PRICE_SIMILARITY_THRESHOLD,
                        max=MAX_PRICE_SIMILARITY_THRESHOLD,
                        step=1,
                        unit_of_measurement="%",
                    )
                ),
                vol.Coerce(int),
            ),
            vol.Optional(
                CONF_TODAY_LABEL,
                default=str(options.get(CONF_TODAY_LABEL, DEFAULT_TODAY_LABEL)),
            ): TextSelector(TextSelectorConfig(type=TextSelectorType.TEXT)),
            vol.Optional(
                CONF_TOMORROW_LABEL,
                default=str(options.get(CONF_TOMORROW_LABEL, DEFAULT_TOMORROW_LABEL)),
            ): TextSelector(TextSelectorConfig(type=TextSelectorType.TEXT)),
        }
    )
