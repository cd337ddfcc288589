"""Options flow for pstryk_prices integration."""

from __future__ import annotations

import logging
from typing import Any

from custom_components.pstryk_prices.config_flow_handlers.schemas import get_options_init_schema
from custom_components.pstryk_prices.config_flow_handlers.validators import (
    validate_label,
    validate_price_similarity_threshold,
    validate_refresh_hour,
)
from custom_components.pstryk_prices.const import (
    CONF_PRICE_SIMILARITY_THRESHOLD,
    CONF_REFRESH_HOUR,
    CONF_TODAY_LABEL,
    CONF_TOMORROW_LABEL,
    get_default_options,
)
from homeassistant.config_entries import ConfigFlowResult, OptionsFlow

_LOGGER = logging.getLogger(__name__)


class PstrykPricesOptionsFlowHandler(OptionsFlow):
    """Handle options for pstryk_prices entries."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> ConfigFlowResult:
        """Manage the options. Saving them reloads the entry."""
        errors: dict[str, str] = {}
        options = {**get_default_options(), **self.config_entry.options}

        if user_input is not None:
            if CONF_REFRESH_HOUR in user_input and not validate_refresh_hour(user_input[CONF_REFRESH_HOUR]):
                errors[CONF_REFRESH_HOUR] = "invalid_refresh_hour"

            if CONF_PRICE_SIMILARITY_THRESHOLD in user_input and not validate_price_similarity_threshold(
                user_input[CONF_PRICE_SIMILARITY_THRESHOLD]
            ):
                errors[CONF_PRICE_SIMILARITY_THRESHOLD] = "invalid_similarity_threshold"

            for label_key in (CONF_TODAY_LABEL, CONF_TOMORROW_LABEL):
                if label_key in user_input and not validate_label(user_input[label_key]):
                    errors[label_key] = "invalid_label"

            if not errors:
                options.update(user_input)
                _LOGGER.debug("Saving options for %s: %s", self.config_entry.title, options)
                return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id="init",
            data_schema=get_options_init_schema(options),
            errors=errors,
        )
