"""Main config flow for pstryk_prices integration."""

from __future__ import annotations

import hashlib
from typing import Any

from custom_components.pstryk_prices.config_flow_handlers.options_flow import (
    PstrykPricesOptionsFlowHandler,
)
from custom_components.pstryk_prices.config_flow_handlers.schemas import (
    get_reauth_confirm_schema,
    get_user_schema,
)
from custom_components.pstryk_prices.config_flow_handlers.validators import (
    PstrykPricesCannotConnectError,
    PstrykPricesInvalidAuthError,
    validate_api_key,
)
from custom_components.pstryk_prices.const import DEFAULT_NAME, DOMAIN, LOGGER, get_default_options
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_API_KEY
from homeassistant.core import callback


def get_unique_id(api_key: str) -> str:
    """Stable entry id derived from the API key without storing it in the registry."""
    return hashlib.sha256(api_key.strip().encode()).hexdigest()[:16]


class PstrykPricesConfigFlowHandler(ConfigFlow, domain=DOMAIN):
    """Config flow for pstryk_prices."""

    VERSION = 1
    MINOR_VERSION = 0

    def __init__(self) -> None:
        """Initialize the config flow."""
        super().__init__()
        self._reauth_entry: ConfigEntry | None = None

    @staticmethod
    @callback
    def async_get_options_flow(_config_entry: ConfigEntry) -> OptionsFlow:
        """Create an options flow for this configentry."""
        return PstrykPricesOptionsFlowHandler()

    async def _async_validate(self, api_key: str) -> dict[str, str]:
        """Validate the key and return form errors (empty on success)."""
        try:
            frame_count = await validate_api_key(self.hass, api_key)
        except PstrykPricesInvalidAuthError as exception:
            LOGGER.warning("API key rejected: %s", exception.__cause__ or exception)
            return {"base": "invalid_auth"}
        except PstrykPricesCannotConnectError as exception:
            LOGGER.error("Cannot reach the PSTRYK API: %s", exception.__cause__ or exception)
            return {"base": "cannot_connect"}

        LOGGER.debug("API key accepted, %d price frames available", frame_count)
        return {}

    async def async_step_user(
        self,
        user_input: dict | None = None,
    ) -> ConfigFlowResult:
        """Handle a flow initialized by the user."""
        _errors: dict[str, str] = {}

        if user_input is not None:
            api_key = user_input[CONF_API_KEY].strip()
            await self.async_set_unique_id(get_unique_id(api_key))
            self._abort_if_unique_id_configured()

            _errors = await self._async_validate(api_key)
            if not _errors:
                return self.async_create_entry(
                    title=DEFAULT_NAME,
                    data={CONF_API_KEY: api_key},
                    options=get_default_options(),
                )

        return self.async_show_form(
            step_id="user",
            data_schema=get_user_schema((user_input or {}).get(CONF_API_KEY)),
            errors=_errors,
        )

    async def async_step_reauth(self, entry_data: dict[str, Any]) -> ConfigFlowResult:  # noqa: ARG002
        """Handle reauth flow when the API key becomes invalid."""
        entry_id = self.context.get("entry_id")
        if entry_id:
            self._reauth_entry = self.hass.config_entries.async_get_entry(entry_id)
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(self, user_input: dict | None = None) -> ConfigFlowResult:
        """Confirm reauth dialog - prompt for a new API key."""
        _errors: dict[str, str] = {}

        if user_input is not None:
            api_key = user_input[CONF_API_KEY].strip()
            _errors = await self._async_validate(api_key)
            if not _errors and self._reauth_entry:
                self.hass.config_entries.async_update_entry(
                    self._reauth_entry,
                    unique_id=get_unique_id(api_key),
                    data={
                        **self._reauth_entry.data,
                        CONF_API_KEY: api_key,
                    },
                )
                await self.hass.config_entries.async_reload(self._reauth_entry.entry_id)
                return self.async_abort(reason="reauth_successful")

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=get_reauth_confirm_schema(),
            errors=_errors,
        )
