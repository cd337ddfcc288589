"""
Price position condition service handler.

Implements the `check_price_position` service: evaluates "is the current hour
among the N cheapest (or most expensive) hours of the next X hours" for use in
automations, returning both the exact and the tie-aware position.

Service: pstryk_prices.check_price_position
Response: {"position", "total", "matches", "tied_position", ...}

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

import voluptuous as vol

from custom_components.pstryk_prices.const import (
    DIRECTION_CHEAPEST,
    DIRECTIONS,
    DOMAIN,
    OPERATOR_LESS_OR_EQUAL,
    OPERATORS,
    POSITION_HOUR_WINDOWS,
)
from custom_components.pstryk_prices.coordinator.ranking import compare_position
from custom_components.pstryk_prices.coordinator.time_service import PstrykPricesTimeService
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv

from .helpers import get_loaded_coordinator

if TYPE_CHECKING:
    from homeassistant.core import ServiceCall, ServiceResponse

# Service constants
CHECK_PRICE_POSITION_SERVICE_NAME: Final = "check_price_position"
ATTR_ENTRY_ID: Final = "entry_id"
ATTR_HOUR_WINDOW: Final = "hour_window"
ATTR_DIRECTION: Final = "direction"
ATTR_OPERATOR: Final = "operator"
ATTR_POSITION: Final = "position"

# Service schema
CHECK_PRICE_POSITION_SERVICE_SCHEMA: Final = vol.Schema(
    {
        vol.Required(ATTR_ENTRY_ID): cv.string,
        vol.Required(ATTR_HOUR_WINDOW): vol.All(vol.Coerce(int), vol.In(POSITION_HOUR_WINDOWS)),
        vol.Optional(ATTR_DIRECTION, default=DIRECTION_CHEAPEST): vol.In(DIRECTIONS),
        vol.Optional(ATTR_OPERATOR, default=OPERATOR_LESS_OR_EQUAL): vol.In(OPERATORS),
        vol.Required(ATTR_POSITION): vol.All(vol.Coerce(int), vol.Range(min=1, max=max(POSITION_HOUR_WINDOWS))),
    }
)


async def handle_check_price_position(call: ServiceCall) -> ServiceResponse:
    """
    Evaluate a position condition for the current hour.

    The exact position decides "matches": hours sharing a price get
    consecutive positions in start order. The tie-aware position is returned
    alongside for display.

    Raises:
        ServiceValidationError: If entry_id is invalid or no price covers the current hour

    """
    entry_id: str = call.data[ATTR_ENTRY_ID]
    hour_window: int = call.data[ATTR_HOUR_WINDOW]
    direction: str = call.data.get(ATTR_DIRECTION, DIRECTION_CHEAPEST)
    operator_name: str = call.data.get(ATTR_OPERATOR, OPERATOR_LESS_OR_EQUAL)
    target: int = call.data[ATTR_POSITION]

    coordinator = get_loaded_coordinator(call.hass, entry_id)

    # Evaluate against the real clock, not the last timer tick
    time = PstrykPricesTimeService()
    result = coordinator.ranking.exact_price_position(
        hour_window,
        time=time,
        cheapest_first=direction == DIRECTION_CHEAPEST,
    )
    if result is None:
        raise ServiceValidationError(
            translation_domain=DOMAIN,
            translation_key="no_current_price",
        )

    position, total = result
    return {
        "position": position,
        "total": total,
        "matches": compare_position(position, operator_name, target),
        "tied_position": coordinator.ranking.tied_price_position(hour_window, time=time),
        "hour_window": hour_window,
        "direction": direction,
        "operator": operator_name,
        "target": target,
    }
