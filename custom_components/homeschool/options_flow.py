# File: options_flow.py
"""Options Flow for the Homeschool Assignments integration.

Edits the general settings. Saving updates the entry options, which reloads
the integration through the update listener.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.helpers import selector

from . import const

_GENERAL_OPTIONS: dict[str, tuple[int, int, int]] = {
    # option: (default, min, max)
    const.CONF_LOOKAHEAD_DAYS: (
        const.DEFAULT_LOOKAHEAD_DAYS,
        const.MIN_LOOKAHEAD_DAYS,
        const.MAX_LOOKAHEAD_DAYS,
    ),
    const.CONF_MAX_INSTANCES: (
        const.DEFAULT_MAX_INSTANCES,
        const.MIN_MAX_INSTANCES,
        const.MAX_MAX_INSTANCES,
    ),
    const.CONF_CALENDAR_SHOW_PERIOD: (
        const.DEFAULT_CALENDAR_SHOW_PERIOD,
        const.MIN_CALENDAR_SHOW_PERIOD,
        const.MAX_CALENDAR_SHOW_PERIOD,
    ),
    const.CONF_UPDATE_INTERVAL: (
        const.DEFAULT_UPDATE_INTERVAL,
        const.MIN_UPDATE_INTERVAL,
        const.MAX_UPDATE_INTERVAL,
    ),
}


def build_general_options(user_input: dict[str, Any]) -> dict[str, int]:
    """Return complete, clamped integer options from (partial) input."""
    options: dict[str, int] = {}
    for key, (default, minimum, maximum) in _GENERAL_OPTIONS.items():
        value = int(user_input.get(key, default))
        options[key] = max(minimum, min(maximum, value))
    return options


def build_general_options_schema(current: dict[str, Any]) -> vol.Schema:
    """Build the options form, defaulting to the current values."""
    fields: dict[Any, Any] = {}
    for key, (default, minimum, maximum) in _GENERAL_OPTIONS.items():
        fields[vol.Required(key, default=current.get(key, default))] = (
            selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=minimum,
                    max=maximum,
                    step=1,
                )
            )
        )
    return vol.Schema(fields)


class HomeschoolOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the general settings."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Show and save the general settings."""
        if user_input is not None:
            options = build_general_options(user_input)
            const.LOGGER.debug("DEBUG: Saving Homeschool options: %s", options)
            return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=build_general_options_schema(dict(self.config_entry.options)),
        )
