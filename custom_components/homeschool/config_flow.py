# File: config_flow.py
"""Config flow for the Homeschool Assignments integration.

A single entry holds every family. Students, parents and assignments are
managed through services, so setup only asks for a title.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .options_flow import HomeschoolOptionsFlowHandler, build_general_options


class HomeschoolConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config flow for Homeschool Assignments."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Create the single integration entry."""
        if self._async_current_entries():
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            title = user_input.get(const.CONF_TITLE, "").strip() or const.HOMESCHOOL_TITLE
            const.LOGGER.info("INFO: Creating Homeschool entry '%s'", title)
            return self.async_create_entry(
                title=title, data={}, options=build_general_options({})
            )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        const.CONF_TITLE, default=const.HOMESCHOOL_TITLE
                    ): str,
                }
            ),
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> HomeschoolOptionsFlowHandler:
        """Return the Options Flow."""
        return HomeschoolOptionsFlowHandler()
