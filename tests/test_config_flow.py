"""Tests for the Homeschool Assignments config and options flows."""

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.homeschool import const
from custom_components.homeschool.options_flow import build_general_options


# ============================================================================
# Config flow
# ============================================================================


async def test_form_user_flow_success(hass: HomeAssistant) -> None:
    """The user step creates an entry with default options."""
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == const.CONFIG_FLOW_STEP_USER

    with patch(
        "custom_components.homeschool.async_setup_entry", return_value=True
    ) as mock_setup:
        result = await hass.config_entries.flow.async_configure(
            result.get("flow_id"), user_input={}
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == const.HOMESCHOOL_TITLE
    assert result.get("data") == {}
    assert result.get("options") == build_general_options({})
    assert len(mock_setup.mock_calls) == 1


async def test_form_custom_title(hass: HomeAssistant) -> None:
    """A blank title falls back to the default; others are trimmed."""
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    with patch("custom_components.homeschool.async_setup_entry", return_value=True):
        result = await hass.config_entries.flow.async_configure(
            result.get("flow_id"), user_input={const.CONF_TITLE: "  Lee Academy "}
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == "Lee Academy"


async def test_single_instance(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Only one entry can exist."""
    mock_config_entry.add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    assert result.get("type") == FlowResultType.ABORT
    assert result.get("reason") == const.TRANS_KEY_ERROR_SINGLE_INSTANCE


# ============================================================================
# Options flow
# ============================================================================


async def test_options_flow_updates_settings(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Saved options reload the entry with the new settings."""
    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == const.OPTIONS_FLOW_STEP_INIT

    result = await hass.config_entries.options.async_configure(
        result.get("flow_id"),
        user_input={
            const.CONF_LOOKAHEAD_DAYS: 14,
            const.CONF_MAX_INSTANCES: 3,
            const.CONF_CALENDAR_SHOW_PERIOD: 30,
            const.CONF_UPDATE_INTERVAL: 10,
        },
    )
    await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert dict(init_integration.options) == {
        const.CONF_LOOKAHEAD_DAYS: 14,
        const.CONF_MAX_INSTANCES: 3,
        const.CONF_CALENDAR_SHOW_PERIOD: 30,
        const.CONF_UPDATE_INTERVAL: 10,
    }
    assert init_integration.state is ConfigEntryState.LOADED

    coordinator = init_integration.runtime_data
    assert coordinator.lookahead_days == 14
    assert coordinator.max_instances == 3
    assert coordinator.calendar_show_period == 30


def test_build_general_options_clamps() -> None:
    """Stored options are complete integers within their ranges."""
    options = build_general_options(
        {const.CONF_LOOKAHEAD_DAYS: 400, const.CONF_MAX_INSTANCES: "0"}
    )

    assert options == {
        const.CONF_LOOKAHEAD_DAYS: const.MAX_LOOKAHEAD_DAYS,
        const.CONF_MAX_INSTANCES: const.MIN_MAX_INSTANCES,
        const.CONF_CALENDAR_SHOW_PERIOD: const.DEFAULT_CALENDAR_SHOW_PERIOD,
        const.CONF_UPDATE_INTERVAL: const.DEFAULT_UPDATE_INTERVAL,
    }
