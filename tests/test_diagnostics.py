"""Tests for Homeschool Assignments diagnostics."""

# pylint: disable=redefined-outer-name  # Pytest fixtures
# pylint: disable=unused-argument  # Fixtures needed for test setup

from homeassistant.core import HomeAssistant
from homeassistant.helpers import device_registry as dr
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.homeschool import const
from custom_components.homeschool.diagnostics import (
    async_get_config_entry_diagnostics,
    async_get_device_diagnostics,
)
from tests.helpers import ALICE_ID, BEN_ID, MATH_ID, READING_ID


async def test_config_entry_diagnostics(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Entry diagnostics return the options and raw storage data."""
    result = await async_get_config_entry_diagnostics(hass, init_integration)

    assert result["options"] == dict(init_integration.options)
    data = result["data"]
    assert set(data[const.DATA_STUDENTS]) == {ALICE_ID, BEN_ID}
    assert set(data[const.DATA_ASSIGNMENTS]) == {MATH_ID, READING_ID}
    assert f"{READING_ID}|{ALICE_ID}|2024-01-10" in data[const.DATA_STUDENT_ASSIGNMENTS]


async def test_student_device_diagnostics(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Device diagnostics describe one student."""
    device_registry = dr.async_get(hass)
    device = device_registry.async_get_device(identifiers={(const.DOMAIN, ALICE_ID)})
    assert device is not None

    result = await async_get_device_diagnostics(hass, init_integration, device)

    assert result["student_id"] == ALICE_ID
    assert result["student_data"][const.DATA_STUDENT_NAME] == "Alice"
    overdue = result["assignments"][const.BUCKET_OVERDUE]
    assert [view[const.DATA_ASSIGNMENT_INTERNAL_ID] for view in overdue] == [MATH_ID]
    assert all(
        record[const.DATA_SA_STUDENT_ID] == ALICE_ID
        for record in result["records"].values()
    )
    assert len(result["records"]) == 3
    assert result["notes"] == []
    assert result["events"] == []


async def test_system_device_diagnostics(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """The family device has no student snapshot."""
    device_registry = dr.async_get(hass)
    device = device_registry.async_get_device(
        identifiers={(const.DOMAIN, f"{init_integration.entry_id}_system")}
    )
    assert device is not None

    result = await async_get_device_diagnostics(hass, init_integration, device)

    assert "error" in result
