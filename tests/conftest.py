"""Shared fixtures for Homeschool Assignments tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.homeschool import const
from custom_components.homeschool.options_flow import build_general_options
from tests.helpers.constants import (
    ALICE_ID,
    BEN_ID,
    FROZEN_NOW,
    MATH_ID,
    PARENT_ID,
    READING_ID,
)

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
async def mock_hass_users(hass: HomeAssistant) -> dict[str, Any]:
    """Create mock Home Assistant users for testing."""
    admin_user = await hass.auth.async_create_user(
        "Admin User",
        group_ids=["system-admin"],
    )
    parent_user = await hass.auth.async_create_user(
        "Parent One",
        group_ids=["system-users"],
    )
    stranger_user = await hass.auth.async_create_user(
        "Neighbor",
        group_ids=["system-users"],
    )
    alice_user = await hass.auth.async_create_user(
        "Alice",
        group_ids=["system-users"],
    )
    ben_user = await hass.auth.async_create_user(
        "Ben",
        group_ids=["system-users"],
    )

    return {
        "admin": admin_user,
        "parent": parent_user,
        "stranger": stranger_user,
        "alice": alice_user,
        "ben": ben_user,
    }


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.HOMESCHOOL_TITLE,
        data={},
        options=build_general_options({}),
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data(mock_hass_users: dict[str, Any]) -> dict[str, Any]:
    """Return stored data for one family.

    Parent One owns Alice. Ben has no parent. Alice has an overdue one-time
    Math Worksheet; both students share a Monday/Wednesday Reading Log that
    started the week before.
    """
    return {
        const.DATA_META: {
            const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
            const.DATA_META_LAST_REFRESH_DATE: None,
        },
        const.DATA_PARENTS: {
            PARENT_ID: {
                const.DATA_PARENT_INTERNAL_ID: PARENT_ID,
                const.DATA_PARENT_NAME: "Parent One",
                const.DATA_PARENT_HA_USER_ID: mock_hass_users["parent"].id,
                const.DATA_PARENT_ASSOCIATED_STUDENTS: [ALICE_ID],
                const.DATA_PARENT_IS_ADMIN: False,
            },
        },
        const.DATA_STUDENTS: {
            ALICE_ID: {
                const.DATA_STUDENT_INTERNAL_ID: ALICE_ID,
                const.DATA_STUDENT_NAME: "Alice",
                const.DATA_STUDENT_HA_USER_ID: mock_hass_users["alice"].id,
                const.DATA_STUDENT_PARENT_ID: PARENT_ID,
            },
            BEN_ID: {
                const.DATA_STUDENT_INTERNAL_ID: BEN_ID,
                const.DATA_STUDENT_NAME: "Ben",
                const.DATA_STUDENT_HA_USER_ID: mock_hass_users["ben"].id,
                const.DATA_STUDENT_PARENT_ID: None,
            },
        },
        const.DATA_ASSIGNMENTS: {
            MATH_ID: {
                const.DATA_ASSIGNMENT_INTERNAL_ID: MATH_ID,
                const.DATA_ASSIGNMENT_TITLE: "Math Worksheet",
                const.DATA_ASSIGNMENT_CONTENT: "Page 12, problems 1-20",
                const.DATA_ASSIGNMENT_LINKS: [],
                const.DATA_ASSIGNMENT_DUE_DATE: "2024-01-12",
                const.DATA_ASSIGNMENT_IS_RECURRING: False,
                const.DATA_ASSIGNMENT_RECURRENCE_PATTERN: None,
                const.DATA_ASSIGNMENT_RECURRENCE_END_DATE: None,
                const.DATA_ASSIGNMENT_NEXT_DUE_DATE: None,
                const.DATA_ASSIGNMENT_CATEGORY: "Math",
                const.DATA_ASSIGNMENT_PARENT_ID: PARENT_ID,
                const.DATA_ASSIGNMENT_CREATED_AT: "2024-01-08T15:00:00+00:00",
                const.DATA_ASSIGNMENT_UPDATED_AT: "2024-01-08T15:00:00+00:00",
            },
            READING_ID: {
                const.DATA_ASSIGNMENT_INTERNAL_ID: READING_ID,
                const.DATA_ASSIGNMENT_TITLE: "Reading Log",
                const.DATA_ASSIGNMENT_CONTENT: None,
                const.DATA_ASSIGNMENT_LINKS: [
                    {
                        const.LINK_TITLE: "Library",
                        const.LINK_URL: "https://library.example.org",
                        const.LINK_TYPE: const.LINK_TYPE_LINK,
                    }
                ],
                const.DATA_ASSIGNMENT_DUE_DATE: "2024-01-08",
                const.DATA_ASSIGNMENT_IS_RECURRING: True,
                const.DATA_ASSIGNMENT_RECURRENCE_PATTERN: {
                    const.PATTERN_DAYS: ["monday", "wednesday"],
                    const.PATTERN_FREQUENCY: const.FREQUENCY_WEEKLY,
                },
                const.DATA_ASSIGNMENT_RECURRENCE_END_DATE: None,
                const.DATA_ASSIGNMENT_NEXT_DUE_DATE: "2024-01-08",
                const.DATA_ASSIGNMENT_CATEGORY: "Reading",
                const.DATA_ASSIGNMENT_PARENT_ID: PARENT_ID,
                const.DATA_ASSIGNMENT_CREATED_AT: "2024-01-08T15:00:00+00:00",
                const.DATA_ASSIGNMENT_UPDATED_AT: "2024-01-08T15:00:00+00:00",
            },
        },
        const.DATA_STUDENT_ASSIGNMENTS: {
            f"{MATH_ID}|{ALICE_ID}": {
                const.DATA_SA_ASSIGNMENT_ID: MATH_ID,
                const.DATA_SA_STUDENT_ID: ALICE_ID,
                const.DATA_SA_INSTANCE_DATE: None,
                const.DATA_SA_COMPLETED: False,
                const.DATA_SA_COMPLETED_AT: None,
                const.DATA_SA_CREATED_AT: "2024-01-08T15:00:00+00:00",
            },
            f"{READING_ID}|{ALICE_ID}": {
                const.DATA_SA_ASSIGNMENT_ID: READING_ID,
                const.DATA_SA_STUDENT_ID: ALICE_ID,
                const.DATA_SA_INSTANCE_DATE: None,
                const.DATA_SA_COMPLETED: False,
                const.DATA_SA_COMPLETED_AT: None,
                const.DATA_SA_CREATED_AT: "2024-01-08T15:00:00+00:00",
            },
            f"{READING_ID}|{BEN_ID}": {
                const.DATA_SA_ASSIGNMENT_ID: READING_ID,
                const.DATA_SA_STUDENT_ID: BEN_ID,
                const.DATA_SA_INSTANCE_DATE: None,
                const.DATA_SA_COMPLETED: False,
                const.DATA_SA_COMPLETED_AT: None,
                const.DATA_SA_CREATED_AT: "2024-01-08T15:00:00+00:00",
            },
            # Alice finished last Wednesday's reading
            f"{READING_ID}|{ALICE_ID}|2024-01-10": {
                const.DATA_SA_ASSIGNMENT_ID: READING_ID,
                const.DATA_SA_STUDENT_ID: ALICE_ID,
                const.DATA_SA_INSTANCE_DATE: "2024-01-10",
                const.DATA_SA_COMPLETED: True,
                const.DATA_SA_COMPLETED_AT: "2024-01-10T23:00:00+00:00",
                const.DATA_SA_CREATED_AT: "2024-01-10T23:00:00+00:00",
            },
        },
    }


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    freezer: Any,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the integration on Monday 2024-01-15 with mocked storage."""
    freezer.move_to(FROZEN_NOW)
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry

