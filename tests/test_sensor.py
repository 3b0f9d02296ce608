"""Tests for Homeschool Assignments sensors.

The clock is frozen on Monday 2024-01-15. Alice has Friday's worksheet
overdue and Monday's reading due today; Ben only has the reading.
"""

# pylint: disable=redefined-outer-name  # Pytest fixtures
# pylint: disable=unused-argument  # Fixtures needed for test setup

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.homeschool import const
from tests.helpers import (
    ALICE_ID,
    BEN_ID,
    MATH_ID,
    READING_ID,
    TODAY,
    get_state_attributes,
    toggle_assignment,
)


def _assignments_uid(entry: MockConfigEntry, student_id: str) -> str:
    return f"{entry.entry_id}_{student_id}{const.SENSOR_UID_SUFFIX_ASSIGNMENTS}"


def _history_uid(entry: MockConfigEntry, student_id: str) -> str:
    return f"{entry.entry_id}_{student_id}{const.SENSOR_UID_SUFFIX_HISTORY}"


def _chart_uid(entry: MockConfigEntry) -> str:
    return f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_COMPLETION_CHART}"


def _ids(items: list[dict[str, Any]]) -> list[str]:
    return [item[const.ATTR_ASSIGNMENT_ID] for item in items]


# ============================================================================
# Student assignments sensor
# ============================================================================


async def test_assignments_sensor_buckets(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """State counts open work due today; attributes carry the buckets."""
    state, attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, ALICE_ID)
    )

    assert state == "1"
    assert attrs[const.ATTR_STUDENT_NAME] == "Alice"
    assert attrs[const.ATTR_TODAY] == TODAY
    assert attrs[const.ATTR_OVERDUE_COUNT] == 1
    assert attrs[const.ATTR_DUE_TODAY_COUNT] == 1
    assert attrs[const.ATTR_UPCOMING_COUNT] == 0
    assert _ids(attrs[const.ATTR_OVERDUE]) == [MATH_ID]
    assert _ids(attrs[const.ATTR_DUE_TODAY]) == [READING_ID]

    overdue = attrs[const.ATTR_OVERDUE][0]
    assert overdue[const.DATA_ASSIGNMENT_DATE_LABEL] == const.LABEL_OVERDUE
    assert overdue[const.DATA_ASSIGNMENT_URGENCY] == const.URGENCY_OVERDUE
    assert const.DATA_ASSIGNMENT_INSTANCES not in overdue

    reading = attrs[const.ATTR_DUE_TODAY][0]
    assert reading[const.ATTR_IS_RECURRING] is True
    assert [i[const.INSTANCE_DATE] for i in reading[const.DATA_ASSIGNMENT_INSTANCES]] == [
        "2024-01-15",
        "2024-01-17",
        "2024-01-22",
    ]
    assert reading[const.DATA_ASSIGNMENT_ASSIGNED_STUDENTS] == ["Alice", "Ben"]


async def test_toggle_updates_sensor(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Completing today's reading leaves nothing open today."""
    await toggle_assignment(
        hass,
        {const.FIELD_ASSIGNMENT_ID: READING_ID, const.FIELD_STUDENT_NAME: "Alice"},
    )

    state, attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, ALICE_ID)
    )
    assert state == "0"
    # Completed work due today stays in the today bucket
    assert attrs[const.ATTR_DUE_TODAY_COUNT] == 1
    assert attrs[const.ATTR_DUE_TODAY][0][const.DATA_ASSIGNMENT_COMPLETED] is True

    # Ben's copy of the reading is untouched
    ben_state, _ = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, BEN_ID)
    )
    assert ben_state == "1"


async def test_completing_overdue_moves_to_history(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A finished late assignment leaves the overdue bucket."""
    await toggle_assignment(
        hass,
        {const.FIELD_ASSIGNMENT_ID: MATH_ID, const.FIELD_STUDENT_NAME: "Alice"},
    )

    _, attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, ALICE_ID)
    )
    assert attrs[const.ATTR_OVERDUE_COUNT] == 0

    state, history = get_state_attributes(
        hass, "sensor", _history_uid(init_integration, ALICE_ID)
    )
    assert state == "2"
    assert history[const.ATTR_COMPLETED_COUNT] == 1
    assert _ids(history[const.ATTR_PAST]) == [MATH_ID, READING_ID]


async def test_new_assignment_is_upcoming(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """An assignment due later this week shows as upcoming."""
    await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_CREATE_ASSIGNMENT,
        {
            const.FIELD_TITLE: "History Essay",
            const.FIELD_DUE_DATE: "2024-01-16",
            const.FIELD_STUDENT_NAMES: ["Ben"],
        },
        blocking=True,
    )
    await hass.async_block_till_done()

    _, attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, BEN_ID)
    )
    assert attrs[const.ATTR_UPCOMING_COUNT] == 1
    essay = attrs[const.ATTR_UPCOMING][0]
    assert essay[const.DATA_ASSIGNMENT_TITLE] == "History Essay"
    assert essay[const.DATA_ASSIGNMENT_DATE_LABEL] == const.LABEL_DUE_TOMORROW


# ============================================================================
# Completion chart
# ============================================================================


async def test_completion_chart(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Completions are counted per student per local day."""
    state, attrs = get_state_attributes(hass, "sensor", _chart_uid(init_integration))

    assert state == "1"
    assert attrs[const.ATTR_CHART_DAYS] == [
        "2024-01-09",
        "2024-01-10",
        "2024-01-11",
        "2024-01-12",
        "2024-01-13",
        "2024-01-14",
        "2024-01-15",
    ]
    assert attrs[const.ATTR_CHART_SERIES] == {
        "Alice": [0, 1, 0, 0, 0, 0, 0],
        "Ben": [0, 0, 0, 0, 0, 0, 0],
    }

    await toggle_assignment(
        hass,
        {const.FIELD_ASSIGNMENT_ID: READING_ID, const.FIELD_STUDENT_NAME: "Ben"},
    )

    state, attrs = get_state_attributes(hass, "sensor", _chart_uid(init_integration))
    assert state == "2"
    assert attrs[const.ATTR_CHART_SERIES]["Ben"][-1] == 1


async def test_recurring_summary_has_next_due_date(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Recurring summaries expose the stored next occurrence."""
    _, attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, ALICE_ID)
    )

    reading = attrs[const.ATTR_DUE_TODAY][0]
    assert reading[const.DATA_ASSIGNMENT_NEXT_DUE_DATE] == "2024-01-15"
    assert const.DATA_ASSIGNMENT_NEXT_DUE_DATE not in attrs[const.ATTR_OVERDUE][0]


async def test_student_notes_newest_first(
    hass: HomeAssistant, init_integration: MockConfigEntry, freezer: Any
) -> None:
    """The assignments sensor lists the student's notes, newest first."""
    for title in ("Week 2 plan", "Stuck on #14"):
        await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_ADD_NOTE,
            {
                const.FIELD_STUDENT_NAME: "Alice",
                const.FIELD_TITLE: title,
                const.FIELD_CATEGORY: "Log",
                const.FIELD_ASSIGNMENT_ID: MATH_ID,
            },
            blocking=True,
        )
        freezer.tick(60)
    await hass.async_block_till_done()

    _, attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, ALICE_ID)
    )
    notes = attrs[const.ATTR_NOTES]
    assert [note[const.DATA_NOTE_TITLE] for note in notes] == [
        "Stuck on #14",
        "Week 2 plan",
    ]
    assert notes[0][const.ATTR_ASSIGNMENT_ID] == MATH_ID
    assert notes[0][const.ATTR_NOTE_ID]

    _, ben_attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, BEN_ID)
    )
    assert ben_attrs[const.ATTR_NOTES] == []


# ============================================================================
# History sensor
# ============================================================================


async def test_finished_series_counts_last_occurrence(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """An ended weekly series completed on its last day counts as completed."""
    await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_CREATE_ASSIGNMENT,
        {
            const.FIELD_TITLE: "Spelling Drill",
            const.FIELD_DUE_DATE: "2024-01-03",
            const.FIELD_STUDENT_NAMES: ["Ben"],
            const.FIELD_IS_RECURRING: True,
            const.FIELD_RECURRENCE_DAYS: ["wednesday"],
            const.FIELD_RECURRENCE_FREQUENCY: const.FREQUENCY_WEEKLY,
            const.FIELD_RECURRENCE_END_DATE: "2024-01-10",
        },
        blocking=True,
    )
    await toggle_assignment(
        hass,
        {
            const.FIELD_ASSIGNMENT_TITLE: "Spelling Drill",
            const.FIELD_STUDENT_NAME: "Ben",
            const.FIELD_INSTANCE_DATE: "2024-01-10",
        },
    )

    _, attrs = get_state_attributes(
        hass, "sensor", _assignments_uid(init_integration, BEN_ID)
    )
    assert attrs[const.ATTR_OVERDUE_COUNT] == 0

    _, history = get_state_attributes(
        hass, "sensor", _history_uid(init_integration, BEN_ID)
    )
    drill = next(
        item
        for item in history[const.ATTR_PAST]
        if item[const.DATA_ASSIGNMENT_TITLE] == "Spelling Drill"
    )
    assert drill[const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE] == "2024-01-10"
    assert drill[const.DATA_ASSIGNMENT_EFFECTIVE_COMPLETED] is True
    assert drill[const.DATA_ASSIGNMENT_NEXT_DUE_DATE] == "2024-01-10"
    # Ben's reading due today is still open
    assert history[const.ATTR_COMPLETED_COUNT] == 1
