"""Tests for the Homeschool Assignments calendar platform.

Covers all-day event generation for one-time and recurring assignments,
completion markers on finished instances, the show-period horizon for
recurring series, and user-created events beside the read-only assignment
entries.
"""

# pylint: disable=redefined-outer-name  # Pytest fixtures
# pylint: disable=unused-argument  # Fixtures needed for test setup

import datetime
from http import HTTPStatus
from typing import Any, Callable, Coroutine
import urllib.parse
from zoneinfo import ZoneInfo

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from pytest_homeassistant_custom_component.common import MockConfigEntry
from pytest_homeassistant_custom_component.typing import ClientSessionGenerator

from custom_components.homeschool import const
from tests.helpers import (
    ALICE_ID,
    BEN_ID,
    MATH_ID,
    READING_ID,
    call_service,
    get_entity_id,
    toggle_assignment,
)

# Pacific midnights bracketing the frozen week
WEEK_START = "2024-01-08T00:00:00-08:00"
WEEK_END = "2024-01-22T00:00:00-08:00"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def get_events_fixture(
    hass_client: ClientSessionGenerator,
) -> Callable[[str, str, str], Coroutine[Any, Any, list[dict[str, Any]]]]:
    """Fetch calendar events from HTTP API.

    Args:
        entity_id: Calendar entity ID
        start: Start datetime in ISO format
        end: End datetime in ISO format (exclusive)

    Returns:
        List of calendar event dicts with summary, start, end, description
    """

    async def _fetch(entity_id: str, start: str, end: str) -> list[dict[str, Any]]:
        client = await hass_client()
        url = (
            f"/api/calendars/{entity_id}"
            f"?start={urllib.parse.quote(start)}"
            f"&end={urllib.parse.quote(end)}"
        )
        response = await client.get(url)
        assert (
            response.status == HTTPStatus.OK
        ), f"Calendar API returned {response.status}"
        return await response.json()

    return _fetch


def _calendar_entity_id(
    hass: HomeAssistant, entry: MockConfigEntry, student_id: str
) -> str:
    entity_id = get_entity_id(
        hass,
        "calendar",
        f"{entry.entry_id}_{student_id}{const.CALENDAR_UID_SUFFIX_CALENDAR}",
    )
    assert entity_id is not None
    return entity_id


def _event_day(event: dict[str, Any]) -> str:
    """Return the all-day start date of an API event."""
    start = event["start"]
    return start["date"] if isinstance(start, dict) else start


def _day_summaries(events: list[dict[str, Any]]) -> list[tuple[str, str]]:
    return [(_event_day(event), event["summary"]) for event in events]


# ============================================================================
# Event generation
# ============================================================================


async def test_events_for_two_weeks(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """One-time and recurring assignments appear on their dates."""
    entity_id = _calendar_entity_id(hass, init_integration, ALICE_ID)

    events = await get_events_fixture(entity_id, WEEK_START, WEEK_END)

    assert _day_summaries(events) == [
        ("2024-01-08", "Reading Log"),
        ("2024-01-10", "✓ Reading Log"),
        ("2024-01-12", "Math Worksheet"),
        ("2024-01-15", "Reading Log"),
        ("2024-01-17", "Reading Log"),
    ]


async def test_completion_marker_is_per_student(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """Alice's finished reading does not mark Ben's calendar."""
    entity_id = _calendar_entity_id(hass, init_integration, BEN_ID)

    events = await get_events_fixture(entity_id, WEEK_START, WEEK_END)

    assert ("2024-01-10", "Reading Log") in _day_summaries(events)
    assert all(not event["summary"].startswith("✓") for event in events)
    assert all(event["summary"] != "Math Worksheet" for event in events)


async def test_event_description(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """Descriptions carry category and links."""
    entity_id = _calendar_entity_id(hass, init_integration, ALICE_ID)

    events = await get_events_fixture(
        entity_id, "2024-01-15T00:00:00-08:00", "2024-01-16T00:00:00-08:00"
    )

    assert len(events) == 1
    description = events[0]["description"]
    assert description.startswith("Reading")
    assert "Library" in description


async def test_recurring_events_stop_at_show_period(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """Recurring series are not expanded beyond the show period."""
    entity_id = _calendar_entity_id(hass, init_integration, ALICE_ID)

    events = await get_events_fixture(
        entity_id, "2024-06-01T00:00:00-07:00", "2024-06-30T00:00:00-07:00"
    )

    assert events == []


async def test_toggle_marks_event(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """Completing an instance prefixes that day's event only."""
    await toggle_assignment(
        hass,
        {
            const.FIELD_ASSIGNMENT_ID: READING_ID,
            const.FIELD_STUDENT_NAME: "Alice",
            const.FIELD_INSTANCE_DATE: "2024-01-17",
        },
    )
    entity_id = _calendar_entity_id(hass, init_integration, ALICE_ID)

    events = await get_events_fixture(entity_id, WEEK_START, WEEK_END)

    summaries = dict(_day_summaries(events))
    assert summaries["2024-01-15"] == "Reading Log"
    assert summaries["2024-01-17"] == "✓ Reading Log"


# ============================================================================
# Entity state
# ============================================================================


async def test_calendar_state_shows_open_work(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """The current event is today's open assignment."""
    entity_id = _calendar_entity_id(hass, init_integration, ALICE_ID)

    state = hass.states.get(entity_id)

    assert state is not None
    assert state.state == "on"
    assert state.attributes["message"] == "Reading Log"
    assert state.attributes[const.ATTR_STUDENT_NAME] == "Alice"


async def test_rich_text_content_in_description(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """Document content contributes its text instead of breaking the event."""
    await call_service(
        hass,
        const.SERVICE_UPDATE_ASSIGNMENT,
        {
            const.FIELD_ASSIGNMENT_ID: MATH_ID,
            const.FIELD_CONTENT: {
                "type": "doc",
                "content": [
                    {
                        "type": "paragraph",
                        "content": [{"type": "text", "text": "Problems 1-20"}],
                    }
                ],
            },
        },
    )
    entity_id = _calendar_entity_id(hass, init_integration, ALICE_ID)

    events = await get_events_fixture(
        entity_id, "2024-01-12T00:00:00-08:00", "2024-01-13T00:00:00-08:00"
    )

    assert len(events) == 1
    assert events[0]["description"] == "Math\nProblems 1-20"


# ============================================================================
# User events
# ============================================================================


def _calendar_entity(hass: HomeAssistant, entry: MockConfigEntry, student_id: str):
    return hass.data["calendar"].get_entity(
        _calendar_entity_id(hass, entry, student_id)
    )


async def test_user_event_on_own_calendar(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """An all-day event created on Alice's calendar shows there only."""
    entity = _calendar_entity(hass, init_integration, ALICE_ID)

    await entity.async_create_event(
        summary="Aquarium trip",
        dtstart=datetime.date(2024, 1, 16),
        dtend=datetime.date(2024, 1, 17),
        description="Bring lunch",
    )
    await hass.async_block_till_done()

    events = await get_events_fixture(entity.entity_id, WEEK_START, WEEK_END)
    assert ("2024-01-16", "Aquarium trip") in _day_summaries(events)
    trip = next(event for event in events if event["summary"] == "Aquarium trip")
    assert trip["description"] == "Bring lunch"

    ben_events = await get_events_fixture(
        _calendar_entity_id(hass, init_integration, BEN_ID), WEEK_START, WEEK_END
    )
    assert all(event["summary"] != "Aquarium trip" for event in ben_events)


async def test_timed_event_sorts_after_all_day(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    get_events_fixture: Callable,
) -> None:
    """Timed events keep their times and sort by local start."""
    entity = _calendar_entity(hass, init_integration, ALICE_ID)
    pacific = ZoneInfo("US/Pacific")

    await entity.async_create_event(
        summary="Piano lesson",
        dtstart=datetime.datetime(2024, 1, 15, 15, 0, tzinfo=pacific),
        dtend=datetime.datetime(2024, 1, 15, 16, 0, tzinfo=pacific),
    )
    await hass.async_block_till_done()

    events = await get_events_fixture(
        entity.entity_id, "2024-01-15T00:00:00-08:00", "2024-01-16T00:00:00-08:00"
    )
    assert [event["summary"] for event in events] == ["Reading Log", "Piano lesson"]
    assert events[1]["start"]["dateTime"].startswith("2024-01-15T15:00:00")


async def test_update_and_delete_user_event(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """User events can be edited and removed through the calendar."""
    coordinator = init_integration.runtime_data
    entity = _calendar_entity(hass, init_integration, ALICE_ID)
    await entity.async_create_event(
        summary="Co-op", dtstart=datetime.date(2024, 1, 19)
    )
    uid = next(iter(coordinator.events_data))
    assert coordinator.events_data[uid][const.DATA_EVENT_END] == "2024-01-20"

    await entity.async_update_event(
        uid,
        {
            "summary": "Co-op (gym)",
            "dtstart": datetime.date(2024, 1, 19),
            "dtend": datetime.date(2024, 1, 20),
        },
    )
    assert coordinator.events_data[uid][const.DATA_EVENT_TITLE] == "Co-op (gym)"

    # Another student's calendar cannot touch it
    with pytest.raises(HomeAssistantError):
        await _calendar_entity(hass, init_integration, BEN_ID).async_delete_event(uid)

    await entity.async_delete_event(uid)
    assert coordinator.events_data == {}


async def test_assignment_entries_are_read_only(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Generated assignment entries cannot be edited or deleted here."""
    entity = _calendar_entity(hass, init_integration, ALICE_ID)
    uid = f"{READING_ID}_2024-01-15"

    with pytest.raises(HomeAssistantError) as err:
        await entity.async_delete_event(uid)
    assert err.value.translation_key == const.TRANS_KEY_ERROR_CALENDAR_READ_ONLY

    with pytest.raises(HomeAssistantError) as err:
        await entity.async_update_event(uid, {"summary": "Skip it"})
    assert err.value.translation_key == const.TRANS_KEY_ERROR_CALENDAR_READ_ONLY
    assert READING_ID in init_integration.runtime_data.assignments_data


@pytest.mark.parametrize(
    ("event", "translation_key"),
    [
        (
            {
                "summary": "Co-op",
                "dtstart": datetime.date(2024, 1, 19),
                "dtend": datetime.date(2024, 1, 20),
                "rrule": "FREQ=WEEKLY",
            },
            const.TRANS_KEY_ERROR_EVENT_RECURRENCE,
        ),
        (
            {
                "summary": "Backwards",
                "dtstart": datetime.date(2024, 1, 19),
                "dtend": datetime.date(2024, 1, 18),
            },
            const.TRANS_KEY_ERROR_INVALID_EVENT_RANGE,
        ),
        (
            {"dtstart": datetime.date(2024, 1, 19)},
            const.TRANS_KEY_ERROR_INVALID_TITLE,
        ),
    ],
)
async def test_invalid_user_events_rejected(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    event: dict[str, Any],
    translation_key: str,
) -> None:
    """Repeating, backwards and untitled events are rejected."""
    entity = _calendar_entity(hass, init_integration, ALICE_ID)

    with pytest.raises(ServiceValidationError) as err:
        await entity.async_create_event(**event)
    assert err.value.translation_key == translation_key
    assert init_integration.runtime_data.events_data == {}
