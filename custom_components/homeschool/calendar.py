"""Calendar platform for Homeschool Assignments integration.

Provides a per-student calendar of assignment due dates. One-time assignments
appear on their due date; recurring assignments appear on every occurrence,
bounded by the configured show period.

Assignment entries are read-only here (they are managed with the assignment
services). Users may add, edit and delete their own single events (field
trips, co-op days) on the same calendar.
"""

from __future__ import annotations

import datetime
from typing import Any

from homeassistant.components.calendar import (
    CalendarEntity,
    CalendarEntityFeature,
    CalendarEvent,
)
from homeassistant.components.calendar.const import (
    EVENT_DESCRIPTION,
    EVENT_END,
    EVENT_RRULE,
    EVENT_START,
    EVENT_SUMMARY,
)
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const, data_builders as db
from .coordinator import HomeschoolConfigEntry, HomeschoolDataCoordinator
from .engines.completion_engine import CompletionEngine
from .engines.schedule_engine import RecurrenceEngine
from .entity import HomeschoolStudentEntity
from .helpers.entity_helpers import get_event_signal
from .utils import dt_utils

# Coordinator-based entities don't poll
PARALLEL_UPDATES = 0


async def async_setup_entry(
    hass: HomeAssistant,
    entry: HomeschoolConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Homeschool calendar platform."""
    coordinator = entry.runtime_data

    async_add_entities(
        StudentAssignmentCalendar(
            coordinator,
            entry,
            student_id,
            student_info.get(const.DATA_STUDENT_NAME, f"Student {student_id}"),
        )
        for student_id, student_info in coordinator.students_data.items()
    )

    @callback
    def _on_student_created(payload: dict[str, Any]) -> None:
        student_id = payload["student_id"]
        student_info = coordinator.students_data.get(student_id)
        if student_info is None:
            return
        async_add_entities(
            [
                StudentAssignmentCalendar(
                    coordinator,
                    entry,
                    student_id,
                    student_info[const.DATA_STUDENT_NAME],
                )
            ]
        )

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_STUDENT_CREATED),
            _on_student_created,
        )
    )


class StudentAssignmentCalendar(HomeschoolStudentEntity, CalendarEntity):
    """Calendar entity listing one student's assignments and events."""

    _attr_translation_key = const.TRANS_KEY_CALENDAR_NAME
    _attr_supported_features = (
        CalendarEntityFeature.CREATE_EVENT
        | CalendarEntityFeature.DELETE_EVENT
        | CalendarEntityFeature.UPDATE_EVENT
    )

    def __init__(
        self,
        coordinator: HomeschoolDataCoordinator,
        entry: HomeschoolConfigEntry,
        student_id: str,
        student_name: str,
    ) -> None:
        """Initialize the calendar entity."""
        super().__init__(coordinator, entry, student_id, student_name)
        self._attr_unique_id = (
            f"{entry.entry_id}_{student_id}{const.CALENDAR_UID_SUFFIX_CALENDAR}"
        )

    @property
    def event(self) -> CalendarEvent | None:
        """Return the first open entry today, if any."""
        today = dt_utils.dt_today_local()
        entries = self._generate_entries(today, today)
        for event, completed in entries:
            if not completed:
                return event
        return entries[0][0] if entries else None

    async def async_get_events(
        self,
        hass: HomeAssistant,
        start_date: datetime.datetime,
        end_date: datetime.datetime,
    ) -> list[CalendarEvent]:
        """Return entries overlapping [start_date, end_date)."""
        tz = dt_utils.get_default_timezone()
        if start_date.tzinfo:
            start_date = start_date.astimezone(tz)
        if end_date.tzinfo:
            end_date = end_date.astimezone(tz)
        window_start = start_date.date()
        window_end = end_date
        # End is exclusive; midnight means the previous day is the last one
        last_day = window_end.date()
        if window_end.time() == datetime.time.min and last_day > window_start:
            last_day = dt_utils.dt_add_days(last_day, -1)
        return [event for event, _ in self._generate_entries(window_start, last_day)]

    async def async_create_event(self, **kwargs: Any) -> None:
        """Add a user event (field trip, co-op day) to this student's calendar."""
        try:
            self.coordinator.event_manager.create_event(
                self._student_id, self._event_input(kwargs)
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

    async def async_delete_event(
        self,
        uid: str,
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Delete a user event. Assignment entries cannot be deleted here."""
        self.coordinator.event_manager.delete_event(self._own_event_id(uid))

    async def async_update_event(
        self,
        uid: str,
        event: dict[str, Any],
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Update a user event. Assignment entries cannot be edited here."""
        event_id = self._own_event_id(uid)
        try:
            self.coordinator.event_manager.update_event(
                event_id, self._event_input(event)
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

    def _own_event_id(self, uid: str) -> str:
        """Return uid if it is one of this student's user events, else raise."""
        stored = self.coordinator.events_data.get(uid)
        if not stored or stored.get(const.DATA_EVENT_STUDENT_ID) != self._student_id:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_CALENDAR_READ_ONLY,
            )
        return uid

    @staticmethod
    def _event_input(event: dict[str, Any]) -> dict[str, Any]:
        """Map calendar event fields onto DATA_EVENT_* keys."""
        if event.get(EVENT_RRULE):
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_EVENT_RECURRENCE,
            )
        field_map = {
            EVENT_SUMMARY: const.DATA_EVENT_TITLE,
            EVENT_DESCRIPTION: const.DATA_EVENT_DESCRIPTION,
            EVENT_START: const.DATA_EVENT_START,
            EVENT_END: const.DATA_EVENT_END,
        }
        return {
            data_key: event[field]
            for field, data_key in field_map.items()
            if field in event
        }

    # -------------------------------------------------------------------------
    # Event generation
    # -------------------------------------------------------------------------

    def _generate_entries(
        self, first_day: datetime.date, last_day: datetime.date
    ) -> list[tuple[CalendarEvent, bool]]:
        """Build (event, completed) pairs for every calendar entry in the range.

        User events are never "completed"; they sort in by local start time.
        """
        if first_day > last_day:
            return []

        today = dt_utils.dt_today_local()
        # Recurring series are only expanded up to the show period
        horizon = dt_utils.dt_add_days(today, self.coordinator.calendar_show_period)
        records = self.coordinator.student_assignments_data

        entries: list[tuple[CalendarEvent, bool]] = []
        for assignment in self.coordinator.assignment_manager.get_assignments_for_student(
            self._student_id
        ):
            resolved = CompletionEngine.resolve(
                assignment, records, self._student_id, today
            )
            if not assignment.get(const.DATA_ASSIGNMENT_IS_RECURRING):
                due = dt_utils.dt_parse_date(
                    assignment.get(const.DATA_ASSIGNMENT_DUE_DATE)
                )
                if due and first_day <= due <= last_day:
                    entries.append(
                        (
                            self._build_event(assignment, due, resolved.completed),
                            resolved.completed,
                        )
                    )
                continue

            recurring_end = min(last_day, horizon)
            engine = RecurrenceEngine.from_assignment(assignment)
            for occurrence in engine.get_occurrences(first_day, recurring_end):
                entry = resolved.instance_completions.get(occurrence.isoformat())
                completed = bool(entry and entry[const.DATA_SA_COMPLETED])
                entries.append(
                    (self._build_event(assignment, occurrence, completed), completed)
                )

        for stored in self.coordinator.event_manager.get_events_for_student(
            self._student_id, first_day, last_day
        ):
            entries.append(
                (
                    CalendarEvent(
                        summary=stored[const.DATA_EVENT_TITLE],
                        start=dt_utils.dt_parse_event_time(
                            stored[const.DATA_EVENT_START]
                        ),
                        end=dt_utils.dt_parse_event_time(stored[const.DATA_EVENT_END]),
                        description=stored.get(const.DATA_EVENT_DESCRIPTION) or None,
                        uid=stored[const.DATA_EVENT_INTERNAL_ID],
                    ),
                    False,
                )
            )

        entries.sort(key=lambda pair: pair[0].start_datetime_local)
        return entries

    def _build_event(
        self, assignment: dict[str, Any], day: datetime.date, completed: bool
    ) -> CalendarEvent:
        title = assignment.get(const.DATA_ASSIGNMENT_TITLE, "")
        description_parts = []
        if category := assignment.get(const.DATA_ASSIGNMENT_CATEGORY):
            description_parts.append(category)
        if content := _content_text(assignment.get(const.DATA_ASSIGNMENT_CONTENT)):
            description_parts.append(content)
        for link in assignment.get(const.DATA_ASSIGNMENT_LINKS, []):
            description_parts.append(f"{link.get(const.LINK_TITLE)}: {link.get(const.LINK_URL)}")

        return CalendarEvent(
            summary=f"✓ {title}" if completed else title,
            start=day,
            end=day + datetime.timedelta(days=1),
            description="\n".join(description_parts) or None,
            uid=f"{assignment.get(const.DATA_ASSIGNMENT_INTERNAL_ID)}_{day.isoformat()}",
        )

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return extra state attributes."""
        return {const.ATTR_STUDENT_NAME: self._student_name}


def _validation_error(err: db.EntityValidationError) -> ServiceValidationError:
    return ServiceValidationError(
        translation_domain=const.DOMAIN,
        translation_key=err.translation_key,
        translation_placeholders=err.placeholders,
    )


def _content_text(content: Any) -> str:
    """Flatten assignment content to plain text.

    Rich-text documents contribute the "text" of their nodes, in order.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        if isinstance(content.get("text"), str):
            return content["text"]
        return _content_text(content.get("content"))
    if isinstance(content, list):
        return " ".join(filter(None, (_content_text(node) for node in content)))
    return ""
