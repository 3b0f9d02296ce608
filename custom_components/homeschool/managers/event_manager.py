"""Calendar event manager for Homeschool Assignments.

User-created events (field trips, co-op days) live beside the generated
assignment entries on a student's calendar. They are written through the
calendar entity and stored in their own bucket.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const, data_builders as db
from ..utils.dt_utils import dt_event_day_span, dt_parse_event_time
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import CalendarEventData


class CalendarEventManager(BaseManager):
    """Manages user-created calendar events."""

    async def async_setup(self) -> None:
        """Drop a deleted student's events."""
        self.listen(const.SIGNAL_SUFFIX_STUDENT_DELETED, self._on_student_deleted)

    @property
    def _events(self) -> dict[str, CalendarEventData]:
        return self._bucket(const.DATA_EVENTS)

    def get_event(self, event_id: str) -> CalendarEventData:
        """Return an event or raise not_found."""
        event = self._get_or_raise(const.DATA_EVENTS, event_id, const.LABEL_EVENT)
        return event  # type: ignore[return-value]

    def get_events_for_student(
        self, student_id: str, first_day: date, last_day: date
    ) -> list[CalendarEventData]:
        """Return a student's events touching the local days [first_day, last_day]."""
        events = []
        for event in self._events.values():
            if event.get(const.DATA_EVENT_STUDENT_ID) != student_id:
                continue
            start = dt_parse_event_time(event.get(const.DATA_EVENT_START))
            end = dt_parse_event_time(event.get(const.DATA_EVENT_END))
            if start is None or end is None:
                continue
            start_day, end_day = dt_event_day_span(start, end)
            if start_day <= last_day and end_day >= first_day:
                events.append(event)
        return events

    # -------------------------------------------------------------------------
    # Create / Update / Delete
    # -------------------------------------------------------------------------

    def create_event(self, student_id: str, user_input: dict[str, Any]) -> str:
        """Add an event to a student's calendar.

        Raises:
            HomeAssistantError: Unknown student.
            EntityValidationError: Empty title or an invalid time range.
        """
        self._get_or_raise(const.DATA_STUDENTS, student_id, const.LABEL_STUDENT)
        event = db.build_calendar_event(
            {**user_input, const.DATA_EVENT_STUDENT_ID: student_id}
        )
        event_id = event[const.DATA_EVENT_INTERNAL_ID]
        self._events[event_id] = event

        self._commit(const.SIGNAL_SUFFIX_EVENT_CREATED, event_id=event_id)
        const.LOGGER.info(
            "INFO: Created calendar event '%s' for student '%s'",
            event[const.DATA_EVENT_TITLE],
            self._student_name(student_id),
        )
        return event_id

    def update_event(self, event_id: str, user_input: dict[str, Any]) -> None:
        """Replace an event's title, description or times."""
        existing = self.get_event(event_id)
        self._events[event_id] = db.build_calendar_event(
            {
                key: value
                for key, value in user_input.items()
                if key != const.DATA_EVENT_STUDENT_ID
            },
            existing=existing,
        )
        self._commit(const.SIGNAL_SUFFIX_EVENT_UPDATED, event_id=event_id)

    def delete_event(self, event_id: str) -> None:
        """Remove an event."""
        self.get_event(event_id)
        del self._events[event_id]
        self._commit(const.SIGNAL_SUFFIX_EVENT_DELETED, event_id=event_id)

    @callback
    def _on_student_deleted(self, payload: dict[str, Any]) -> None:
        student_id = payload.get("student_id")
        doomed = [
            event_id
            for event_id, event in self._events.items()
            if event.get(const.DATA_EVENT_STUDENT_ID) == student_id
        ]
        for event_id in doomed:
            del self._events[event_id]
