# File: sensor.py
"""Sensors for the Homeschool Assignments integration.

Sensors Defined in This File (3):

# Student-Specific Sensors (2)
01. StudentAssignmentsSensor
02. StudentAssignmentHistorySensor

# System-Level Sensors (1)
03. SystemCompletionChartSensor
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import HomeschoolConfigEntry, HomeschoolDataCoordinator
from .engines.completion_engine import CompletionEngine
from .entity import HomeschoolCoordinatorEntity, HomeschoolStudentEntity
from .helpers.device_helpers import create_system_device_info
from .helpers.entity_helpers import get_event_signal
from .utils import dt_utils


async def async_setup_entry(
    hass: HomeAssistant,
    entry: HomeschoolConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensors for Homeschool Assignments integration."""
    coordinator = entry.runtime_data

    def _student_sensors(student_id: str, student_name: str) -> list[SensorEntity]:
        return [
            StudentAssignmentsSensor(coordinator, entry, student_id, student_name),
            StudentAssignmentHistorySensor(
                coordinator, entry, student_id, student_name
            ),
        ]

    entities: list[SensorEntity] = [SystemCompletionChartSensor(coordinator, entry)]
    for student_id, student_info in coordinator.students_data.items():
        entities.extend(
            _student_sensors(
                student_id,
                student_info.get(const.DATA_STUDENT_NAME, f"Student {student_id}"),
            )
        )
    async_add_entities(entities)

    @callback
    def _on_student_created(payload: dict[str, Any]) -> None:
        student_id = payload["student_id"]
        student_info = coordinator.students_data.get(student_id)
        if student_info is None:
            return
        async_add_entities(
            _student_sensors(student_id, student_info[const.DATA_STUDENT_NAME])
        )

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_STUDENT_CREATED),
            _on_student_created,
        )
    )


def _summarize(view: dict[str, Any]) -> dict[str, Any]:
    """Reduce an assignment view to what dashboards render."""
    summary = {
        const.ATTR_ASSIGNMENT_ID: view.get(const.DATA_ASSIGNMENT_INTERNAL_ID),
        const.DATA_ASSIGNMENT_TITLE: view.get(const.DATA_ASSIGNMENT_TITLE),
        const.DATA_ASSIGNMENT_CATEGORY: view.get(const.DATA_ASSIGNMENT_CATEGORY, ""),
        const.DATA_ASSIGNMENT_CONTENT: view.get(const.DATA_ASSIGNMENT_CONTENT),
        const.DATA_ASSIGNMENT_LINKS: view.get(const.DATA_ASSIGNMENT_LINKS, []),
        const.DATA_ASSIGNMENT_DUE_DATE: view.get(const.DATA_ASSIGNMENT_DUE_DATE),
        const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE: view.get(
            const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE
        ),
        const.DATA_ASSIGNMENT_DATE_LABEL: view.get(const.DATA_ASSIGNMENT_DATE_LABEL),
        const.DATA_ASSIGNMENT_URGENCY: view.get(const.DATA_ASSIGNMENT_URGENCY),
        const.DATA_ASSIGNMENT_COMPLETED: view.get(
            const.DATA_ASSIGNMENT_COMPLETED, False
        ),
        const.DATA_ASSIGNMENT_COMPLETED_AT: view.get(
            const.DATA_ASSIGNMENT_COMPLETED_AT
        ),
        const.DATA_ASSIGNMENT_EFFECTIVE_COMPLETED: view.get(
            const.DATA_ASSIGNMENT_EFFECTIVE_COMPLETED, False
        ),
        const.ATTR_IS_RECURRING: view.get(const.DATA_ASSIGNMENT_IS_RECURRING, False),
        const.DATA_ASSIGNMENT_ASSIGNED_STUDENTS: view.get(
            const.DATA_ASSIGNMENT_ASSIGNED_STUDENTS, []
        ),
    }
    if view.get(const.DATA_ASSIGNMENT_IS_RECURRING):
        summary[const.DATA_ASSIGNMENT_NEXT_DUE_DATE] = view.get(
            const.DATA_ASSIGNMENT_NEXT_DUE_DATE
        )
        summary[const.DATA_ASSIGNMENT_INSTANCES] = view.get(
            const.DATA_ASSIGNMENT_INSTANCES, []
        )
    return summary


def _note_summary(note: dict[str, Any]) -> dict[str, Any]:
    return {
        const.ATTR_NOTE_ID: note.get(const.DATA_NOTE_INTERNAL_ID),
        const.DATA_NOTE_TITLE: note.get(const.DATA_NOTE_TITLE),
        const.DATA_NOTE_CATEGORY: note.get(const.DATA_NOTE_CATEGORY),
        const.DATA_NOTE_CONTENT: note.get(const.DATA_NOTE_CONTENT),
        const.ATTR_ASSIGNMENT_ID: note.get(const.DATA_NOTE_ASSIGNMENT_ID),
        const.DATA_NOTE_CREATED_AT: note.get(const.DATA_NOTE_CREATED_AT),
    }


# ------------------------------------------------------------------------------------------
class StudentAssignmentsSensor(HomeschoolStudentEntity, SensorEntity):
    """Dashboard sensor for one student.

    State is the number of assignments due today that are still open.
    Attributes carry the overdue, today and upcoming buckets, so a dashboard
    card can render the student's week without templates doing date math,
    plus the student's notes (newest first).
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_ASSIGNMENTS
    _attr_icon = "mdi:book-open-page-variant"
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self,
        coordinator: HomeschoolDataCoordinator,
        entry: HomeschoolConfigEntry,
        student_id: str,
        student_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry, student_id, student_name)
        self._attr_unique_id = (
            f"{entry.entry_id}_{student_id}{const.SENSOR_UID_SUFFIX_ASSIGNMENTS}"
        )

    def _groups(self):
        return self.coordinator.assignment_manager.get_student_groups(
            self._student_id
        )

    @property
    def native_value(self) -> int:
        """Return the number of open assignments due today."""
        return sum(
            1
            for view in self._groups()[const.BUCKET_TODAY]
            if not view.get(const.DATA_ASSIGNMENT_COMPLETED, False)
        )

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the live buckets."""
        groups = self._groups()
        return {
            const.ATTR_STUDENT_NAME: self._student_name,
            const.ATTR_TODAY: dt_utils.dt_today_iso(),
            const.ATTR_OVERDUE_COUNT: len(groups[const.BUCKET_OVERDUE]),
            const.ATTR_DUE_TODAY_COUNT: len(groups[const.BUCKET_TODAY]),
            const.ATTR_UPCOMING_COUNT: len(groups[const.BUCKET_UPCOMING]),
            const.ATTR_OVERDUE: [_summarize(v) for v in groups[const.BUCKET_OVERDUE]],
            const.ATTR_DUE_TODAY: [_summarize(v) for v in groups[const.BUCKET_TODAY]],
            const.ATTR_UPCOMING: [
                _summarize(v) for v in groups[const.BUCKET_UPCOMING]
            ],
            const.ATTR_NOTES: [
                _note_summary(note)
                for note in self.coordinator.note_manager.get_notes_for_student(
                    self._student_id
                )
            ],
        }


# ------------------------------------------------------------------------------------------
class StudentAssignmentHistorySensor(HomeschoolStudentEntity, SensorEntity):
    """History sensor: assignments due on or before today, with completion."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_HISTORY
    _attr_icon = "mdi:history"
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self,
        coordinator: HomeschoolDataCoordinator,
        entry: HomeschoolConfigEntry,
        student_id: str,
        student_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry, student_id, student_name)
        self._attr_unique_id = (
            f"{entry.entry_id}_{student_id}{const.SENSOR_UID_SUFFIX_HISTORY}"
        )

    def _past(self) -> list[dict[str, Any]]:
        return self.coordinator.assignment_manager.get_student_groups(
            self._student_id
        )[const.BUCKET_PAST]

    @property
    def native_value(self) -> int:
        """Return the number of past assignments."""
        return len(self._past())

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        past = self._past()
        return {
            const.ATTR_STUDENT_NAME: self._student_name,
            const.ATTR_COMPLETED_COUNT: sum(
                1
                for view in past
                if view.get(const.DATA_ASSIGNMENT_EFFECTIVE_COMPLETED)
            ),
            const.ATTR_PAST: [_summarize(view) for view in past],
        }


# ------------------------------------------------------------------------------------------
class SystemCompletionChartSensor(HomeschoolCoordinatorEntity, SensorEntity):
    """Completed assignments per student per day over the last week.

    State is the total over the window; attributes hold the day axis and one
    series per student for chart cards.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_COMPLETION_CHART
    _attr_icon = "mdi:chart-bar"
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self, coordinator: HomeschoolDataCoordinator, entry: HomeschoolConfigEntry
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = (
            f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_COMPLETION_CHART}"
        )
        self._attr_device_info = create_system_device_info(entry)

    def _chart(self):
        return CompletionEngine.build_completion_chart(
            self.coordinator.student_assignments_data,
            self.coordinator.students_data,
            dt_utils.dt_today_local(),
            const.COMPLETION_CHART_DAYS,
        )

    @property
    def native_value(self) -> int:
        return self._chart()[const.ATTR_CHART_TOTAL]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        chart = self._chart()
        return {
            const.ATTR_CHART_DAYS: chart[const.ATTR_CHART_DAYS],
            const.ATTR_CHART_SERIES: chart[const.ATTR_CHART_SERIES],
        }
