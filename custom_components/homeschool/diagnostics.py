"""Diagnostics support for Homeschool Assignments integration.

The config entry diagnostics return the raw storage data, so the output can be
used as a backup of the homeschool_data file.
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceEntry

from . import const
from .coordinator import HomeschoolConfigEntry


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: HomeschoolConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator = entry.runtime_data
    return {
        "options": dict(entry.options),
        "data": coordinator.store.data,
    }


async def async_get_device_diagnostics(
    hass: HomeAssistant, entry: HomeschoolConfigEntry, device: DeviceEntry
) -> dict[str, Any]:
    """Return a student-specific snapshot for a student device."""
    coordinator = entry.runtime_data

    student_id = next(
        (
            identifier[1]
            for identifier in device.identifiers
            if identifier[0] == const.DOMAIN
        ),
        None,
    )
    if not student_id or student_id not in coordinator.students_data:
        return {"error": f"No student found for device {device.id}"}

    return {
        "student_id": student_id,
        "student_data": coordinator.students_data[student_id],
        "assignments": coordinator.assignment_manager.get_student_groups(student_id),
        "records": {
            key: record
            for key, record in coordinator.student_assignments_data.items()
            if record.get(const.DATA_SA_STUDENT_ID) == student_id
        },
        "notes": [
            note
            for note in coordinator.notes_data.values()
            if note.get(const.DATA_NOTE_STUDENT_ID) == student_id
        ],
        "events": [
            event
            for event in coordinator.events_data.values()
            if event.get(const.DATA_EVENT_STUDENT_ID) == student_id
        ],
    }
