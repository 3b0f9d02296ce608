"""Base entity classes for Homeschool Assignments integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import const
from .coordinator import HomeschoolConfigEntry, HomeschoolDataCoordinator
from .helpers.device_helpers import create_student_device_info


class HomeschoolCoordinatorEntity(CoordinatorEntity[HomeschoolDataCoordinator]):
    """Base entity with typed coordinator access."""

    _attr_has_entity_name = True

    @property
    def coordinator(self) -> HomeschoolDataCoordinator:
        """Return typed coordinator."""
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: HomeschoolDataCoordinator) -> None:
        object.__setattr__(self, "_coordinator", value)


class HomeschoolStudentEntity(HomeschoolCoordinatorEntity):
    """Entity bound to one student profile and its device.

    The entity goes unavailable once the student is removed from storage,
    until the registry cleanup drops it.
    """

    def __init__(
        self,
        coordinator: HomeschoolDataCoordinator,
        entry: HomeschoolConfigEntry,
        student_id: str,
        student_name: str,
    ) -> None:
        """Initialize the student-scoped entity."""
        super().__init__(coordinator)
        self._entry = entry
        self._student_id = student_id
        self._student_name = student_name
        self._attr_translation_placeholders = {
            const.TRANS_KEY_PLACEHOLDER_STUDENT_NAME: student_name
        }
        self._attr_device_info = create_student_device_info(
            student_id, student_name, entry
        )

    @property
    def available(self) -> bool:
        """Return True while the student still exists."""
        return (
            super().available and self._student_id in self.coordinator.students_data
        )
