"""User manager for Homeschool Assignments.

Handles CRUD operations for students and parents (families) with event
signaling. Admin parents manage every family.
"""

from __future__ import annotations

from typing import Any

from homeassistant.helpers import device_registry as dr

from .. import const, data_builders as db
from ..helpers.entity_helpers import remove_entities_by_item_id
from .base_manager import BaseManager


class UserManager(BaseManager):
    """Manages student and parent profiles.

    Student deletion emits SIGNAL_SUFFIX_STUDENT_DELETED; the other managers
    drop that student's completion records, notes and calendar events.
    """

    async def async_setup(self) -> None:
        """Set up the user manager. No cross-manager subscriptions needed."""

    # -------------------------------------------------------------------------
    # Students
    # -------------------------------------------------------------------------

    def create_student(self, user_input: dict[str, Any]) -> str:
        """Create a student, linking it to its parent when one is given.

        Returns:
            The internal_id of the created student

        Raises:
            EntityValidationError: Empty or duplicate name
            HomeAssistantError: Parent not found
        """
        errors = db.validate_student_data(
            user_input, self._bucket(const.DATA_STUDENTS)
        )
        if errors:
            field, translation_key = next(iter(errors.items()))
            raise db.EntityValidationError(
                field=field,
                translation_key=translation_key,
                placeholders={"name": str(user_input.get(const.DATA_STUDENT_NAME))},
            )

        student = db.build_student(user_input)
        student_id = student[const.DATA_STUDENT_INTERNAL_ID]
        parent = None
        if parent_id := student[const.DATA_STUDENT_PARENT_ID]:
            parent = self._get_or_raise(const.DATA_PARENTS, parent_id, const.LABEL_PARENT)

        self._bucket(const.DATA_STUDENTS)[student_id] = dict(student)
        if parent is not None:
            associated = parent.setdefault(const.DATA_PARENT_ASSOCIATED_STUDENTS, [])
            if student_id not in associated:
                associated.append(student_id)

        self._commit(const.SIGNAL_SUFFIX_STUDENT_CREATED, student_id=student_id)
        const.LOGGER.info(
            "INFO: Created student '%s' (ID: %s)",
            student[const.DATA_STUDENT_NAME],
            student_id,
        )
        return student_id

    def delete_student(self, student_id: str) -> None:
        """Delete a student, its entities, device and parent links.

        Raises:
            HomeAssistantError: If student not found
        """
        self._get_or_raise(const.DATA_STUDENTS, student_id, const.LABEL_STUDENT)
        student_name = self._student_name(student_id)
        del self._bucket(const.DATA_STUDENTS)[student_id]
        for parent in self._bucket(const.DATA_PARENTS).values():
            associated = parent.get(const.DATA_PARENT_ASSOCIATED_STUDENTS, [])
            if student_id in associated:
                associated.remove(student_id)

        remove_entities_by_item_id(self.hass, self.entry_id, student_id)
        device_registry = dr.async_get(self.hass)
        device = device_registry.async_get_device(
            identifiers={(const.DOMAIN, student_id)}
        )
        if device:
            device_registry.async_remove_device(device.id)

        # Assignment, note and event managers drop the student's rows
        self._commit(const.SIGNAL_SUFFIX_STUDENT_DELETED, student_id=student_id)
        const.LOGGER.info("INFO: Deleted student '%s' (ID: %s)", student_name, student_id)

    # -------------------------------------------------------------------------
    # Parents
    # -------------------------------------------------------------------------

    def create_parent(self, user_input: dict[str, Any]) -> str:
        """Create a parent profile.

        Associated students also get the parent recorded as their owner when
        they have none.

        Raises:
            EntityValidationError: Empty or duplicate name
        """
        errors = db.validate_parent_data(
            user_input, self._bucket(const.DATA_PARENTS)
        )
        if errors:
            field, translation_key = next(iter(errors.items()))
            raise db.EntityValidationError(
                field=field,
                translation_key=translation_key,
                placeholders={"name": str(user_input.get(const.DATA_PARENT_NAME))},
            )

        parent = db.build_parent(user_input)
        parent_id = parent[const.DATA_PARENT_INTERNAL_ID]
        students = self._bucket(const.DATA_STUDENTS)
        parent[const.DATA_PARENT_ASSOCIATED_STUDENTS] = [
            sid for sid in parent[const.DATA_PARENT_ASSOCIATED_STUDENTS] if sid in students
        ]
        for student_id in parent[const.DATA_PARENT_ASSOCIATED_STUDENTS]:
            if not students[student_id].get(const.DATA_STUDENT_PARENT_ID):
                students[student_id][const.DATA_STUDENT_PARENT_ID] = parent_id

        self._bucket(const.DATA_PARENTS)[parent_id] = dict(parent)

        self._commit(const.SIGNAL_SUFFIX_PARENT_CREATED, parent_id=parent_id)
        const.LOGGER.info(
            "INFO: Created parent '%s' (ID: %s, admin: %s)",
            parent[const.DATA_PARENT_NAME],
            parent_id,
            parent[const.DATA_PARENT_IS_ADMIN],
        )
        return parent_id

    def delete_parent(self, parent_id: str) -> None:
        """Delete a parent profile. Its students stay, without an owner.

        Raises:
            HomeAssistantError: If parent not found
        """
        parent = self._get_or_raise(const.DATA_PARENTS, parent_id, const.LABEL_PARENT)
        parent_name = parent.get(const.DATA_PARENT_NAME, parent_id)
        del self._bucket(const.DATA_PARENTS)[parent_id]
        for student in self._bucket(const.DATA_STUDENTS).values():
            if student.get(const.DATA_STUDENT_PARENT_ID) == parent_id:
                student[const.DATA_STUDENT_PARENT_ID] = None

        self._commit(const.SIGNAL_SUFFIX_PARENT_DELETED, parent_id=parent_id)
        const.LOGGER.info("INFO: Deleted parent '%s' (ID: %s)", parent_name, parent_id)
