"""Assignment manager for Homeschool Assignments.

Handles the assignment workflow:
- Create with student fan-out (one bare completion record per student)
- Update, with optional assignee replacement (delete all, then reinsert)
- Delete with cascade to every completion record
- Completion toggle as an upsert on the record key

Pure rules (toggle target, stamping) come from CompletionEngine; this manager
only reads and writes storage and emits signals.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.exceptions import ServiceValidationError

from .. import const, data_builders as db
from ..engines.assignment_engine import AssignmentEngine
from ..engines.completion_engine import CompletionEngine, InvalidToggleTargetError
from ..engines.schedule_engine import RecurrenceEngine
from ..utils.dt_utils import dt_now_iso, dt_to_iso_date, dt_today_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import AssignmentGroups, StudentAssignmentData


class AssignmentManager(BaseManager):
    """Manages assignment CRUD and completion toggles."""

    async def async_setup(self) -> None:
        """Set up the assignment manager.

        Listens for student deletion to drop that student's completion records.
        """
        self.listen(const.SIGNAL_SUFFIX_STUDENT_DELETED, self._on_student_deleted)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def _assignments(self) -> dict[str, Any]:
        return self._bucket(const.DATA_ASSIGNMENTS)

    @property
    def _records(self) -> dict[str, StudentAssignmentData]:
        return self._bucket(const.DATA_STUDENT_ASSIGNMENTS)

    def _get_assignment_or_raise(self, assignment_id: str) -> dict[str, Any]:
        return self._get_or_raise(
            const.DATA_ASSIGNMENTS, assignment_id, const.LABEL_ASSIGNMENT
        )

    def _validate_student_ids(self, student_ids: list[str]) -> list[str]:
        """Return de-duplicated student ids, rejecting empty or unknown ones."""
        unique_ids: list[str] = []
        for student_id in student_ids:
            if student_id not in unique_ids:
                unique_ids.append(student_id)
        if not unique_ids:
            raise db.EntityValidationError(
                field=const.FIELD_STUDENT_NAMES,
                translation_key=const.TRANS_KEY_ERROR_NO_STUDENTS,
            )
        for student_id in unique_ids:
            self._get_or_raise(const.DATA_STUDENTS, student_id, const.LABEL_STUDENT)
        return unique_ids

    def get_assignee_ids(self, assignment_id: str) -> list[str]:
        """Return the ids of students assigned to an assignment."""
        return CompletionEngine.get_assignee_ids(self._records, assignment_id)

    def get_assignments_for_student(self, student_id: str) -> list[dict[str, Any]]:
        """Return stored assignments assigned to a student, ordered by due date."""
        assigned = {
            record[const.DATA_SA_ASSIGNMENT_ID]
            for record in self._records.values()
            if record.get(const.DATA_SA_STUDENT_ID) == student_id
            and not record.get(const.DATA_SA_INSTANCE_DATE)
        }
        assignments = [
            assignment
            for assignment_id, assignment in self._assignments.items()
            if assignment_id in assigned
        ]
        assignments.sort(key=lambda item: item.get(const.DATA_ASSIGNMENT_DUE_DATE, ""))
        return assignments

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    def build_student_views(self, student_id: str) -> list[dict[str, Any]]:
        """Return enriched views of every assignment assigned to a student."""
        today = dt_today_local()
        students = self._bucket(const.DATA_STUDENTS)
        views = []
        for assignment in self.get_assignments_for_student(student_id):
            assignee_names = [
                students[sid].get(const.DATA_STUDENT_NAME, sid)
                for sid in self.get_assignee_ids(
                    assignment[const.DATA_ASSIGNMENT_INTERNAL_ID]
                )
                if sid in students
            ]
            views.append(
                AssignmentEngine.build_view(
                    assignment,
                    self._records,
                    student_id,
                    today,
                    lookahead_days=self.coordinator.lookahead_days,
                    max_instances=self.coordinator.max_instances,
                    assigned_students=assignee_names,
                )
            )
        return views

    def get_student_groups(self, student_id: str) -> AssignmentGroups:
        """Return a student's assignments grouped into display buckets."""
        return AssignmentEngine.group_assignments(
            self.build_student_views(student_id), dt_today_local()
        )

    # -------------------------------------------------------------------------
    # Create / Update / Delete
    # -------------------------------------------------------------------------

    def create_assignment(
        self,
        user_input: dict[str, Any],
        student_ids: list[str],
        *,
        parent_id: str | None = None,
    ) -> str:
        """Create an assignment and fan it out to the selected students.

        Returns:
            The internal_id of the created assignment.

        Raises:
            EntityValidationError: Invalid fields or no students selected.
            HomeAssistantError: An unknown student id.
        """
        student_ids = self._validate_student_ids(student_ids)
        if parent_id and const.DATA_ASSIGNMENT_PARENT_ID not in user_input:
            user_input = {**user_input, const.DATA_ASSIGNMENT_PARENT_ID: parent_id}

        assignment = db.build_assignment(user_input)
        assignment_id = assignment[const.DATA_ASSIGNMENT_INTERNAL_ID]
        self._assignments[assignment_id] = dict(assignment)
        self.refresh_next_due_date(self._assignments[assignment_id], dt_today_local())
        self._insert_bare_records(assignment_id, student_ids)

        self._commit(
            const.SIGNAL_SUFFIX_ASSIGNMENT_CREATED,
            assignment_id=assignment_id,
            student_ids=student_ids,
        )
        const.LOGGER.info(
            "INFO: Created assignment '%s' (ID: %s) for %d student(s)",
            assignment[const.DATA_ASSIGNMENT_TITLE],
            assignment_id,
            len(student_ids),
        )
        return assignment_id

    def update_assignment(
        self,
        assignment_id: str,
        user_input: dict[str, Any],
        student_ids: list[str] | None = None,
    ) -> None:
        """Update an assignment; replace its assignees when student_ids is given.

        Raises:
            HomeAssistantError: Assignment (or a student) not found.
            EntityValidationError: Invalid fields or an empty assignee list.
        """
        existing = self._get_assignment_or_raise(assignment_id)
        if student_ids is not None:
            student_ids = self._validate_student_ids(student_ids)

        updated = db.build_assignment(user_input, existing=existing)  # type: ignore[arg-type]
        self._assignments[assignment_id] = dict(updated)
        self.refresh_next_due_date(self._assignments[assignment_id], dt_today_local())
        if student_ids is not None:
            self._replace_assignees(assignment_id, student_ids)

        self._commit(const.SIGNAL_SUFFIX_ASSIGNMENT_UPDATED, assignment_id=assignment_id)
        const.LOGGER.info(
            "INFO: Updated assignment '%s' (ID: %s)",
            updated[const.DATA_ASSIGNMENT_TITLE],
            assignment_id,
        )

    def refresh_next_due_date(self, assignment: dict[str, Any], today: date) -> None:
        """Store a recurring assignment's next occurrence on or after today.

        A finished series keeps its last occurrence.
        """
        if not assignment.get(const.DATA_ASSIGNMENT_IS_RECURRING):
            return
        engine = RecurrenceEngine.from_assignment(assignment)
        if not engine.is_valid:
            const.LOGGER.warning(
                "WARNING: Assignment '%s' has an invalid recurrence pattern",
                assignment.get(const.DATA_ASSIGNMENT_INTERNAL_ID),
            )
            return
        next_date = engine.get_next_occurrence(today) or engine.get_last_occurrence()
        if next_date:
            assignment[const.DATA_ASSIGNMENT_NEXT_DUE_DATE] = dt_to_iso_date(next_date)

    def delete_assignment(self, assignment_id: str) -> None:
        """Delete an assignment and every completion record that refers to it."""
        assignment = self._get_assignment_or_raise(assignment_id)
        removed = self._delete_records(assignment_id)
        del self._assignments[assignment_id]

        self._commit(const.SIGNAL_SUFFIX_ASSIGNMENT_DELETED, assignment_id=assignment_id)
        const.LOGGER.info(
            "INFO: Deleted assignment '%s' (ID: %s) and %d completion record(s)",
            assignment.get(const.DATA_ASSIGNMENT_TITLE),
            assignment_id,
            removed,
        )

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def toggle_assignment(
        self,
        assignment_id: str,
        student_id: str,
        completed: bool,
        instance_date: str | date | None = None,
    ) -> dict[str, Any]:
        """Set completion for a student, upserting the target record.

        Recurring assignments target one instance (today when none is given);
        one-time assignments target the bare assignment/student pair.

        Returns:
            {success, message, assignment_id, instance_date}

        Raises:
            HomeAssistantError: Assignment not found.
            ServiceValidationError: Student not assigned, or an instance date
                sent for a one-time assignment.
        """
        assignment = self._get_assignment_or_raise(assignment_id)
        if student_id not in self.get_assignee_ids(assignment_id):
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_NOT_ASSIGNED,
                translation_placeholders={
                    "student": self._student_name(student_id),
                    "title": assignment.get(const.DATA_ASSIGNMENT_TITLE, ""),
                },
            )

        try:
            target_date = CompletionEngine.resolve_toggle_target(
                assignment, instance_date, dt_today_local()
            )
        except InvalidToggleTargetError as err:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INSTANCE_NOT_RECURRING,
                translation_placeholders={
                    "title": assignment.get(const.DATA_ASSIGNMENT_TITLE, ""),
                    "instance_date": err.instance_date,
                },
            ) from err

        key = CompletionEngine.make_record_key(assignment_id, student_id, target_date)
        record = self._records.get(key) or db.build_student_assignment(
            assignment_id, student_id, target_date
        )
        self._records[key] = CompletionEngine.apply_toggle(
            record, completed, dt_now_iso()
        )

        self._commit(
            const.SIGNAL_SUFFIX_ASSIGNMENT_TOGGLED,
            assignment_id=assignment_id,
            student_id=student_id,
            instance_date=target_date,
            completed=bool(completed),
        )

        message = (
            const.MSG_MARKED_COMPLETE if completed else const.MSG_MARKED_INCOMPLETE
        )
        const.LOGGER.info(
            "INFO: %s: '%s' for student '%s' (instance: %s)",
            message,
            assignment.get(const.DATA_ASSIGNMENT_TITLE),
            self._student_name(student_id),
            target_date,
        )
        return {
            const.RESPONSE_SUCCESS: True,
            const.RESPONSE_MESSAGE: message,
            const.RESPONSE_ASSIGNMENT_ID: assignment_id,
            const.RESPONSE_INSTANCE_DATE: target_date,
        }

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _insert_bare_records(self, assignment_id: str, student_ids: list[str]) -> None:
        for student_id in student_ids:
            key = CompletionEngine.make_record_key(assignment_id, student_id)
            self._records[key] = db.build_student_assignment(assignment_id, student_id)

    def _delete_records(
        self, assignment_id: str | None = None, student_id: str | None = None
    ) -> int:
        """Delete records matching an assignment and/or a student."""
        doomed = [
            key
            for key, record in self._records.items()
            if (
                assignment_id is None
                or record.get(const.DATA_SA_ASSIGNMENT_ID) == assignment_id
            )
            and (student_id is None or record.get(const.DATA_SA_STUDENT_ID) == student_id)
        ]
        for key in doomed:
            del self._records[key]
        return len(doomed)

    def _replace_assignees(self, assignment_id: str, student_ids: list[str]) -> None:
        """Delete every record of the assignment, then reinsert bare records."""
        removed = self._delete_records(assignment_id)
        self._insert_bare_records(assignment_id, student_ids)
        self.emit(
            const.SIGNAL_SUFFIX_ASSIGNEES_CHANGED,
            assignment_id=assignment_id,
            student_ids=student_ids,
        )
        const.LOGGER.debug(
            "DEBUG: Replaced assignees of %s: removed %d record(s), inserted %d",
            assignment_id,
            removed,
            len(student_ids),
        )

    @callback
    def _on_student_deleted(self, payload: dict[str, Any]) -> None:
        """Drop the deleted student's completion records (saved by the delete)."""
        student_id = payload.get("student_id")
        if not student_id:
            return
        removed = self._delete_records(student_id=student_id)
        if removed:
            const.LOGGER.debug(
                "DEBUG: Removed %d completion record(s) of deleted student %s",
                removed,
                student_id,
            )
