"""Completion Engine - Pure completion resolution logic.

This module provides completion resolution without any Home Assistant
dependencies, so it can be unit tested in isolation.

Completion records live in a flat dict keyed by a composite record key:
    "<assignment_id>|<student_id>"                   one-time assignment
    "<assignment_id>|<student_id>|<instance_date>"   recurring instance

The key is what enforces "at most one record per target": writing a toggle
for an existing key replaces that record (upsert).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    date_key,
    dt_add_days,
    dt_timestamp_to_local_date,
    dt_to_iso_date,
)

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..type_defs import (
        CompletionChartData,
        InstanceCompletion,
        StudentAssignmentData,
    )


# =============================================================================
# Result types / errors
# =============================================================================


@dataclass
class ResolvedCompletion:
    """Completion state of one assignment for one student.

    Attributes:
        completed: Headline flag. For recurring assignments this is today's
            instance, never "any instance".
        completed_at: Timestamp matching the headline flag, or None.
        instance_completions: instance_date -> {completed, completed_at}
            (recurring only).
    """

    completed: bool = False
    completed_at: str | None = None
    instance_completions: dict[str, InstanceCompletion] = field(default_factory=dict)


class InvalidToggleTargetError(Exception):
    """Raised when a toggle names an instance date for a one-time assignment."""

    def __init__(self, assignment_id: str, instance_date: str) -> None:
        """Initialize with the offending assignment and instance date."""
        self.assignment_id = assignment_id
        self.instance_date = instance_date
        super().__init__(
            f"Assignment {assignment_id} is not recurring; "
            f"instance date {instance_date} cannot be targeted"
        )


# =============================================================================
# Engine
# =============================================================================


class CompletionEngine:
    """Stateless completion resolution. All methods are static."""

    # -------------------------------------------------------------------------
    # Record keys / lookup
    # -------------------------------------------------------------------------

    @staticmethod
    def make_record_key(
        assignment_id: str, student_id: str, instance_date: str | None = None
    ) -> str:
        """Return the storage key for a completion record."""
        parts = [assignment_id, student_id]
        if instance_date:
            parts.append(instance_date)
        return const.RECORD_KEY_SEPARATOR.join(parts)

    @staticmethod
    def get_records(
        records: dict[str, StudentAssignmentData],
        assignment_id: str,
        student_id: str | None = None,
    ) -> list[StudentAssignmentData]:
        """Return records of an assignment, optionally for one student only."""
        return [
            record
            for record in records.values()
            if record.get(const.DATA_SA_ASSIGNMENT_ID) == assignment_id
            and (student_id is None or record.get(const.DATA_SA_STUDENT_ID) == student_id)
        ]

    @staticmethod
    def get_assignee_ids(
        records: dict[str, StudentAssignmentData], assignment_id: str
    ) -> list[str]:
        """Return students assigned to an assignment (holders of a bare record)."""
        assignees: list[str] = []
        for record in records.values():
            if record.get(const.DATA_SA_ASSIGNMENT_ID) != assignment_id:
                continue
            if record.get(const.DATA_SA_INSTANCE_DATE):
                continue
            student_id = record.get(const.DATA_SA_STUDENT_ID)
            if student_id and student_id not in assignees:
                assignees.append(student_id)
        return assignees

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    @staticmethod
    def build_instance_completions(
        student_records: list[StudentAssignmentData],
    ) -> dict[str, InstanceCompletion]:
        """Map instance_date -> completion for records bearing an instance date."""
        completions: dict[str, InstanceCompletion] = {}
        for record in student_records:
            instance_date = record.get(const.DATA_SA_INSTANCE_DATE)
            if not instance_date:
                continue
            completed = bool(record.get(const.DATA_SA_COMPLETED, False))
            completions[instance_date] = {
                const.DATA_SA_COMPLETED: completed,
                const.DATA_SA_COMPLETED_AT: (
                    record.get(const.DATA_SA_COMPLETED_AT) if completed else None
                ),
            }
        return completions

    @staticmethod
    def resolve(
        assignment: dict[str, Any],
        records: dict[str, StudentAssignmentData],
        student_id: str | None,
        today: date,
    ) -> ResolvedCompletion:
        """Resolve one student's completion state for an assignment.

        Without a student, or without a matching record, the assignment is
        reported as not completed. This never raises.
        """
        assignment_id = assignment.get(const.DATA_ASSIGNMENT_INTERNAL_ID)
        if not student_id or not assignment_id:
            const.LOGGER.debug(
                "DEBUG: Completion - No student context for assignment '%s', "
                "treating as not completed",
                assignment_id,
            )
            return ResolvedCompletion()

        student_records = CompletionEngine.get_records(
            records, assignment_id, student_id
        )

        if not assignment.get(const.DATA_ASSIGNMENT_IS_RECURRING, False):
            for record in student_records:
                if record.get(const.DATA_SA_INSTANCE_DATE):
                    continue
                completed = bool(record.get(const.DATA_SA_COMPLETED, False))
                return ResolvedCompletion(
                    completed=completed,
                    completed_at=(
                        record.get(const.DATA_SA_COMPLETED_AT) if completed else None
                    ),
                )
            return ResolvedCompletion()

        instance_completions = CompletionEngine.build_instance_completions(
            student_records
        )
        todays = instance_completions.get(today.isoformat())
        return ResolvedCompletion(
            completed=bool(todays and todays[const.DATA_SA_COMPLETED]),
            completed_at=todays[const.DATA_SA_COMPLETED_AT] if todays else None,
            instance_completions=instance_completions,
        )

    @staticmethod
    def is_instance_completed(
        instance_completions: dict[str, Any], instance_date: str | date
    ) -> bool:
        """Return completion of one instance; absent entries are not completed."""
        iso = dt_to_iso_date(instance_date)
        entry = instance_completions.get(iso) if iso else None
        return bool(entry and entry.get(const.DATA_SA_COMPLETED, False))

    # -------------------------------------------------------------------------
    # Toggle planning
    # -------------------------------------------------------------------------

    @staticmethod
    def resolve_toggle_target(
        assignment: dict[str, Any],
        instance_date: str | date | None,
        today: date,
    ) -> str | None:
        """Return the instance date a toggle writes to, or None for the bare pair.

        Recurring assignments always target an instance; when none is given,
        today's instance is used.

        Raises:
            InvalidToggleTargetError: instance date given for a one-time assignment.
            ValueError: instance date is not a calendar date.
        """
        assignment_id = assignment.get(const.DATA_ASSIGNMENT_INTERNAL_ID, "")
        iso = None
        if instance_date:
            iso = dt_to_iso_date(instance_date)
            if iso is None:
                raise ValueError(f"Invalid instance date: {instance_date!r}")

        if not assignment.get(const.DATA_ASSIGNMENT_IS_RECURRING, False):
            if iso:
                raise InvalidToggleTargetError(assignment_id, iso)
            return None

        if iso is None:
            const.LOGGER.debug(
                "DEBUG: Completion - No instance date for recurring assignment '%s', "
                "defaulting to today (%s)",
                assignment_id,
                today.isoformat(),
            )
            return today.isoformat()
        return iso

    @staticmethod
    def apply_toggle(
        record: StudentAssignmentData, completed: bool, now_iso: str
    ) -> StudentAssignmentData:
        """Return a copy of a record with the toggle applied.

        Completing stamps completed_at with now; un-completing clears it.
        """
        updated = dict(record)
        updated[const.DATA_SA_COMPLETED] = bool(completed)
        updated[const.DATA_SA_COMPLETED_AT] = now_iso if completed else None
        return updated  # type: ignore[return-value]

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    @staticmethod
    def build_completion_chart(
        records: dict[str, StudentAssignmentData],
        students: dict[str, Any],
        today: date,
        days: int = const.COMPLETION_CHART_DAYS,
        tz: ZoneInfo | None = None,
    ) -> CompletionChartData:
        """Count completed records per student per local day, oldest day first.

        A record counts on the local calendar day of its completed_at stamp.
        """
        day_list = [dt_add_days(today, offset) for offset in range(-(days - 1), 1)]
        index_by_key = {date_key(day): idx for idx, day in enumerate(day_list)}

        series: dict[str, list[int]] = {}
        student_names: dict[str, str] = {}
        for student_id, student in students.items():
            name = student.get(const.DATA_STUDENT_NAME, student_id)
            student_names[student_id] = name
            series[name] = [0] * len(day_list)

        total = 0
        for record in records.values():
            if not record.get(const.DATA_SA_COMPLETED, False):
                continue
            name = student_names.get(record.get(const.DATA_SA_STUDENT_ID, ""))
            if name is None:
                continue
            local_day = dt_timestamp_to_local_date(
                record.get(const.DATA_SA_COMPLETED_AT), tz
            )
            idx = index_by_key.get(date_key(local_day))
            if idx is None:
                continue
            series[name][idx] += 1
            total += 1

        return {
            const.ATTR_CHART_DAYS: [day.isoformat() for day in day_list],
            const.ATTR_CHART_SERIES: series,
            const.ATTR_CHART_TOTAL: total,
        }
