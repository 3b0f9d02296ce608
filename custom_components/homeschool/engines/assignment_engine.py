"""Assignment Engine - Pure classification and grouping logic.

This module classifies assignments against today's calendar date and groups
them for display. It has NO Home Assistant dependencies.

Classification rules (all comparisons via dt_utils.date_key):
    overdue   due <  today and not completed
    today     due == today, completed or not
    upcoming  due >  today
    past      due <= today (history view, overlaps "today")

Recurring assignments are classified on their effective due date: the first
instance in the lookahead window, else the next occurrence after it, else the
final occurrence of an ended series, else the stored due date. The completion
used is that of the instance on the effective date.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    date_key,
    dt_add_days,
    dt_format_long_date,
    dt_to_iso_date,
)
from .completion_engine import CompletionEngine
from .schedule_engine import RecurrenceEngine

if TYPE_CHECKING:
    from ..type_defs import AssignmentGroups, InstanceDescriptor, StudentAssignmentData


class AssignmentEngine:
    """Stateless assignment classification. All methods are static."""

    # -------------------------------------------------------------------------
    # Date classifier
    # -------------------------------------------------------------------------

    @staticmethod
    def is_overdue(due: str | date, today: date, completed: bool = False) -> bool:
        """Return True when due strictly before today and not completed."""
        due_key = date_key(due)
        return due_key is not None and due_key < date_key(today) and not completed

    @staticmethod
    def is_due_today(due: str | date, today: date) -> bool:
        """Return True when due on today's calendar date."""
        due_key = date_key(due)
        return due_key is not None and due_key == date_key(today)

    @staticmethod
    def is_upcoming(due: str | date, today: date) -> bool:
        """Return True when due strictly after today."""
        due_key = date_key(due)
        return due_key is not None and due_key > date_key(today)

    @staticmethod
    def is_past(due: str | date, today: date) -> bool:
        """Return True when due on or before today (history view)."""
        due_key = date_key(due)
        return due_key is not None and due_key <= date_key(today)

    @staticmethod
    def classify(due: str | date, today: date, completed: bool = False) -> str | None:
        """Return the live bucket for a due date.

        Returns one of overdue / today / upcoming, or None when the due date
        is not a calendar date. Completed items due before today belong to no
        live bucket (they only appear in the history view).
        """
        due_key = date_key(due)
        if due_key is None:
            return None
        today_key = date_key(today)
        if due_key == today_key:
            return const.BUCKET_TODAY
        if due_key > today_key:
            return const.BUCKET_UPCOMING
        return None if completed else const.BUCKET_OVERDUE

    @staticmethod
    def get_date_label(due: str | date, today: date, completed: bool = False) -> str:
        """Return a human label: Overdue, Due Today, Due Tomorrow or Due <date>."""
        if AssignmentEngine.is_overdue(due, today, completed):
            return const.LABEL_OVERDUE
        if AssignmentEngine.is_due_today(due, today):
            return const.LABEL_DUE_TODAY
        if date_key(due) == date_key(dt_add_days(today, 1)):
            return const.LABEL_DUE_TOMORROW
        return const.LABEL_DUE_DATE_FMT.format(dt_format_long_date(due))

    @staticmethod
    def get_urgency(due: str | date, today: date, completed: bool = False) -> str:
        """Return overdue / today / normal for display emphasis."""
        if AssignmentEngine.is_overdue(due, today, completed):
            return const.URGENCY_OVERDUE
        if AssignmentEngine.is_due_today(due, today) and not completed:
            return const.URGENCY_TODAY
        return const.URGENCY_NORMAL

    # -------------------------------------------------------------------------
    # Effective due date
    # -------------------------------------------------------------------------

    @staticmethod
    def get_effective_due_date(
        assignment: dict[str, Any],
        today: date,
        instances: list[date] | None = None,
        engine: RecurrenceEngine | None = None,
    ) -> str | None:
        """Return the date an assignment is classified on (ISO), or None."""
        due_date = dt_to_iso_date(assignment.get(const.DATA_ASSIGNMENT_DUE_DATE))
        if not assignment.get(const.DATA_ASSIGNMENT_IS_RECURRING, False):
            return due_date

        if instances:
            return instances[0].isoformat()

        engine = engine or RecurrenceEngine.from_assignment(assignment)
        upcoming = engine.get_next_occurrence(today)
        if upcoming:
            return upcoming.isoformat()
        last = engine.get_last_occurrence()
        if last:
            return last.isoformat()
        return due_date

    @staticmethod
    def is_completed_on_effective_date(assignment: dict[str, Any]) -> bool:
        """Return the completion that applies on the effective due date.

        Missing completion data reads as not completed.
        """
        if not assignment.get(const.DATA_ASSIGNMENT_IS_RECURRING, False):
            return bool(assignment.get(const.DATA_ASSIGNMENT_COMPLETED, False))
        effective = assignment.get(
            const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE
        ) or assignment.get(const.DATA_ASSIGNMENT_DUE_DATE)
        return CompletionEngine.is_instance_completed(
            assignment.get(const.DATA_ASSIGNMENT_INSTANCE_COMPLETIONS) or {},
            effective,
        )

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @staticmethod
    def build_view(
        assignment: dict[str, Any],
        records: dict[str, StudentAssignmentData],
        student_id: str | None,
        today: date,
        *,
        lookahead_days: int = const.DEFAULT_LOOKAHEAD_DAYS,
        max_instances: int = const.DEFAULT_MAX_INSTANCES,
        assigned_students: list[str] | None = None,
    ) -> dict[str, Any]:
        """Return a copy of the assignment enriched for one student.

        Adds completed / completed_at (headline), instance_completions,
        instances (descriptors with completion), effective_due_date,
        effective_completed, date_label, urgency and assigned_students.

        effective_completed is the completion on the effective due date. For
        a recurring series that has ended it reflects the last occurrence,
        where the headline only tracks today.
        """
        view = dict(assignment)
        view.setdefault(const.DATA_ASSIGNMENT_LINKS, [])
        resolved = CompletionEngine.resolve(assignment, records, student_id, today)

        instances: list[InstanceDescriptor] = []
        instance_dates: list[date] = []
        engine: RecurrenceEngine | None = None
        if assignment.get(const.DATA_ASSIGNMENT_IS_RECURRING, False):
            engine = RecurrenceEngine.from_assignment(assignment)
            instance_dates = engine.get_instances(today, lookahead_days, max_instances)
            for descriptor in RecurrenceEngine.describe(instance_dates):
                entry = resolved.instance_completions.get(
                    descriptor[const.INSTANCE_DATE]
                )
                descriptor[const.INSTANCE_COMPLETED] = bool(
                    entry and entry[const.DATA_SA_COMPLETED]
                )
                descriptor[const.INSTANCE_COMPLETED_AT] = (
                    entry[const.DATA_SA_COMPLETED_AT] if entry else None
                )
                instances.append(descriptor)

        view[const.DATA_ASSIGNMENT_COMPLETED] = resolved.completed
        view[const.DATA_ASSIGNMENT_COMPLETED_AT] = resolved.completed_at
        view[const.DATA_ASSIGNMENT_INSTANCE_COMPLETIONS] = resolved.instance_completions
        view[const.DATA_ASSIGNMENT_INSTANCES] = instances
        view[const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE] = (
            AssignmentEngine.get_effective_due_date(
                assignment, today, instance_dates, engine
            )
        )
        view[const.DATA_ASSIGNMENT_ASSIGNED_STUDENTS] = list(assigned_students or [])

        completed = AssignmentEngine.is_completed_on_effective_date(view)
        view[const.DATA_ASSIGNMENT_EFFECTIVE_COMPLETED] = completed
        effective = view[const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE]
        if effective:
            view[const.DATA_ASSIGNMENT_DATE_LABEL] = AssignmentEngine.get_date_label(
                effective, today, completed
            )
            view[const.DATA_ASSIGNMENT_URGENCY] = AssignmentEngine.get_urgency(
                effective, today, completed
            )
        return view

    # -------------------------------------------------------------------------
    # Grouping
    # -------------------------------------------------------------------------

    @staticmethod
    def group_assignments(
        assignments: list[dict[str, Any]], today: date
    ) -> AssignmentGroups:
        """Partition assignments into overdue / today / upcoming / past.

        Each assignment lands in at most one of the live buckets. "past" is
        the history view and may repeat items also in "today" or "overdue".
        upcoming and past are sorted ascending by date (stable); overdue and
        today keep input order. Assignments without a parseable date are
        left out and logged.
        """
        groups: AssignmentGroups = {
            const.BUCKET_OVERDUE: [],
            const.BUCKET_TODAY: [],
            const.BUCKET_UPCOMING: [],
            const.BUCKET_PAST: [],
        }

        for assignment in assignments:
            due = assignment.get(
                const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE
            ) or assignment.get(const.DATA_ASSIGNMENT_DUE_DATE)
            if date_key(due) is None:
                const.LOGGER.warning(
                    "WARNING: Assignment '%s' has no valid due date (%s), not grouped",
                    assignment.get(const.DATA_ASSIGNMENT_TITLE),
                    due,
                )
                continue

            completed = AssignmentEngine.is_completed_on_effective_date(assignment)
            bucket = AssignmentEngine.classify(due, today, completed)
            if bucket is not None:
                groups[bucket].append(assignment)
            if AssignmentEngine.is_past(due, today):
                groups[const.BUCKET_PAST].append(assignment)

        for bucket in (const.BUCKET_UPCOMING, const.BUCKET_PAST):
            groups[bucket].sort(key=AssignmentEngine._sort_key)
        return groups

    @staticmethod
    def group_for_student(
        assignments: list[dict[str, Any]],
        records: dict[str, StudentAssignmentData],
        student_id: str | None,
        today: date,
        *,
        lookahead_days: int = const.DEFAULT_LOOKAHEAD_DAYS,
        max_instances: int = const.DEFAULT_MAX_INSTANCES,
    ) -> AssignmentGroups:
        """Build views for one (possibly unknown) student and group them."""
        views = [
            AssignmentEngine.build_view(
                assignment,
                records,
                student_id,
                today,
                lookahead_days=lookahead_days,
                max_instances=max_instances,
            )
            for assignment in assignments
        ]
        return AssignmentEngine.group_assignments(views, today)

    @staticmethod
    def _sort_key(assignment: dict[str, Any]) -> tuple[int, int, int]:
        """Sort by effective (or stored) due date."""
        due = assignment.get(
            const.DATA_ASSIGNMENT_EFFECTIVE_DUE_DATE
        ) or assignment.get(const.DATA_ASSIGNMENT_DUE_DATE)
        return date_key(due) or (0, 0, 0)
