"""Type definitions for Homeschool Assignments data structures.

TypedDicts describe the fixed-shape records kept in storage and the derived
read-side structures handed to entities. Dynamic structures (the per-date
instance completion map, bucket dicts) stay `dict[str, Any]`.

IMPORTANT: This file must NOT import from coordinator.py or any file that imports
the coordinator, to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime checks (.get() defaults,
parsing) remain in the engines and builders.
"""

from typing import Any, Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

StudentId = str  # UUID string
ParentId = str  # UUID string
AssignmentId = str  # UUID string
NoteId = str  # UUID string
EventId = str  # UUID string
RecordKey = str  # "<assignment_id>|<student_id>[|<instance_date>]"
ISODatetime = str  # ISO 8601 datetime string "2024-01-15T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2024-01-15"


# =============================================================================
# Stored entities
# =============================================================================


class StudentData(TypedDict):
    """A student profile."""

    internal_id: StudentId
    name: str
    ha_user_id: str
    parent_id: ParentId | None


class ParentData(TypedDict):
    """A parent profile. Admin parents manage every family."""

    internal_id: ParentId
    name: str
    ha_user_id: str
    associated_students: list[StudentId]
    is_admin: bool


class RecurrencePattern(TypedDict):
    """Weekday recurrence pattern.

    `days` holds lower-case weekday names in Monday..Sunday order. It must be
    non-empty for weekly patterns; for daily patterns an empty list means
    every day.
    """

    days: list[str]
    frequency: Literal["weekly", "daily"]


class AssignmentLink(TypedDict):
    """A resource link attached to an assignment."""

    title: str
    url: str
    type: Literal["link", "video"]


class AssignmentData(TypedDict):
    """A one-time or recurring assignment."""

    internal_id: AssignmentId
    title: str
    content: Any  # opaque body, stored as given
    links: list[AssignmentLink]
    due_date: ISODate
    is_recurring: bool
    recurrence_pattern: RecurrencePattern | None
    recurrence_end_date: ISODate | None
    next_due_date: ISODate | None
    category: str
    parent_id: ParentId | None
    created_at: ISODatetime
    updated_at: ISODatetime


class StudentAssignmentData(TypedDict):
    """Completion record for one student and one assignment (or one instance)."""

    assignment_id: AssignmentId
    student_id: StudentId
    instance_date: ISODate | None
    completed: bool
    completed_at: ISODatetime | None
    created_at: ISODatetime


class NoteData(TypedDict):
    """A student's note, optionally tied to an assignment."""

    internal_id: NoteId
    student_id: StudentId
    title: str
    category: str
    content: Any  # plain text or a rich-text document
    assignment_id: AssignmentId | None
    created_by: str  # HA user id, empty for automations
    created_at: ISODatetime
    updated_at: ISODatetime


class CalendarEventData(TypedDict):
    """A user-created event on a student's calendar.

    `start`/`end` are ISO dates for all-day events (end exclusive) and ISO
    datetimes otherwise.
    """

    internal_id: EventId
    student_id: StudentId
    title: str
    description: str
    start: str
    end: str
    created_at: ISODatetime
    updated_at: ISODatetime


# =============================================================================
# Derived (never persisted)
# =============================================================================


class InstanceCompletion(TypedDict):
    """Completion state of one recurring instance."""

    completed: bool
    completed_at: ISODatetime | None


class InstanceDescriptor(TypedDict):
    """One generated occurrence of a recurring assignment."""

    date: ISODate
    day_label: str
    completed: NotRequired[bool]
    completed_at: NotRequired[ISODatetime | None]


class AssignmentGroups(TypedDict):
    """Assignments partitioned for display."""

    overdue: list[dict[str, Any]]
    today: list[dict[str, Any]]
    upcoming: list[dict[str, Any]]
    past: list[dict[str, Any]]


class CompletionChartData(TypedDict):
    """Completed-record counts per student per day."""

    days: list[ISODate]
    series: dict[str, list[int]]
    total: int
