"""Record building and write-boundary validation.

This module is the SINGLE SOURCE OF TRUTH for:
- Record field defaults
- Business rule validation at write time
- Complete record structure building

### Build Functions
Each record type has a `build_<record>()` function that:
- Takes user_input keyed by DATA_* constants (services map their fields first)
- Generates internal_id (UUID) for new records
- Sets timestamps (created_at, updated_at)
- Resolves every field as user_input > existing > default
- Raises EntityValidationError when a rule is broken

### Validation Functions
`validate_<record>_data()` checks rules that need the other stored records
(unique names) and returns a dict of field -> translation key, empty if valid.

Malformed recurrence is rejected here, at construction/edit time. Read paths
never re-validate.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
import uuid

from . import const
from .type_defs import (
    AssignmentData,
    AssignmentLink,
    CalendarEventData,
    NoteData,
    ParentData,
    RecurrencePattern,
    StudentAssignmentData,
    StudentData,
)
from .utils.dt_utils import (
    date_key,
    dt_add_days,
    dt_now_iso,
    dt_parse_event_time,
    dt_to_iso_date,
    weekday_index,
)

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Raised when business rule validation fails while building a record.
    Services turn it into a ServiceValidationError using the translation key.

    Attributes:
        field: The DATA_* key of the field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


class InvalidRecurrencePatternError(EntityValidationError):
    """A recurring assignment whose pattern cannot generate instances."""


# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_list_field(value: Any) -> list[Any]:
    """Normalize a field that should be a list.

    Strings become a single-element list, never a list of characters.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value] if value else []
    return list(value) if value else []


def _field_getter(user_input: dict[str, Any], existing: Any):
    """Return get_field(key, default): user_input > existing > default."""

    def get_field(key: str, default: Any) -> Any:
        if key in user_input:
            return user_input[key]
        if existing is not None:
            return existing.get(key, default)
        return default

    return get_field


def _clean_name(raw: Any) -> str:
    return str(raw).strip() if raw else ""


# ==============================================================================
# RECURRENCE / LINKS
# ==============================================================================


def build_recurrence_pattern(raw: Any) -> RecurrencePattern:
    """Validate and normalize a recurrence pattern.

    Weekday names are lower-cased, de-duplicated and ordered Monday..Sunday.
    Short forms ("mon") are accepted.

    Raises:
        InvalidRecurrencePatternError: Missing pattern, unknown frequency,
            unknown weekday, or a weekly pattern without days.
    """
    if not isinstance(raw, dict):
        raise InvalidRecurrencePatternError(
            field=const.DATA_ASSIGNMENT_RECURRENCE_PATTERN,
            translation_key=const.TRANS_KEY_ERROR_INVALID_RECURRENCE_PATTERN,
        )

    frequency = str(
        raw.get(const.PATTERN_FREQUENCY) or const.FREQUENCY_WEEKLY
    ).lower()
    if frequency not in const.FREQUENCY_OPTIONS:
        raise InvalidRecurrencePatternError(
            field=const.PATTERN_FREQUENCY,
            translation_key=const.TRANS_KEY_ERROR_INVALID_FREQUENCY,
            placeholders={"frequency": frequency},
        )

    indexes: set[int] = set()
    for day in _normalize_list_field(raw.get(const.PATTERN_DAYS)):
        idx = weekday_index(day)
        if idx is None:
            raise InvalidRecurrencePatternError(
                field=const.PATTERN_DAYS,
                translation_key=const.TRANS_KEY_ERROR_INVALID_WEEKDAY,
                placeholders={"day": str(day)},
            )
        indexes.add(idx)

    if frequency == const.FREQUENCY_WEEKLY and not indexes:
        raise InvalidRecurrencePatternError(
            field=const.PATTERN_DAYS,
            translation_key=const.TRANS_KEY_ERROR_INVALID_RECURRENCE_PATTERN,
        )

    return RecurrencePattern(
        days=[const.WEEKDAY_NAMES[idx] for idx in sorted(indexes)],
        frequency=frequency,  # type: ignore[typeddict-item]
    )


def build_links(raw: Any) -> list[AssignmentLink]:
    """Normalize assignment links, keeping their order.

    Each link needs a URL. The title defaults to the URL and the type to "link".

    Raises:
        EntityValidationError: A link without URL or with an unknown type.
    """
    links: list[AssignmentLink] = []
    for item in _normalize_list_field(raw):
        if isinstance(item, str):
            item = {const.LINK_URL: item}
        if not isinstance(item, dict):
            raise EntityValidationError(
                field=const.DATA_ASSIGNMENT_LINKS,
                translation_key=const.TRANS_KEY_ERROR_INVALID_LINK,
                placeholders={"link": str(item)},
            )
        url = _clean_name(item.get(const.LINK_URL))
        link_type = str(item.get(const.LINK_TYPE) or const.LINK_TYPE_LINK).lower()
        if not url or link_type not in const.LINK_TYPES:
            raise EntityValidationError(
                field=const.DATA_ASSIGNMENT_LINKS,
                translation_key=const.TRANS_KEY_ERROR_INVALID_LINK,
                placeholders={"link": url or str(item)},
            )
        links.append(
            AssignmentLink(
                title=_clean_name(item.get(const.LINK_TITLE)) or url,
                url=url,
                type=link_type,  # type: ignore[typeddict-item]
            )
        )
    return links


# ==============================================================================
# ASSIGNMENTS
# ==============================================================================


def build_assignment(
    user_input: dict[str, Any],
    existing: AssignmentData | None = None,
) -> AssignmentData:
    """Build assignment data for create or update operations.

    One function handles both create (existing=None) and update.

    Args:
        user_input: Data with DATA_ASSIGNMENT_* keys (may have missing fields)
        existing: None for create, existing AssignmentData for update

    Returns:
        Complete AssignmentData ready for storage

    Raises:
        EntityValidationError: Empty title, invalid due date, invalid links,
            or an end date before the start date.
        InvalidRecurrencePatternError: Recurring without a usable pattern.
    """
    is_create = existing is None
    get_field = _field_getter(user_input, existing)

    # --- Title ---
    title = _clean_name(get_field(const.DATA_ASSIGNMENT_TITLE, ""))
    if not title:
        raise EntityValidationError(
            field=const.DATA_ASSIGNMENT_TITLE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_TITLE,
        )

    # --- Due date (start date for recurring) ---
    raw_due = get_field(const.DATA_ASSIGNMENT_DUE_DATE, None)
    due_date = dt_to_iso_date(raw_due)
    if due_date is None:
        raise EntityValidationError(
            field=const.DATA_ASSIGNMENT_DUE_DATE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_DUE_DATE,
            placeholders={"value": str(raw_due)},
        )

    # --- Recurrence (pattern and end date only exist when recurring) ---
    is_recurring = bool(get_field(const.DATA_ASSIGNMENT_IS_RECURRING, False))
    pattern: RecurrencePattern | None = None
    end_date: str | None = None
    if is_recurring:
        pattern = build_recurrence_pattern(
            get_field(const.DATA_ASSIGNMENT_RECURRENCE_PATTERN, None)
        )
        raw_end = get_field(const.DATA_ASSIGNMENT_RECURRENCE_END_DATE, None)
        if raw_end:
            end_date = dt_to_iso_date(raw_end)
            if end_date is None or date_key(end_date) < date_key(due_date):
                raise InvalidRecurrencePatternError(
                    field=const.DATA_ASSIGNMENT_RECURRENCE_END_DATE,
                    translation_key=const.TRANS_KEY_ERROR_INVALID_END_DATE,
                    placeholders={"end_date": str(raw_end), "start_date": due_date},
                )

    # --- Internal ID and timestamps ---
    now_iso = dt_now_iso()
    if is_create or existing is None:
        internal_id = str(uuid.uuid4())
        created_at = now_iso
    else:
        internal_id = existing.get(
            const.DATA_ASSIGNMENT_INTERNAL_ID, str(uuid.uuid4())
        )
        created_at = existing.get(const.DATA_ASSIGNMENT_CREATED_AT, now_iso)

    return AssignmentData(
        internal_id=internal_id,
        title=title,
        content=get_field(const.DATA_ASSIGNMENT_CONTENT, None),
        links=build_links(get_field(const.DATA_ASSIGNMENT_LINKS, [])),
        due_date=due_date,
        is_recurring=is_recurring,
        recurrence_pattern=pattern,
        recurrence_end_date=end_date,
        next_due_date=due_date if is_recurring else None,
        category=_clean_name(get_field(const.DATA_ASSIGNMENT_CATEGORY, "")),
        parent_id=get_field(const.DATA_ASSIGNMENT_PARENT_ID, None) or None,
        created_at=created_at,
        updated_at=now_iso,
    )


# ==============================================================================
# COMPLETION RECORDS
# ==============================================================================


def build_student_assignment(
    assignment_id: str,
    student_id: str,
    instance_date: str | None = None,
) -> StudentAssignmentData:
    """Build a fresh, not-completed completion record."""
    return StudentAssignmentData(
        assignment_id=assignment_id,
        student_id=student_id,
        instance_date=instance_date,
        completed=False,
        completed_at=None,
        created_at=dt_now_iso(),
    )


# ==============================================================================
# STUDENTS
# ==============================================================================


def validate_student_data(
    data: dict[str, Any],
    existing_students: dict[str, Any] | None = None,
    *,
    current_student_id: str | None = None,
) -> dict[str, str]:
    """Validate student business rules.

    Returns:
        Dict of errors (field -> translation key). Empty means valid.
    """
    errors: dict[str, str] = {}
    name = _clean_name(data.get(const.DATA_STUDENT_NAME))
    if not name:
        errors[const.DATA_STUDENT_NAME] = const.TRANS_KEY_ERROR_INVALID_STUDENT_NAME
        return errors

    for student_id, student in (existing_students or {}).items():
        if student_id == current_student_id:
            continue
        if _clean_name(student.get(const.DATA_STUDENT_NAME)).lower() == name.lower():
            errors[const.DATA_STUDENT_NAME] = const.TRANS_KEY_ERROR_DUPLICATE_STUDENT
            break
    return errors


def build_student(
    user_input: dict[str, Any],
    existing: StudentData | None = None,
) -> StudentData:
    """Build student data for create or update operations.

    Raises:
        EntityValidationError: If the name is empty.
    """
    is_create = existing is None
    get_field = _field_getter(user_input, existing)

    name = _clean_name(get_field(const.DATA_STUDENT_NAME, ""))
    if not name:
        raise EntityValidationError(
            field=const.DATA_STUDENT_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_STUDENT_NAME,
        )

    if is_create or existing is None:
        internal_id = str(uuid.uuid4())
    else:
        internal_id = existing.get(const.DATA_STUDENT_INTERNAL_ID, str(uuid.uuid4()))

    return StudentData(
        internal_id=internal_id,
        name=name,
        ha_user_id=get_field(const.DATA_STUDENT_HA_USER_ID, "") or "",
        parent_id=get_field(const.DATA_STUDENT_PARENT_ID, None) or None,
    )


# ==============================================================================
# PARENTS
# ==============================================================================


def validate_parent_data(
    data: dict[str, Any],
    existing_parents: dict[str, Any] | None = None,
    *,
    current_parent_id: str | None = None,
) -> dict[str, str]:
    """Validate parent business rules (non-empty, unique name)."""
    errors: dict[str, str] = {}
    name = _clean_name(data.get(const.DATA_PARENT_NAME))
    if not name:
        errors[const.DATA_PARENT_NAME] = const.TRANS_KEY_ERROR_INVALID_PARENT_NAME
        return errors

    for parent_id, parent in (existing_parents or {}).items():
        if parent_id == current_parent_id:
            continue
        if _clean_name(parent.get(const.DATA_PARENT_NAME)).lower() == name.lower():
            errors[const.DATA_PARENT_NAME] = const.TRANS_KEY_ERROR_DUPLICATE_PARENT
            break
    return errors


def build_parent(
    user_input: dict[str, Any],
    existing: ParentData | None = None,
) -> ParentData:
    """Build parent data for create or update operations.

    Raises:
        EntityValidationError: If the name is empty.
    """
    is_create = existing is None
    get_field = _field_getter(user_input, existing)

    name = _clean_name(get_field(const.DATA_PARENT_NAME, ""))
    if not name:
        raise EntityValidationError(
            field=const.DATA_PARENT_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_PARENT_NAME,
        )

    if is_create or existing is None:
        internal_id = str(uuid.uuid4())
    else:
        internal_id = existing.get(const.DATA_PARENT_INTERNAL_ID, str(uuid.uuid4()))

    associated: list[str] = []
    for student_id in _normalize_list_field(
        get_field(const.DATA_PARENT_ASSOCIATED_STUDENTS, [])
    ):
        if student_id and student_id not in associated:
            associated.append(student_id)

    return ParentData(
        internal_id=internal_id,
        name=name,
        ha_user_id=get_field(const.DATA_PARENT_HA_USER_ID, "") or "",
        associated_students=associated,
        is_admin=bool(get_field(const.DATA_PARENT_IS_ADMIN, False)),
    )


# ==============================================================================
# NOTES
# ==============================================================================


def build_note(
    user_input: dict[str, Any],
    existing: NoteData | None = None,
) -> NoteData:
    """Build a student note for create or update operations.

    Title and category are required and stripped. Content is kept as given
    (plain text or a rich-text document).

    Raises:
        EntityValidationError: Empty title or empty category.
    """
    is_create = existing is None
    get_field = _field_getter(user_input, existing)

    title = _clean_name(get_field(const.DATA_NOTE_TITLE, ""))
    if not title:
        raise EntityValidationError(
            field=const.DATA_NOTE_TITLE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_TITLE,
        )
    category = _clean_name(get_field(const.DATA_NOTE_CATEGORY, ""))
    if not category:
        raise EntityValidationError(
            field=const.DATA_NOTE_CATEGORY,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NOTE_CATEGORY,
        )

    now_iso = dt_now_iso()
    if is_create or existing is None:
        internal_id = str(uuid.uuid4())
        created_at = now_iso
    else:
        internal_id = existing.get(const.DATA_NOTE_INTERNAL_ID, str(uuid.uuid4()))
        created_at = existing.get(const.DATA_NOTE_CREATED_AT, now_iso)

    return NoteData(
        internal_id=internal_id,
        student_id=get_field(const.DATA_NOTE_STUDENT_ID, ""),
        title=title,
        category=category,
        content=get_field(const.DATA_NOTE_CONTENT, None),
        assignment_id=get_field(const.DATA_NOTE_ASSIGNMENT_ID, None) or None,
        created_by=get_field(const.DATA_NOTE_CREATED_BY, "") or "",
        created_at=created_at,
        updated_at=now_iso,
    )


# ==============================================================================
# CALENDAR EVENTS
# ==============================================================================


def build_calendar_event(
    user_input: dict[str, Any],
    existing: CalendarEventData | None = None,
) -> CalendarEventData:
    """Build a user-created calendar event for create or update operations.

    Bounds are either both dates (all-day, end exclusive) or both datetimes.
    An all-day event without an end lasts one day.

    Raises:
        EntityValidationError: Empty title, unparseable bounds, mixed bound
            types, or an end that is not after the start.
    """
    is_create = existing is None
    get_field = _field_getter(user_input, existing)

    title = _clean_name(get_field(const.DATA_EVENT_TITLE, ""))
    if not title:
        raise EntityValidationError(
            field=const.DATA_EVENT_TITLE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_TITLE,
        )

    raw_start = get_field(const.DATA_EVENT_START, None)
    raw_end = get_field(const.DATA_EVENT_END, None)
    start = dt_parse_event_time(raw_start)
    end = dt_parse_event_time(raw_end)
    if end is None and start is not None and not isinstance(start, datetime):
        end = dt_add_days(start, 1)

    range_error = EntityValidationError(
        field=const.DATA_EVENT_END,
        translation_key=const.TRANS_KEY_ERROR_INVALID_EVENT_RANGE,
        placeholders={"start": str(raw_start), "end": str(raw_end)},
    )
    if start is None or end is None:
        raise range_error
    if isinstance(start, datetime) != isinstance(end, datetime):
        raise range_error
    if end <= start:
        raise range_error

    now_iso = dt_now_iso()
    if is_create or existing is None:
        internal_id = str(uuid.uuid4())
        created_at = now_iso
    else:
        internal_id = existing.get(const.DATA_EVENT_INTERNAL_ID, str(uuid.uuid4()))
        created_at = existing.get(const.DATA_EVENT_CREATED_AT, now_iso)

    return CalendarEventData(
        internal_id=internal_id,
        student_id=get_field(const.DATA_EVENT_STUDENT_ID, ""),
        title=title,
        description=str(get_field(const.DATA_EVENT_DESCRIPTION, "") or ""),
        start=start.isoformat(),
        end=end.isoformat(),
        created_at=created_at,
        updated_at=now_iso,
    )
