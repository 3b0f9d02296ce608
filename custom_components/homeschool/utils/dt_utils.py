# File: utils/dt_utils.py
"""Date and time utilities for Homeschool Assignments.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Calendar dates (due dates, instance dates, end dates) are always handled as
`datetime.date` values or `YYYY-MM-DD` strings. They are never turned into
timestamps, so a bare date can never shift across midnight through a timezone
conversion. Every ordering decision goes through `date_key()`, which reduces a
date to an integer `(year, month, day)` tuple.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_today_iso: Get today's date as ISO string
    - dt_now_utc: Get current datetime in UTC
    - dt_now_iso: Get current UTC datetime as ISO string
    - dt_parse_date: Parse calendar date strings
    - dt_to_iso_date: Normalize a calendar date to YYYY-MM-DD
    - dt_parse_event_time: Parse an all-day date or a timed event bound
    - dt_event_day_span: Local calendar days an event covers
    - dt_timestamp_to_local_date: Local calendar day of a stored timestamp
    - date_key: Calendar-safe comparison key
    - dt_compare_dates: Three-way calendar date comparison
    - dt_add_days: Calendar day arithmetic
    - dt_format_day_label: "Mon, Jan 15"
    - dt_format_long_date: "Jan 15, 2024"
    - weekday_index: Map a weekday name to 0 (Monday) .. 6 (Sunday)
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
import logging
from zoneinfo import ZoneInfo

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Python weekday order: index 0 is Monday
WEEKDAY_NAMES: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# Short forms accepted on input ("mon", "tue", ...)
_WEEKDAY_ALIASES: dict[str, int] = {
    **{name: idx for idx, name in enumerate(WEEKDAY_NAMES)},
    **{name[:3]: idx for idx, name in enumerate(WEEKDAY_NAMES)},
}

DAY_LABEL_FORMAT = "%a, %b %d"
LONG_DATE_FORMAT = "%b %d, %Y"

DateKey = tuple[int, int, int]


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Today's date in the specified timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD)."""
    return dt_today_local(tz).isoformat()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC datetime as an ISO 8601 string.

    Example:
        "2024-01-15T14:30:00.123456+00:00"
    """
    return dt_now_utc().isoformat()


# ==============================================================================
# Parsing / Normalization
# ==============================================================================


def dt_parse_date(value: str | date | None) -> date | None:
    """Safely parse a calendar date.

    Accepts:
    - `datetime.date` (returned as-is)
    - `datetime.datetime` (its own calendar date, no timezone conversion)
    - "2024-01-15" (ISO date)
    - "2024-01-15T09:00:00+00:00" (only the date part is used)

    Trailing text that is not a time ("2024-01-15junk") is rejected.

    Returns:
        datetime.date or None if parsing fails.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    # Timestamp-shaped input: keep the written calendar date
    try:
        return isoparse(text).date()
    except ValueError:
        _LOGGER.debug("DEBUG: Unparseable calendar date '%s'", value)
        return None


def dt_to_iso_date(value: str | date | None) -> str | None:
    """Normalize a calendar date input to a YYYY-MM-DD string, or None."""
    parsed = dt_parse_date(value)
    return parsed.isoformat() if parsed else None


def dt_parse_event_time(
    value: str | date | None, tz: ZoneInfo | None = None
) -> date | datetime | None:
    """Parse a calendar event bound: a bare date (all-day) or a datetime.

    Naive datetimes are taken to be local time. Returns None when unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    else:
        text = str(value).strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            parsed = isoparse(text)
        except ValueError:
            _LOGGER.debug("DEBUG: Unparseable event time '%s'", value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz or DEFAULT_TIME_ZONE)
    return parsed


def dt_event_day_span(
    start: date | datetime, end: date | datetime, tz: ZoneInfo | None = None
) -> tuple[date, date]:
    """Return the first and last local calendar days an event covers.

    Ends are exclusive: an all-day event ending on the 16th, or a timed one
    ending at local midnight, last covers the 15th.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if isinstance(start, datetime):
        start = start.astimezone(tz_info)
    if isinstance(end, datetime):
        end = end.astimezone(tz_info)
        last_day = end.date()
        at_midnight = end.time() == time.min
    else:
        last_day = end
        at_midnight = True
    first_day = start.date() if isinstance(start, datetime) else start
    if at_midnight and last_day > first_day:
        last_day = dt_add_days(last_day, -1)
    return first_day, last_day


def dt_timestamp_to_local_date(
    timestamp: str | None, tz: ZoneInfo | None = None
) -> date | None:
    """Return the local calendar day on which a stored UTC timestamp falls.

    Used for completion timestamps, which are real instants (unlike due dates).
    """
    if not timestamp:
        return None
    try:
        parsed = isoparse(timestamp)
    except (TypeError, ValueError):
        _LOGGER.debug("DEBUG: Unparseable timestamp '%s'", timestamp)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(tz or DEFAULT_TIME_ZONE).date()


# ==============================================================================
# Calendar-Safe Comparison
# ==============================================================================


def date_key(value: str | date | None) -> DateKey | None:
    """Return the `(year, month, day)` integer tuple for a calendar date.

    This is the only comparison primitive used for classification.
    Returns None when the value cannot be parsed.
    """
    parsed = dt_parse_date(value)
    if parsed is None:
        return None
    return (parsed.year, parsed.month, parsed.day)


def dt_compare_dates(left: str | date, right: str | date) -> int:
    """Three-way compare two calendar dates (-1, 0, 1).

    Raises:
        ValueError: If either side is not a calendar date.
    """
    left_key = date_key(left)
    right_key = date_key(right)
    if left_key is None or right_key is None:
        raise ValueError(f"Cannot compare calendar dates {left!r} and {right!r}")
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def dt_add_days(value: date, days: int) -> date:
    """Add (or subtract) whole calendar days."""
    return value + relativedelta(days=days)


# ==============================================================================
# Formatting
# ==============================================================================


def dt_format_day_label(value: str | date) -> str:
    """Format a calendar date as a short day label, e.g. "Mon, Jan 15"."""
    parsed = dt_parse_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime(DAY_LABEL_FORMAT)


def dt_format_long_date(value: str | date) -> str:
    """Format a calendar date for display, e.g. "Jan 15, 2024"."""
    parsed = dt_parse_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime(LONG_DATE_FORMAT)


def weekday_index(name: str | None) -> int | None:
    """Map a weekday name ("monday" or "mon", any case) to 0..6, else None."""
    if not name or not isinstance(name, str):
        return None
    return _WEEKDAY_ALIASES.get(name.strip().lower())
