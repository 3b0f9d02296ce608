"""Schedule Engine for Homeschool Assignments.

Generates the concrete calendar dates of a recurring assignment using
`dateutil.rrule`. Every function is a pure function of its inputs (today,
pattern, window), so results can be recomputed at any time.

IMPORTANT: This module must NOT import from coordinator.py to avoid circular imports.
Only import from const.py, type_defs.py, utils and standard libraries.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any, ClassVar

from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule, weekday

from .. import const
from ..utils.dt_utils import (
    date_key,
    dt_add_days,
    dt_format_day_label,
    dt_parse_date,
    weekday_index,
)

if TYPE_CHECKING:
    from ..type_defs import InstanceDescriptor, RecurrencePattern


class RecurrenceEngine:
    """Weekday recurrence over calendar dates.

    Handles both supported frequencies:
    - weekly: every date whose weekday is in the pattern's days
    - daily: every date, restricted to the pattern's days when any are given

    The series starts at `start_date` (the assignment's due date) and stops at
    `end_date` (inclusive) when one is set. A pattern that cannot produce dates
    (unknown frequency, weekly with no days) is marked invalid and yields
    nothing instead of raising; write-time validation lives in data_builders.
    """

    FREQUENCY_TO_RRULE: ClassVar[dict[str, int]] = {
        const.FREQUENCY_DAILY: DAILY,
        const.FREQUENCY_WEEKLY: WEEKLY,
    }

    WEEKDAY_TO_RRULE: ClassVar[tuple[weekday, ...]] = (MO, TU, WE, TH, FR, SA, SU)

    def __init__(
        self,
        pattern: RecurrencePattern | None,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
    ) -> None:
        """Initialize the recurrence engine.

        Args:
            pattern: Recurrence pattern dict (days + frequency), may be None.
            start_date: First date the series may produce (inclusive).
            end_date: Last date the series may produce (inclusive), optional.

        Note:
            Unknown weekday names are dropped. Duplicates collapse.
        """
        pattern = pattern or {}
        self._frequency = str(
            pattern.get(const.PATTERN_FREQUENCY) or const.FREQUENCY_WEEKLY
        ).lower()

        indexes = {
            idx
            for idx in (weekday_index(d) for d in pattern.get(const.PATTERN_DAYS) or [])
            if idx is not None
        }
        self._weekdays: list[int] = sorted(indexes)

        self._start_date = dt_parse_date(start_date)
        self._end_date = dt_parse_date(end_date)

        self._is_valid = self._frequency in self.FREQUENCY_TO_RRULE and (
            self._frequency == const.FREQUENCY_DAILY or bool(self._weekdays)
        )
        if not self._is_valid:
            const.LOGGER.debug(
                "DEBUG: RecurrenceEngine - Pattern yields no dates (frequency=%s, days=%s)",
                self._frequency,
                pattern.get(const.PATTERN_DAYS),
            )

    @classmethod
    def from_assignment(cls, assignment: dict[str, Any]) -> RecurrenceEngine:
        """Build an engine from a stored assignment record."""
        return cls(
            assignment.get(const.DATA_ASSIGNMENT_RECURRENCE_PATTERN),
            start_date=assignment.get(const.DATA_ASSIGNMENT_DUE_DATE),
            end_date=assignment.get(const.DATA_ASSIGNMENT_RECURRENCE_END_DATE),
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        """Return True when the pattern can produce dates."""
        return self._is_valid

    @property
    def weekdays(self) -> list[int]:
        """Return the pattern weekdays as 0 (Monday) .. 6 (Sunday)."""
        return list(self._weekdays)

    # -------------------------------------------------------------------------
    # Occurrence queries
    # -------------------------------------------------------------------------

    def get_occurrences(
        self,
        window_start: date,
        window_end: date,
        limit: int | None = None,
    ) -> list[date]:
        """Return occurrences within [window_start, window_end], ascending.

        The window is clamped to the series start and end dates. When `limit`
        is given, only the earliest `limit` dates are kept.
        """
        if not self._is_valid:
            return []

        start = window_start
        if self._start_date and date_key(self._start_date) > date_key(start):
            start = self._start_date
        end = window_end
        if self._end_date and date_key(self._end_date) < date_key(end):
            end = self._end_date
        if date_key(start) > date_key(end):
            return []

        rule = self._build_rule(start, until=end)
        dates: list[date] = []
        for occurrence in rule:
            dates.append(occurrence.date())
            if limit is not None and len(dates) >= limit:
                break
        return dates

    def get_instances(
        self,
        today: date,
        lookahead_days: int = const.DEFAULT_LOOKAHEAD_DAYS,
        max_instances: int | None = const.DEFAULT_MAX_INSTANCES,
    ) -> list[date]:
        """Return instance dates from today through today + lookahead_days.

        Both ends are inclusive. The result is truncated at the series end
        date and capped at `max_instances` (earliest dates kept).
        """
        window_end = dt_add_days(today, max(0, int(lookahead_days)))
        limit = None if max_instances is None else max(0, int(max_instances))
        if limit == 0:
            return []
        return self.get_occurrences(today, window_end, limit=limit)

    def get_next_occurrence(self, on_or_after: date) -> date | None:
        """Return the first occurrence on or after a date, or None."""
        if not self._is_valid:
            return None
        start = on_or_after
        if self._start_date and date_key(self._start_date) > date_key(start):
            start = self._start_date
        if self._end_date and date_key(start) > date_key(self._end_date):
            return None
        rule = self._build_rule(start, until=self._end_date)
        first = next(iter(rule), None)
        return first.date() if first else None

    def get_last_occurrence(self) -> date | None:
        """Return the final occurrence of a series with an end date, else None."""
        if not self._is_valid or self._end_date is None or self._start_date is None:
            return None
        rule = self._build_rule(self._start_date, until=self._end_date)
        last = rule.before(_as_datetime(self._end_date), inc=True)
        return last.date() if last else None

    # -------------------------------------------------------------------------
    # Descriptors
    # -------------------------------------------------------------------------

    @staticmethod
    def describe(dates: list[date]) -> list[InstanceDescriptor]:
        """Turn instance dates into `{date, day_label}` descriptors."""
        return [
            {
                const.INSTANCE_DATE: d.isoformat(),
                const.INSTANCE_DAY_LABEL: dt_format_day_label(d),
            }
            for d in dates
        ]

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _build_rule(self, dtstart: date, until: date | None = None) -> rrule:
        """Build the rrule for this pattern starting at dtstart."""
        byweekday = [self.WEEKDAY_TO_RRULE[idx] for idx in self._weekdays] or None
        return rrule(
            self.FREQUENCY_TO_RRULE[self._frequency],
            dtstart=_as_datetime(dtstart),
            until=_as_datetime(until) if until else None,
            byweekday=byweekday,
        )


def _as_datetime(value: date) -> datetime:
    """Return a naive midnight datetime for rrule arithmetic."""
    return datetime.combine(value, time.min)
