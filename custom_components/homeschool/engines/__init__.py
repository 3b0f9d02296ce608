"""Engine modules for Homeschool Assignments.

Contains pure computation engines (no Home Assistant imports):
- schedule_engine: Recurrence instance generation with dateutil.rrule
- completion_engine: Completion resolution, toggle planning, chart data
- assignment_engine: Date classification and bucket grouping
"""

# Use relative imports within package to avoid mypy module resolution issues
from .assignment_engine import AssignmentEngine
from .completion_engine import (
    CompletionEngine,
    InvalidToggleTargetError,
    ResolvedCompletion,
)
from .schedule_engine import RecurrenceEngine

__all__ = [
    "AssignmentEngine",
    "CompletionEngine",
    "InvalidToggleTargetError",
    "RecurrenceEngine",
    "ResolvedCompletion",
]
