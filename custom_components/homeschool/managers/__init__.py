"""Manager modules for Homeschool Assignments.

Managers orchestrate workflows on top of the pure engines.
They are stateful, event-aware, and own every write to storage.
"""

from .assignment_manager import AssignmentManager
from .base_manager import BaseManager
from .event_manager import CalendarEventManager
from .note_manager import NoteManager
from .user_manager import UserManager

__all__ = [
    "AssignmentManager",
    "BaseManager",
    "CalendarEventManager",
    "NoteManager",
    "UserManager",
]
