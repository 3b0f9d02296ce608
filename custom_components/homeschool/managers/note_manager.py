"""Note manager for Homeschool Assignments.

Students (and their parents) keep notes per student: a required title and
category, free or rich-text content, and an optional link to an assignment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const, data_builders as db
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import NoteData


class NoteManager(BaseManager):
    """Manages student notes."""

    async def async_setup(self) -> None:
        """Follow student and assignment deletes."""
        self.listen(const.SIGNAL_SUFFIX_STUDENT_DELETED, self._on_student_deleted)
        self.listen(
            const.SIGNAL_SUFFIX_ASSIGNMENT_DELETED, self._on_assignment_deleted
        )

    @property
    def _notes(self) -> dict[str, NoteData]:
        return self._bucket(const.DATA_NOTES)

    def get_note(self, note_id: str) -> NoteData:
        """Return a note or raise not_found."""
        note = self._get_or_raise(const.DATA_NOTES, note_id, const.LABEL_NOTE)
        return note  # type: ignore[return-value]

    def get_notes_for_student(
        self, student_id: str, category: str | None = None
    ) -> list[NoteData]:
        """Return a student's notes, newest first, optionally one category only."""
        wanted = category.strip().lower() if category else None
        notes = [
            note
            for note in self._notes.values()
            if note.get(const.DATA_NOTE_STUDENT_ID) == student_id
            and (
                wanted is None
                or str(note.get(const.DATA_NOTE_CATEGORY, "")).lower() == wanted
            )
        ]
        notes.sort(
            key=lambda note: note.get(const.DATA_NOTE_CREATED_AT, ""), reverse=True
        )
        return notes

    # -------------------------------------------------------------------------
    # Create / Update / Delete
    # -------------------------------------------------------------------------

    def add_note(self, student_id: str, user_input: dict[str, Any]) -> str:
        """Add a note for a student.

        Raises:
            HomeAssistantError: Unknown student or linked assignment.
            EntityValidationError: Empty title or category.
        """
        self._get_or_raise(const.DATA_STUDENTS, student_id, const.LABEL_STUDENT)
        if assignment_id := user_input.get(const.DATA_NOTE_ASSIGNMENT_ID):
            self._get_or_raise(
                const.DATA_ASSIGNMENTS, assignment_id, const.LABEL_ASSIGNMENT
            )

        note = db.build_note({**user_input, const.DATA_NOTE_STUDENT_ID: student_id})
        note_id = note[const.DATA_NOTE_INTERNAL_ID]
        self._notes[note_id] = note

        self._commit(const.SIGNAL_SUFFIX_NOTE_CREATED, note_id=note_id)
        const.LOGGER.info(
            "INFO: Added note '%s' for student '%s'",
            note[const.DATA_NOTE_TITLE],
            self._student_name(student_id),
        )
        return note_id

    def update_note(self, note_id: str, user_input: dict[str, Any]) -> None:
        """Edit a note's title, category or content. The student stays."""
        existing = self.get_note(note_id)
        user_input = {
            key: value
            for key, value in user_input.items()
            if key != const.DATA_NOTE_STUDENT_ID
        }
        self._notes[note_id] = db.build_note(user_input, existing=existing)
        self._commit(const.SIGNAL_SUFFIX_NOTE_UPDATED, note_id=note_id)

    def delete_note(self, note_id: str) -> None:
        """Delete a note."""
        note = self.get_note(note_id)
        del self._notes[note_id]
        self._commit(const.SIGNAL_SUFFIX_NOTE_DELETED, note_id=note_id)
        const.LOGGER.info("INFO: Deleted note '%s'", note.get(const.DATA_NOTE_TITLE))

    # -------------------------------------------------------------------------
    # Cascades
    # -------------------------------------------------------------------------

    @callback
    def _on_student_deleted(self, payload: dict[str, Any]) -> None:
        student_id = payload.get("student_id")
        doomed = [
            note_id
            for note_id, note in self._notes.items()
            if note.get(const.DATA_NOTE_STUDENT_ID) == student_id
        ]
        for note_id in doomed:
            del self._notes[note_id]

    @callback
    def _on_assignment_deleted(self, payload: dict[str, Any]) -> None:
        """Keep the notes, drop their link to the deleted assignment."""
        assignment_id = payload.get("assignment_id")
        for note in self._notes.values():
            if note.get(const.DATA_NOTE_ASSIGNMENT_ID) == assignment_id:
                note[const.DATA_NOTE_ASSIGNMENT_ID] = None
