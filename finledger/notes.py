"""
Note Edit Coordinator

Notes are edited live: every keystroke lands in the document immediately
and a debounced write follows. At most one note is "active" (receiving
keystrokes) at any time, tracked in a single slot.

Text reaches the document at two points:

- on switch: when another note starts receiving input (or focus), the
  previously active note's editor text is flushed first;
- on blur: the active note's text is flushed and written immediately.

The switch-time flush covers a user jumping straight from one editor to
another without a blur in between.
"""

from typing import Optional
from uuid import UUID

from finledger.models.audit import AuditEventType
from finledger.models.ledger import Note
from finledger.periods import utcnow
from finledger.store import Confirm, LedgerStore


class NoteEditCoordinator:
    """Owns the active-note slot and the per-note editor buffers."""

    def __init__(self, store: LedgerStore):
        self._store = store
        self._active_note_id: Optional[UUID] = None
        # What each editor currently shows, keyed by note id
        self._buffers: dict[UUID, str] = {}

    @property
    def active_note_id(self) -> Optional[UUID]:
        return self._active_note_id

    @property
    def notes(self) -> list[Note]:
        return self._store.document.notes

    def get(self, note_id: UUID) -> Optional[Note]:
        return next((n for n in self.notes if n.id == note_id), None)

    def editor_text(self, note_id: UUID) -> str:
        """Text shown in a note's editor (falls back to the stored text)."""
        if note_id in self._buffers:
            return self._buffers[note_id]
        note = self.get(note_id)
        return note.text if note else ""

    # -------------------------------------------------------------------------
    # Editing events
    # -------------------------------------------------------------------------

    def create_note(self) -> Note:
        note = Note()
        self.notes.append(note)
        self._buffers[note.id] = note.text
        self._store.persist_debounced()
        return note

    def focus(self, note_id: UUID) -> None:
        """An editor gained focus."""
        if self.get(note_id) is None:
            return
        if self._flush_previous(note_id):
            self._store.persist_debounced()
        self._active_note_id = note_id

    def input(self, note_id: UUID, text: str) -> None:
        """
        A keystroke changed an editor's text.

        Flushes a different previously active note, makes this note active,
        writes the text into the document and requests a debounced write.
        """
        note = self.get(note_id)
        if note is None:
            return

        self._flush_previous(note_id)
        self._active_note_id = note_id

        self._buffers[note_id] = text
        note.text = text
        note.updated_at = utcnow()

        self._store.persist_debounced()

    def blur(self, note_id: UUID) -> None:
        """An editor lost focus: flush and write now if it was the active one."""
        if self._active_note_id != note_id:
            return
        note = self.get(note_id)
        if note is not None:
            self._flush(note)
            self._store.persist()
        self._active_note_id = None

    def toggle_done(self, note_id: UUID, done: bool) -> Optional[Note]:
        note = self.get(note_id)
        if note is None:
            return None
        note.done = bool(done)
        note.updated_at = utcnow()
        self._store.persist_debounced()
        return note

    def delete_note(self, note_id: UUID, confirm: Confirm) -> bool:
        """
        Delete a note. A note with content needs confirmation first.

        Returns:
            True if the note was deleted
        """
        note = self.get(note_id)
        if note is None:
            return False
        if self.editor_text(note_id).strip() and not confirm(
            "This note has content. Delete it anyway?"
        ):
            self._store.audit.log_cancelled("delete note")
            return False

        self._store.document.notes = [n for n in self.notes if n.id != note_id]
        self._buffers.pop(note_id, None)
        if self._active_note_id == note_id:
            self._active_note_id = None

        self._store.persist()
        self._store.audit.log_simple(
            AuditEventType.NOTE_DELETED,
            description="Note deleted",
            entity_type="note",
            entity_id=note_id,
        )
        return True

    # -------------------------------------------------------------------------
    # Flushing
    # -------------------------------------------------------------------------

    def _flush_previous(self, next_note_id: UUID) -> bool:
        """Flush the active note if it is not `next_note_id`."""
        previous_id = self._active_note_id
        if previous_id is None or previous_id == next_note_id:
            return False
        previous = self.get(previous_id)
        if previous is None:
            self._active_note_id = None
            return False
        self._flush(previous)
        return True

    def _flush(self, note: Note) -> None:
        """Copy the editor buffer into the document and stamp the note."""
        if note.id in self._buffers:
            note.text = self._buffers[note.id]
        note.updated_at = utcnow()
        self._store.audit.log_simple(
            AuditEventType.NOTE_FLUSHED,
            description="Note text flushed to the document",
            entity_type="note",
            entity_id=note.id,
        )

    def discard_editors(self) -> None:
        """Forget editor state after the document was replaced (import, reset)."""
        self._buffers.clear()
        self._active_note_id = None

