"""Task notes mixin for TaskLedger.

Notes are append/edit/delete only and keep insertion order.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from PySide6.QtCore import Slot

from .types import Note, Task

if TYPE_CHECKING:
    from .ledger import TaskLedger


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class NotesMixin:
    """Mixin providing note operations on ledger tasks.

    Note: the ``notesChanged`` signal is defined on TaskLedger.
    """

    # Attributes expected from TaskLedger
    _find_task: Callable[[str], Optional[Task]]
    _mark_dirty: Callable[[], None]

    @Slot(str, str, result=str)
    def addNote(self, task_id: str, text: str) -> str:
        """Append a note to a task and return its id, or "" if ignored."""
        task = self._find_task(task_id)
        text = text.strip()
        if task is None or not text:
            return ""

        note = Note(id=uuid.uuid4().hex, text=text, timestamp_utc=utc_timestamp())
        task.notes.append(note)
        self._notes_touched(task)
        return note.id

    @Slot(str, str, str, result=bool)
    def updateNote(self, task_id: str, note_id: str, text: str) -> bool:
        """Replace the text of a note. Empty text leaves the note unchanged."""
        task = self._find_task(task_id)
        text = text.strip()
        if task is None or not text:
            return False

        for note in task.notes:
            if note.id == note_id:
                if note.text == text:
                    return False
                note.text = text
                self._notes_touched(task)
                return True
        return False

    @Slot(str, str, result=bool)
    def deleteNote(self, task_id: str, note_id: str) -> bool:
        task = self._find_task(task_id)
        if task is None:
            return False

        remaining = [note for note in task.notes if note.id != note_id]
        if len(remaining) == len(task.notes):
            return False
        task.notes = remaining
        self._notes_touched(task)
        return True

    @Slot(str, result=list)
    def getNotes(self, task_id: str) -> List[Dict[str, Any]]:
        """Return a task's notes as plain dicts for QML."""
        task = self._find_task(task_id)
        if task is None:
            return []
        return [note_to_dict(note) for note in task.notes]

    def _notes_touched(self: "TaskLedger", task: Task) -> None:
        self._emit_row_changed(task.id, [self.NoteCountRole])
        self.notesChanged.emit(task.id)
        self._mark_dirty()


def note_to_dict(note: Note) -> Dict[str, Any]:
    return {"id": note.id, "text": note.text, "timestamp": note.timestamp_utc}


def note_from_dict(data: Any) -> Optional[Note]:
    """Build a note from persisted data, or None if the entry is malformed."""
    if not isinstance(data, dict):
        return None
    text = data.get("text")
    note_id = data.get("id")
    if not isinstance(text, str) or not text.strip():
        return None
    if not isinstance(note_id, str) or not note_id:
        note_id = uuid.uuid4().hex
    timestamp = data.get("timestamp")
    if not isinstance(timestamp, str):
        timestamp = utc_timestamp()
    return Note(id=note_id, text=text, timestamp_utc=timestamp)
