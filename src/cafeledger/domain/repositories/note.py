"""Note repository protocol."""

from __future__ import annotations

from typing import Protocol

from ...models.note import Note


class NoteRepository(Protocol):
    """Read/write contract for notes, same reload-after-write rules as transactions."""

    def list_notes(self) -> list[Note]:
        """Return every note, newest first."""
        ...

    def create_note(self, text: str) -> None:
        """Persist a new note."""
        ...

    def delete_note(self, note_id: str) -> None:
        """Remove a note; unknown ids are ignored."""
        ...
