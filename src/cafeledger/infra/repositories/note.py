"""SQLModel implementation of the note repository."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from ...clock import utc_now
from ...errors import StorageError
from ...logging_config import get_logger
from ...models.note import Note, NoteRecord
from ..database import SessionFactory
from .transaction import new_record_id

logger = get_logger("infra.notes")


class SQLModelNoteRepository:
    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        id_factory: Callable[[], str] = new_record_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session_factory = session_factory
        self._id_factory = id_factory
        self._clock = clock

    def list_notes(self) -> list[Note]:
        try:
            with self.session_factory() as session:
                statement = select(NoteRecord).order_by(NoteRecord.created_at.desc())  # type: ignore[attr-defined]
                return [Note.from_row(row.model_dump()) for row in session.exec(statement).all()]
        except SQLAlchemyError as exc:
            logger.exception("Listing notes failed")
            raise StorageError("Could not load notes.") from exc

    def create_note(self, text: str) -> None:
        row = NoteRecord(id=self._id_factory(), text=text, created_at=self._clock())
        try:
            with self.session_factory() as session:
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Saving note failed")
            raise StorageError("Could not save note.") from exc

    def delete_note(self, note_id: str) -> None:
        try:
            with self.session_factory() as session:
                row = session.get(NoteRecord, note_id)
                if row is not None:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Deleting note failed", extra={"note_id": note_id})
            raise StorageError("Could not delete note.") from exc


__all__ = ["SQLModelNoteRepository"]
