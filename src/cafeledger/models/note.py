"""Free-text notes kept alongside the cash book."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Mapping

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from ..clock import ensure_utc, isoformat_z, parse_timestamp


class NoteRecord(SQLModel, table=True):
    """Row shape of the ``notes`` table."""

    __tablename__: ClassVar[str] = "notes"

    id: str = Field(primary_key=True, max_length=64)
    text: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(nullable=False, index=True)


@dataclass(frozen=True, slots=True)
class Note:
    id: str
    text: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Note:
        created = row["created_at"]
        return cls(
            id=str(row["id"]),
            text=str(row["text"]),
            created_at=ensure_utc(created) if isinstance(created, datetime) else parse_timestamp(str(created)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "createdAt": isoformat_z(self.created_at)}


__all__ = ["Note", "NoteRecord"]
