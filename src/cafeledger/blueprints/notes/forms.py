"""Note form validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

NOTE_MAX_LENGTH = 2000


@dataclass(slots=True)
class NoteForm:
    text: str = ""
    errors: dict[str, list[str]] = field(default_factory=dict, init=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> NoteForm:
        return cls(text=str(data.get("text") or ""))

    def validate(self) -> bool:
        self.errors.clear()
        self.text = self.text.strip()
        if not self.text:
            self.errors.setdefault("text", []).append("Write something first.")
        elif len(self.text) > NOTE_MAX_LENGTH:
            self.errors.setdefault("text", []).append(
                f"Notes must be {NOTE_MAX_LENGTH} characters or fewer."
            )
        return not self.errors


__all__ = ["NoteForm"]
