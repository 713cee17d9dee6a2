"""Repository protocol definitions for domain layer."""

from .note import NoteRepository
from .settings import SettingsStore
from .transaction import TransactionRepository

__all__ = [
    "NoteRepository",
    "SettingsStore",
    "TransactionRepository",
]
