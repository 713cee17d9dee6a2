"""Concrete repository implementations."""

from .note import SQLModelNoteRepository
from .settings import CookieSettingsStore, SQLModelSettingsRepository
from .supabase import (
    SupabaseAuthBackend,
    SupabaseClient,
    SupabaseNoteRepository,
    SupabaseTransactionRepository,
)
from .transaction import SQLModelTransactionRepository

__all__ = [
    "CookieSettingsStore",
    "SQLModelNoteRepository",
    "SQLModelSettingsRepository",
    "SQLModelTransactionRepository",
    "SupabaseAuthBackend",
    "SupabaseClient",
    "SupabaseNoteRepository",
    "SupabaseTransactionRepository",
]
