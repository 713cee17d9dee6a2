"""Exception types surfaced to the web layer."""

from __future__ import annotations


class CafeLedgerError(Exception):
    """Base class for errors the UI reports back to the user."""


class ValidationError(CafeLedgerError):
    """Input was rejected before any write was attempted."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ReceiptError(ValidationError):
    """The attached receipt could not be read; the entry is still saved without it."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="receipt")


class StorageError(CafeLedgerError):
    """The record store rejected a read or write, or could not be reached."""


class AuthError(CafeLedgerError):
    """Credentials were rejected or there is no active backend session."""


class PermissionDenied(CafeLedgerError):
    """The active role may not perform the requested action."""

    def __init__(self, role: str | None, action: str) -> None:
        super().__init__(f"Role {role or 'anonymous'!r} is not allowed to {action.replace('_', ' ')}.")
        self.role = role
        self.action = action


__all__ = [
    "AuthError",
    "CafeLedgerError",
    "PermissionDenied",
    "ReceiptError",
    "StorageError",
    "ValidationError",
]
