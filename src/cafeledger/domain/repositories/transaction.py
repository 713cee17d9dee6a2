"""Transaction repository protocol."""

from __future__ import annotations

from typing import Protocol

from ...models.transaction import NewTransaction, Transaction


class TransactionRepository(Protocol):
    """Read/write contract for transactions.

    Mutations return nothing; callers re-fetch with ``list_transactions`` to
    observe their effect. Every call may raise ``StorageError``.
    """

    def list_transactions(self) -> list[Transaction]:
        """Return every transaction, newest ``created_at`` first."""
        ...

    def create_transaction(self, new: NewTransaction) -> None:
        """Persist a new transaction."""
        ...

    def delete_transaction(self, transaction_id: str) -> None:
        """Remove a transaction; unknown ids are ignored."""
        ...

    def clear_all_transactions(self) -> None:
        """Remove every transaction."""
        ...
