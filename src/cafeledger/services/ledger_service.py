"""Role-checked writes and full reloads over the record repositories."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..clock import utc_now
from ..domain.repositories.note import NoteRepository
from ..domain.repositories.transaction import TransactionRepository
from ..errors import ValidationError
from ..logging_config import get_logger
from ..models.note import Note
from ..models.transaction import NewTransaction, Transaction
from . import auth
from .recurring import find_template, recurring_copy

logger = get_logger("ledger")


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Both record lists, newest first, as fetched in one reload."""

    transactions: list[Transaction]
    notes: list[Note]


class LedgerService:
    """Every mutation checks the role first, writes once and returns nothing.

    Callers observe the effect by calling :meth:`load` again.
    """

    def __init__(
        self,
        transactions: TransactionRepository,
        notes: NoteRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.transactions = transactions
        self.notes = notes
        self._clock = clock

    def load(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            transactions=self.transactions.list_transactions(),
            notes=self.notes.list_notes(),
        )

    def add_transaction(self, role: Optional[str], new: NewTransaction) -> None:
        auth.require(role, auth.CREATE_TRANSACTION)
        self.transactions.create_transaction(new)
        logger.info(
            "Transaction created",
            extra={"type": new.type, "category": new.category, "amount": new.amount, "role": role},
        )

    def delete_transaction(self, role: Optional[str], transaction_id: str) -> None:
        auth.require(role, auth.DELETE_TRANSACTION)
        self.transactions.delete_transaction(transaction_id)
        logger.info("Transaction deleted", extra={"transaction_id": transaction_id, "role": role})

    def clear_all(self, role: Optional[str]) -> None:
        auth.require(role, auth.CLEAR_ALL)
        self.transactions.clear_all_transactions()
        logger.warning("All transactions cleared", extra={"role": role})

    def add_recurring_now(self, role: Optional[str], template_id: str) -> NewTransaction:
        """Copy the recurring template ``template_id`` dated now."""

        auth.require(role, auth.ADD_RECURRING)
        template = find_template(self.transactions.list_transactions(), template_id)
        if template is None:
            raise ValidationError("That recurring entry no longer exists.", field="template")
        new = recurring_copy(template, now=self._clock())
        self.transactions.create_transaction(new)
        logger.info(
            "Recurring entry added",
            extra={"template_id": template_id, "category": new.category, "role": role},
        )
        return new

    def add_note(self, role: Optional[str], text: str) -> None:
        auth.require(role, auth.ADD_NOTE)
        text = (text or "").strip()
        if not text:
            raise ValidationError("Note cannot be empty.", field="text")
        self.notes.create_note(text)
        logger.info("Note created", extra={"role": role})

    def delete_note(self, role: Optional[str], note_id: str) -> None:
        auth.require(role, auth.DELETE_NOTE)
        self.notes.delete_note(note_id)
        logger.info("Note deleted", extra={"note_id": note_id, "role": role})


__all__ = ["LedgerService", "LedgerSnapshot"]
