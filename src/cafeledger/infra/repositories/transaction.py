"""SQLModel implementation of the transaction repository."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from ...clock import utc_now
from ...errors import StorageError
from ...logging_config import get_logger
from ...models.transaction import NewTransaction, Transaction, TransactionRecord
from ..database import SessionFactory

logger = get_logger("infra.transactions")


def new_record_id() -> str:
    return uuid.uuid4().hex


class SQLModelTransactionRepository:
    """Transactions kept in an embedded (or any SQLAlchemy-reachable) SQL database."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        id_factory: Callable[[], str] = new_record_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize with a session factory."""
        self.session_factory = session_factory
        self._id_factory = id_factory
        self._clock = clock

    def list_transactions(self) -> list[Transaction]:
        try:
            with self.session_factory() as session:
                statement = select(TransactionRecord).order_by(
                    TransactionRecord.created_at.desc()  # type: ignore[attr-defined]
                )
                rows = session.exec(statement).all()
                return [Transaction.from_row(row.model_dump()) for row in rows]
        except SQLAlchemyError as exc:
            logger.exception("Listing transactions failed")
            raise StorageError("Could not load transactions.") from exc

    def create_transaction(self, new: NewTransaction) -> None:
        row = TransactionRecord(
            **new.to_row(transaction_id=self._id_factory(), created_at=self._clock())
        )
        try:
            with self.session_factory() as session:
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Saving transaction failed", extra={"category": new.category})
            raise StorageError("Could not save the transaction.") from exc

    def delete_transaction(self, transaction_id: str) -> None:
        try:
            with self.session_factory() as session:
                row = session.get(TransactionRecord, transaction_id)
                if row is not None:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Deleting transaction failed", extra={"transaction_id": transaction_id})
            raise StorageError("Could not delete the transaction.") from exc

    def clear_all_transactions(self) -> None:
        try:
            with self.session_factory() as session:
                for row in session.exec(select(TransactionRecord)).all():
                    session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Clearing transactions failed")
            raise StorageError("Could not clear transactions.") from exc


__all__ = ["SQLModelTransactionRepository", "new_record_id"]
