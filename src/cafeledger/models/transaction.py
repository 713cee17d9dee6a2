"""Cash-flow transactions: the persisted row and the in-memory entry."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Mapping, Optional

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from ..clock import ensure_utc, isoformat_z, parse_timestamp
from ..errors import ValidationError

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

CASH = "cash"
ONLINE = "online"
PAYMENT_METHODS = (CASH, ONLINE)

RECEIPT_IMAGE_PREFIX = "data:image/"


class TransactionRecord(SQLModel, table=True):
    """Row shape of the ``transactions`` table (snake_case, nullable optionals)."""

    __tablename__: ClassVar[str] = "transactions"

    id: str = Field(primary_key=True, max_length=64)
    amount: float = Field(nullable=False)
    type: str = Field(nullable=False, max_length=16, index=True)
    category: str = Field(nullable=False, max_length=128, index=True)
    date: datetime = Field(nullable=False, index=True)
    note: Optional[str] = Field(default=None, max_length=500)
    payment_method: Optional[str] = Field(default=None, max_length=16)
    is_recurring: Optional[bool] = Field(default=None)
    receipt_data_url: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(nullable=False, index=True)


def _coerce_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    return parse_timestamp(str(value))


@dataclass(frozen=True, slots=True)
class NewTransaction:
    """Creation input for a transaction; everything except id and created_at."""

    amount: float
    type: str
    category: str
    date: datetime
    note: Optional[str] = None
    payment_method: Optional[str] = None
    is_recurring: Optional[bool] = None
    receipt_data_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.amount, (int, float)) or not math.isfinite(self.amount) or self.amount <= 0:
            raise ValidationError("Amount must be a positive number.", field="amount")
        if self.type not in TRANSACTION_TYPES:
            raise ValidationError(f"Unknown transaction type: {self.type!r}", field="type")
        if not self.category or not self.category.strip():
            raise ValidationError("Category is required.", field="category")
        if self.payment_method is not None and self.payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                f"Unknown payment method: {self.payment_method!r}", field="payment_method"
            )

    def to_row(self, *, transaction_id: str, created_at: datetime) -> dict[str, Any]:
        """Row mapping ready for insertion into either backend."""

        return {
            "id": transaction_id,
            "amount": float(self.amount),
            "type": self.type,
            "category": self.category,
            "date": ensure_utc(self.date),
            "note": self.note,
            "payment_method": self.payment_method,
            "is_recurring": self.is_recurring,
            "receipt_data_url": self.receipt_data_url,
            "created_at": ensure_utc(created_at),
        }


@dataclass(frozen=True, slots=True)
class Transaction:
    """A stored income or expense entry. Immutable; removed only by deletion."""

    id: str
    amount: float
    type: str
    category: str
    date: datetime
    created_at: datetime
    note: Optional[str] = None
    payment_method: Optional[str] = None
    is_recurring: Optional[bool] = None
    receipt_data_url: Optional[str] = None

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE

    @property
    def effective_payment_method(self) -> str:
        """Payment method with the historical default applied (absent means cash)."""

        return self.payment_method or CASH

    @property
    def receipt_image(self) -> Optional[str]:
        """The receipt as an inline image source; anything but a ``data:image/`` URI is ignored."""

        url = self.receipt_data_url
        if url and url.startswith(RECEIPT_IMAGE_PREFIX):
            return url
        return None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Transaction:
        """Build from a stored row; NULL columns become ``None``."""

        is_recurring = row.get("is_recurring")
        return cls(
            id=str(row["id"]),
            amount=float(row["amount"]),
            type=str(row["type"]),
            category=str(row.get("category") or ""),
            date=_coerce_timestamp(row["date"]),
            created_at=_coerce_timestamp(row["created_at"]),
            note=row.get("note"),
            payment_method=row.get("payment_method"),
            is_recurring=None if is_recurring is None else bool(is_recurring),
            receipt_data_url=row.get("receipt_data_url"),
        )

    def to_dict(self) -> dict[str, Any]:
        """External camelCase shape used by the JSON export; absent optionals omitted."""

        data: dict[str, Any] = {
            "id": self.id,
            "amount": self.amount,
            "type": self.type,
            "category": self.category,
            "date": isoformat_z(self.date),
        }
        if self.note is not None:
            data["note"] = self.note
        data["createdAt"] = isoformat_z(self.created_at)
        if self.payment_method is not None:
            data["paymentMethod"] = self.payment_method
        if self.is_recurring is not None:
            data["isRecurring"] = self.is_recurring
        if self.receipt_data_url is not None:
            data["receiptDataUrl"] = self.receipt_data_url
        return data


__all__ = [
    "CASH",
    "EXPENSE",
    "INCOME",
    "NewTransaction",
    "ONLINE",
    "PAYMENT_METHODS",
    "RECEIPT_IMAGE_PREFIX",
    "TRANSACTION_TYPES",
    "Transaction",
    "TransactionRecord",
]
