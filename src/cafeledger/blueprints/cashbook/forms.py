"""Cashbook entry form validation helpers."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ...clock import utc_now
from ...models.transaction import EXPENSE, INCOME, ONLINE, PAYMENT_METHODS, NewTransaction

QUICK_PICKS: dict[str, tuple[str, ...]] = {
    INCOME: ("Food Sale",),
    EXPENSE: ("Grocery", "Chicken", "Electricity Bill", "Salary", "Rent", "Vendor Payment"),
}

DEFAULT_CATEGORY = {INCOME: "Food Sale", EXPENSE: "Other"}

NOTE_MAX_LENGTH = 500

_CHECKED = {"1", "on", "true", "yes"}


@dataclass(slots=True)
class TransactionEntryForm:
    """Represents a new cashbook entry prior to validation."""

    amount: float | None = None
    type: str = INCOME
    category: str = ""
    payment_method: str = ONLINE
    note: Optional[str] = None
    is_recurring: Optional[bool] = None
    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    raw_data: dict[str, str] = field(default_factory=dict, init=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TransactionEntryForm:
        """Create a form populated from request data."""

        form = cls()
        form.load(data)
        return form

    def load(self, data: Mapping[str, Any]) -> None:
        """Bind incoming mapping data to the form state."""

        keys = ("amount", "type", "category", "payment_method", "note", "is_recurring")
        self.raw_data = {}
        for key in keys:
            value = data.get(key)
            if value is None:
                value_str = ""
            elif isinstance(value, str):
                value_str = value
            else:
                value_str = str(value)
            self.raw_data[key] = value_str

    def validate(self) -> bool:
        """Validate the bound data and populate typed attributes."""

        self.errors.clear()

        amount_raw = self.raw_data.get("amount", "").strip()
        self.amount = None
        try:
            parsed_amount = float(amount_raw)
        except ValueError:
            self._add_error("amount", "Enter a valid amount")
        else:
            if not math.isfinite(parsed_amount) or parsed_amount <= 0:
                self._add_error("amount", "Enter a valid amount")
            else:
                self.amount = parsed_amount

        kind = self.raw_data.get("type", "").strip().lower() or INCOME
        if kind not in DEFAULT_CATEGORY:
            self._add_error("type", "Choose income or expense.")
        else:
            self.type = kind

        method = self.raw_data.get("payment_method", "").strip().lower() or ONLINE
        if method not in PAYMENT_METHODS:
            self._add_error("payment_method", "Choose cash or online.")
        else:
            self.payment_method = method

        self.category = self.raw_data.get("category", "").strip() or DEFAULT_CATEGORY.get(
            self.type, DEFAULT_CATEGORY[INCOME]
        )

        note = self.raw_data.get("note", "").strip()
        if len(note) > NOTE_MAX_LENGTH:
            self._add_error("note", f"Note must be {NOTE_MAX_LENGTH} characters or fewer.")
        self.note = note or None

        self.is_recurring = True if self.raw_data.get("is_recurring", "").strip().lower() in _CHECKED else None

        return not self.errors

    def to_new_transaction(
        self,
        *,
        receipt_data_url: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> NewTransaction:
        """Build the creation input; the occurrence date is the submission time."""

        if self.amount is None:
            raise RuntimeError("Form must validate before building a transaction")
        return NewTransaction(
            amount=self.amount,
            type=self.type,
            category=self.category,
            date=clock(),
            note=self.note,
            payment_method=self.payment_method,
            is_recurring=self.is_recurring,
            receipt_data_url=receipt_data_url,
        )

    def _add_error(self, field: str, message: str) -> None:
        """Accumulate validation errors for a specific field."""

        self.errors.setdefault(field, []).append(message)


def parse_money(raw: str | None) -> Optional[float]:
    """Parse a non-negative amount for settings fields; ``None`` when invalid."""

    try:
        value = float((raw or "").strip())
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


__all__ = ["DEFAULT_CATEGORY", "QUICK_PICKS", "TransactionEntryForm", "parse_money"]
