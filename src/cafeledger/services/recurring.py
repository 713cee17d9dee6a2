"""Monthly reminders for transactions flagged as recurring."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterable, Sequence

from ..clock import to_local
from ..models.transaction import NewTransaction, Transaction

AMOUNT_TOLERANCE = 0.01


def _same_month(value: datetime, now: datetime, tz: tzinfo | None) -> bool:
    local = to_local(value, tz)
    current = to_local(now, tz)
    return (local.year, local.month) == (current.year, current.month)


def _matches(tx: Transaction, template: Transaction) -> bool:
    return (
        tx.category == template.category
        and tx.type == template.type
        and abs(tx.amount - template.amount) < AMOUNT_TOLERANCE
    )


def recurring_reminders(
    transactions: Sequence[Transaction], *, now: datetime, tz: tzinfo | None = None
) -> list[Transaction]:
    """Recurring templates with no matching entry in the current calendar month."""

    templates = [tx for tx in transactions if tx.is_recurring]
    if not templates:
        return []
    this_month = [tx for tx in transactions if _same_month(tx.date, now, tz)]
    return [tpl for tpl in templates if not any(_matches(tx, tpl) for tx in this_month)]


def recurring_copy(template: Transaction, *, now: datetime) -> NewTransaction:
    """A new entry dated ``now`` carrying every other field of ``template``."""

    return NewTransaction(
        amount=template.amount,
        type=template.type,
        category=template.category,
        date=now,
        note=template.note,
        payment_method=template.payment_method,
        is_recurring=template.is_recurring,
        receipt_data_url=template.receipt_data_url,
    )


def find_template(transactions: Iterable[Transaction], template_id: str) -> Transaction | None:
    for tx in transactions:
        if tx.id == template_id and tx.is_recurring:
            return tx
    return None


__all__ = ["AMOUNT_TOLERANCE", "find_template", "recurring_copy", "recurring_reminders"]
