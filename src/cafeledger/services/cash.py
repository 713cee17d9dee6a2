"""Cash drawer reconciliation for the current day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Iterable

from ..models.transaction import CASH, ONLINE, Transaction
from .aggregation import transactions_on


@dataclass(frozen=True, slots=True)
class CashSummary:
    starting_cash: float
    cash_sales: float
    online_sales: float
    cash_paid_out: float

    @property
    def expected_cash(self) -> float:
        """Starting float plus cash taken minus cash paid out; online money never hits the drawer."""

        return self.starting_cash + self.cash_sales - self.cash_paid_out


def reconcile_cash(
    transactions: Iterable[Transaction],
    *,
    starting_cash: float,
    today: date,
    tz: tzinfo | None = None,
) -> CashSummary:
    cash_sales = online_sales = paid_out = 0.0
    for tx in transactions_on(transactions, today, tz):
        method = tx.effective_payment_method
        if tx.is_income and method == CASH:
            cash_sales += tx.amount
        elif tx.is_income and method == ONLINE:
            online_sales += tx.amount
        elif tx.is_expense and method == CASH:
            paid_out += tx.amount
    return CashSummary(
        starting_cash=starting_cash,
        cash_sales=cash_sales,
        online_sales=online_sales,
        cash_paid_out=paid_out,
    )


__all__ = ["CashSummary", "reconcile_cash"]
