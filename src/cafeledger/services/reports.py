"""Reporting utilities for CafeLedger: the daily-close report and the weekly profit chart."""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Iterable, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from ..clock import to_local
from ..models.transaction import Transaction
from .aggregation import DayProfit, Totals, compute_totals, transactions_on


@dataclass(frozen=True, slots=True)
class DailyCloseRow:
    time: str
    type: str
    category: str
    amount: float


@dataclass(frozen=True, slots=True)
class DailyCloseReport:
    """Printable end-of-day summary; only today's transactions appear."""

    day: date
    totals: Totals
    rows: list[DailyCloseRow]


def build_daily_close(
    transactions: Iterable[Transaction], *, today: date, tz: tzinfo | None = None
) -> DailyCloseReport:
    todays = transactions_on(transactions, today, tz)
    rows = [
        DailyCloseRow(
            time=to_local(tx.date, tz).strftime("%H:%M"),
            type=tx.type,
            category=tx.category,
            amount=tx.amount,
        )
        for tx in todays
    ]
    return DailyCloseReport(day=today, totals=compute_totals(todays), rows=rows)


def build_weekly_chart(buckets: Sequence[DayProfit], *, currency: str = "") -> Figure:
    """Bar chart of daily profit; losses drawn in red."""

    labels = [bucket.label for bucket in buckets]
    profits = [bucket.profit for bucket in buckets]
    colors = ["#2e7d32" if value >= 0 else "#c62828" for value in profits]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(labels, profits, color=colors, edgecolor="white")
    ax.axhline(0, color="#999", linewidth=0.8)
    ax.set_title("Profit, last 7 days", fontsize=13, fontweight="bold")
    ax.set_ylabel(f"Profit ({currency})" if currency else "Profit")
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    return fig


def weekly_profit_png(buckets: Sequence[DayProfit], *, currency: str = "") -> bytes:
    """Render the weekly chart and return PNG bytes."""

    fig = build_weekly_chart(buckets, currency=currency)
    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", bbox_inches="tight", dpi=100)
    plt.close(fig)
    return buffer.getvalue()


__all__ = [
    "DailyCloseReport",
    "DailyCloseRow",
    "build_daily_close",
    "build_weekly_chart",
    "weekly_profit_png",
]
