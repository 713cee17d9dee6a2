"""Summaries derived from the full transaction list.

All functions are pure and are re-run on every page render; nothing here is
cached or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from typing import Iterable, Optional, Sequence

from ..clock import local_day
from ..models.transaction import Transaction

OTHER_CATEGORY = "Other"
WEEK_DAYS = 7


@dataclass(frozen=True, slots=True)
class Totals:
    income: float = 0.0
    expense: float = 0.0

    @property
    def profit(self) -> float:
        return self.income - self.expense


@dataclass(slots=True)
class CategoryStat:
    """Per-category rollup row."""

    category: str
    income: float = 0.0
    expense: float = 0.0
    count: int = 0


@dataclass(frozen=True, slots=True)
class DayProfit:
    day: date
    label: str
    income: float = 0.0
    expense: float = 0.0

    @property
    def profit(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True, slots=True)
class Insights:
    """Everything the insights tab shows."""

    totals: Totals
    categories: list[CategoryStat]
    week: list[DayProfit]
    best_day: Optional[str]
    worst_day: Optional[str]
    today_profit: float
    target: float
    progress: Optional[float]
    status: str


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum income and expense amounts."""

    income = 0.0
    expense = 0.0
    for tx in transactions:
        if tx.is_income:
            income += tx.amount
        elif tx.is_expense:
            expense += tx.amount
    return Totals(income=income, expense=expense)


def transactions_on(
    transactions: Iterable[Transaction], day: date, tz: tzinfo | None = None
) -> list[Transaction]:
    """Transactions whose occurrence date falls on ``day`` in the local zone."""

    return [tx for tx in transactions if local_day(tx.date, tz) == day]


def category_rollup(transactions: Iterable[Transaction]) -> list[CategoryStat]:
    """Group by category (blank folds to ``Other``), ordered by expense descending.

    ``sorted`` is stable, so categories with equal expense keep first-seen order.
    """

    stats: dict[str, CategoryStat] = {}
    for tx in transactions:
        key = tx.category.strip() if tx.category and tx.category.strip() else OTHER_CATEGORY
        entry = stats.get(key)
        if entry is None:
            entry = stats[key] = CategoryStat(category=key)
        if tx.is_income:
            entry.income += tx.amount
        else:
            entry.expense += tx.amount
        entry.count += 1
    return sorted(stats.values(), key=lambda s: s.expense, reverse=True)


def trailing_week(
    transactions: Iterable[Transaction], today: date, tz: tzinfo | None = None
) -> list[DayProfit]:
    """Seven calendar-day buckets, six days ago through ``today``."""

    days = [today - timedelta(days=offset) for offset in range(WEEK_DAYS - 1, -1, -1)]
    sums: dict[date, list[float]] = {day: [0.0, 0.0] for day in days}
    for tx in transactions:
        bucket = sums.get(local_day(tx.date, tz))
        if bucket is None:
            continue
        if tx.is_income:
            bucket[0] += tx.amount
        else:
            bucket[1] += tx.amount
    return [
        DayProfit(day=day, label=day.strftime("%d %b"), income=sums[day][0], expense=sums[day][1])
        for day in days
    ]


def best_and_worst_day(buckets: Sequence[DayProfit]) -> tuple[Optional[str], Optional[str]]:
    """Labels of the highest and lowest profit buckets; the first one wins ties."""

    if not buckets:
        return None, None
    best = buckets[0]
    worst = buckets[0]
    for bucket in buckets[1:]:
        if bucket.profit > best.profit:
            best = bucket
        if bucket.profit < worst.profit:
            worst = bucket
    return best.label, worst.label


def target_progress(today_profit: float, target: float) -> Optional[float]:
    """Percent of the daily target reached, capped at 100; ``None`` when no target."""

    if target <= 0:
        return None
    return min(100.0, today_profit / target * 100.0)


def target_status(progress: Optional[float]) -> str:
    if progress is None:
        return "Not set"
    if progress >= 100:
        return "Ahead of target"
    if progress >= 60:
        return "On track"
    return "Behind target"


def build_insights(
    transactions: Sequence[Transaction],
    *,
    today: date,
    target: float = 0.0,
    tz: tzinfo | None = None,
) -> Insights:
    week = trailing_week(transactions, today, tz)
    best, worst = best_and_worst_day(week)
    today_profit = week[-1].profit
    progress = target_progress(today_profit, target)
    return Insights(
        totals=compute_totals(transactions),
        categories=category_rollup(transactions),
        week=week,
        best_day=best,
        worst_day=worst,
        today_profit=today_profit,
        target=target,
        progress=progress,
        status=target_status(progress),
    )


__all__ = [
    "CategoryStat",
    "DayProfit",
    "Insights",
    "OTHER_CATEGORY",
    "Totals",
    "best_and_worst_day",
    "build_insights",
    "category_rollup",
    "compute_totals",
    "target_progress",
    "target_status",
    "trailing_week",
    "transactions_on",
]
