"""Tests for totals, category rollups, the trailing week and target progress."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from cafeledger.services.aggregation import (
    DayProfit,
    best_and_worst_day,
    build_insights,
    category_rollup,
    compute_totals,
    target_progress,
    target_status,
    trailing_week,
    transactions_on,
)

UTC = timezone.utc
TODAY = date(2024, 3, 13)


def _at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=UTC)


def test_compute_totals_profit_is_income_minus_expense(transaction_factory):
    txs = [
        transaction_factory(amount=500, type="income"),
        transaction_factory(amount=120.5, type="expense", category="Grocery"),
        transaction_factory(amount=80, type="income"),
    ]

    totals = compute_totals(txs)

    assert totals.income == pytest.approx(580)
    assert totals.expense == pytest.approx(120.5)
    assert totals.profit == pytest.approx(459.5)


def test_compute_totals_empty():
    totals = compute_totals([])
    assert (totals.income, totals.expense, totals.profit) == (0.0, 0.0, 0.0)


def test_transactions_on_uses_local_calendar_day(transaction_factory):
    late_utc = transaction_factory(date=datetime(2024, 3, 12, 20, 0, tzinfo=UTC))
    kolkata = ZoneInfo("Asia/Kolkata")

    assert transactions_on([late_utc], date(2024, 3, 12), UTC) == [late_utc]
    # 20:00 UTC is already past midnight in UTC+05:30
    assert transactions_on([late_utc], date(2024, 3, 13), kolkata) == [late_utc]
    assert transactions_on([late_utc], date(2024, 3, 12), kolkata) == []


def test_category_rollup_orders_by_expense_and_folds_blank(transaction_factory):
    txs = [
        transaction_factory(amount=1000, type="income", category="Food Sale"),
        transaction_factory(amount=200, type="expense", category="Grocery"),
        transaction_factory(amount=900, type="expense", category="Rent"),
        transaction_factory(amount=50, type="expense", category="   "),
        transaction_factory(amount=100, type="expense", category="Grocery"),
    ]

    rollup = category_rollup(txs)

    assert [stat.category for stat in rollup] == ["Rent", "Grocery", "Other", "Food Sale"]
    grocery = rollup[1]
    assert grocery.expense == pytest.approx(300)
    assert grocery.count == 2


def test_category_rollup_ties_keep_first_seen_order(transaction_factory):
    txs = [
        transaction_factory(amount=10, type="income", category="B"),
        transaction_factory(amount=10, type="income", category="A"),
        transaction_factory(amount=10, type="income", category="C"),
    ]

    assert [stat.category for stat in category_rollup(txs)] == ["B", "A", "C"]


def test_category_rollup_sums_match_totals(transaction_factory):
    txs = [
        transaction_factory(amount=amount, type=kind, category=category)
        for amount, kind, category in [
            (100, "income", "Food Sale"),
            (40, "expense", "Chicken"),
            (60, "expense", ""),
            (25, "income", "Catering"),
            (15, "expense", "Chicken"),
        ]
    ]

    rollup = category_rollup(txs)
    totals = compute_totals(txs)

    assert sum(s.income for s in rollup) == pytest.approx(totals.income)
    assert sum(s.expense for s in rollup) == pytest.approx(totals.expense)
    assert sum(s.count for s in rollup) == len(txs)


@pytest.mark.parametrize("count", [0, 1, 30])
def test_trailing_week_always_has_seven_buckets(transaction_factory, count):
    txs = [
        transaction_factory(amount=10, date=_at(TODAY - timedelta(days=i % 10))) for i in range(count)
    ]

    week = trailing_week(txs, TODAY, UTC)

    assert len(week) == 7
    assert week[0].day == TODAY - timedelta(days=6)
    assert week[-1].day == TODAY
    assert week[-1].label == "13 Mar"


def test_trailing_week_buckets_profit_per_day(transaction_factory):
    txs = [
        transaction_factory(amount=300, type="income", date=_at(TODAY)),
        transaction_factory(amount=100, type="expense", date=_at(TODAY, 9)),
        transaction_factory(amount=50, type="income", date=_at(TODAY - timedelta(days=2))),
        transaction_factory(amount=999, type="income", date=_at(TODAY - timedelta(days=7))),
    ]

    week = trailing_week(txs, TODAY, UTC)

    assert week[-1].profit == pytest.approx(200)
    assert week[-3].profit == pytest.approx(50)
    assert sum(bucket.income for bucket in week) == pytest.approx(350)


def test_best_and_worst_day(transaction_factory):
    txs = [
        transaction_factory(amount=500, type="income", date=_at(TODAY - timedelta(days=3))),
        transaction_factory(amount=200, type="expense", date=_at(TODAY - timedelta(days=1))),
    ]
    week = trailing_week(txs, TODAY, UTC)

    best, worst = best_and_worst_day(week)

    assert best == (TODAY - timedelta(days=3)).strftime("%d %b")
    assert worst == (TODAY - timedelta(days=1)).strftime("%d %b")


def test_best_and_worst_day_all_equal_resolve_to_first_bucket():
    week = trailing_week([], TODAY, UTC)

    best, worst = best_and_worst_day(week)

    assert best == worst == week[0].label


def test_best_and_worst_day_empty():
    assert best_and_worst_day([]) == (None, None)


def test_best_day_first_occurrence_wins():
    buckets = [
        DayProfit(day=TODAY - timedelta(days=1), label="a", income=10),
        DayProfit(day=TODAY, label="b", income=10),
    ]
    assert best_and_worst_day(buckets) == ("a", "a")


@pytest.mark.parametrize(
    ("profit", "target", "expected"),
    [
        (500, 1000, 50.0),
        (1500, 1000, 100.0),
        (-200, 1000, -20.0),
        (500, 0, None),
    ],
)
def test_target_progress(profit, target, expected):
    assert target_progress(profit, target) == expected


@pytest.mark.parametrize(
    ("progress", "status"),
    [
        (None, "Not set"),
        (100.0, "Ahead of target"),
        (60.0, "On track"),
        (59.9, "Behind target"),
        (-5.0, "Behind target"),
    ],
)
def test_target_status(progress, status):
    assert target_status(progress) == status


def test_build_insights_bundle(transaction_factory):
    txs = [
        transaction_factory(amount=700, type="income", date=_at(TODAY)),
        transaction_factory(amount=100, type="expense", category="Grocery", date=_at(TODAY)),
    ]

    insights = build_insights(txs, today=TODAY, target=1000, tz=UTC)

    assert insights.today_profit == pytest.approx(600)
    assert insights.progress == pytest.approx(60)
    assert insights.status == "On track"
    assert insights.best_day == "13 Mar"
    assert len(insights.week) == 7
    assert insights.totals.profit == pytest.approx(600)
