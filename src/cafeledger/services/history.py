"""History tab filtering, recent entries and category suggestions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Iterable, Mapping, Optional, Sequence

from ..clock import local_day
from ..models.transaction import TRANSACTION_TYPES, Transaction

ALL_TYPES = "all"
RECENT_LIMIT = 5
SUGGESTION_LIMIT = 6


def _parse_day(raw: str | None) -> Optional[date]:
    if not raw or not raw.strip():
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class HistoryFilters:
    """Filters applied to the history list. Unset fields match everything."""

    type: str = ALL_TYPES
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: str = ""

    @classmethod
    def from_mapping(cls, args: Mapping[str, str]) -> HistoryFilters:
        """Build from query-string arguments, ignoring malformed values."""

        kind = (args.get("type") or ALL_TYPES).strip().lower()
        if kind not in TRANSACTION_TYPES:
            kind = ALL_TYPES
        return cls(
            type=kind,
            date_from=_parse_day(args.get("from")),
            date_to=_parse_day(args.get("to")),
            search=(args.get("q") or "").strip(),
        )

    @property
    def active(self) -> bool:
        return self != HistoryFilters()

    def matches(self, tx: Transaction, tz: tzinfo | None = None) -> bool:
        if self.type != ALL_TYPES and tx.type != self.type:
            return False
        day = local_day(tx.date, tz)
        if self.date_from is not None and day < self.date_from:
            return False
        if self.date_to is not None and day > self.date_to:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in tx.category.lower() and needle not in (tx.note or "").lower():
                return False
        return True


def filter_history(
    transactions: Iterable[Transaction], filters: HistoryFilters, tz: tzinfo | None = None
) -> list[Transaction]:
    """Apply ``filters`` preserving the incoming order."""

    return [tx for tx in transactions if filters.matches(tx, tz)]


def recent_transactions(transactions: Sequence[Transaction], limit: int = RECENT_LIMIT) -> list[Transaction]:
    return list(transactions[:limit])


def category_suggestions(
    transactions: Iterable[Transaction], query: str = "", limit: int = SUGGESTION_LIMIT
) -> list[str]:
    """Distinct previously used categories, sorted, optionally narrowed by substring."""

    names = sorted({tx.category.strip() for tx in transactions if tx.category and tx.category.strip()})
    needle = query.strip().lower()
    if needle:
        names = [name for name in names if needle in name.lower()]
    return names[:limit]


__all__ = [
    "ALL_TYPES",
    "HistoryFilters",
    "category_suggestions",
    "filter_history",
    "recent_transactions",
]
