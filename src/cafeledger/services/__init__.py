"""Service module exports."""

from . import (
    aggregation,
    auth,
    cash,
    export_csv,
    history,
    ledger_service,
    receipts,
    recurring,
    reports,
)

__all__ = [
    "aggregation",
    "auth",
    "cash",
    "export_csv",
    "history",
    "ledger_service",
    "receipts",
    "recurring",
    "reports",
]
