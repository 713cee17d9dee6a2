"""CSV and JSON export helpers for CafeLedger."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Iterable

from ..clock import isoformat_z
from ..models.transaction import Transaction

CSV_HEADERS = ["date", "type", "category", "amount", "paymentMethod", "note"]


def _format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _csv_row(tx: Transaction) -> list[str]:
    return [
        isoformat_z(tx.date),
        tx.type,
        tx.category,
        _format_amount(tx.amount),
        tx.payment_method or "",
        tx.note or "",
    ]


def transactions_csv(transactions: Iterable[Transaction]) -> str:
    """Render transactions as CSV text.

    Every field is double-quoted (inner quotes doubled), rows keep the given
    order and each line, including the last, ends with ``\\n``.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for tx in transactions:
        writer.writerow(_csv_row(tx))
    return buffer.getvalue()


def transactions_json(transactions: Iterable[Transaction]) -> str:
    """Camel-case JSON list with two-space indentation."""

    return json.dumps([tx.to_dict() for tx in transactions], indent=2, ensure_ascii=False)


def write_transactions_csv(*, transactions: Iterable[Transaction], output_path: Path) -> Path:
    """Write transactions to CSV at `output_path` and return the path written."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    # newline='' keeps the "\n" terminator on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        fh.write(transactions_csv(transactions))
    return output_path


def write_transactions_json(*, transactions: Iterable[Transaction], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(transactions_json(transactions), encoding="utf-8")
    return output_path


__all__ = [
    "CSV_HEADERS",
    "transactions_csv",
    "transactions_json",
    "write_transactions_csv",
    "write_transactions_json",
]
