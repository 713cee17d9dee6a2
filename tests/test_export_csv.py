"""Tests for CSV/JSON export helpers."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path

from cafeledger.services import export_csv

UTC = timezone.utc


def test_csv_row_matches_export_format(transaction_factory):
    tx = transaction_factory(
        amount=100,
        type="income",
        category="Sales",
        date=datetime(2024, 1, 1, 10, 0, tzinfo=UTC),
        payment_method="cash",
        note="a,b",
    )

    body = export_csv.transactions_csv([tx])

    assert body == (
        '"date","type","category","amount","paymentMethod","note"\n'
        '"2024-01-01T10:00:00.000Z","income","Sales","100","cash","a,b"\n'
    )


def test_csv_doubles_inner_quotes_and_blanks_missing_optionals(transaction_factory):
    tx = transaction_factory(
        amount=12.5,
        type="expense",
        category='Vendor "Ravi"',
        date=datetime(2024, 1, 2, 8, 30, 15, 250000, tzinfo=UTC),
    )

    lines = export_csv.transactions_csv([tx]).split("\n")

    assert lines[1] == '"2024-01-02T08:30:15.250Z","expense","Vendor ""Ravi""","12.5","",""'
    assert lines[-1] == ""


def test_csv_keeps_list_order_and_parses_back(transaction_factory):
    txs = [transaction_factory(category=f"C{i}", note=f"line\n{i}") for i in range(3)]

    rows = list(csv.DictReader(export_csv.transactions_csv(txs).splitlines(keepends=True)))

    assert [row["category"] for row in rows] == ["C0", "C1", "C2"]
    assert rows[2]["note"] == "line\n2"


def test_empty_csv_is_header_only():
    assert export_csv.transactions_csv([]) == '"date","type","category","amount","paymentMethod","note"\n'


def test_json_uses_camel_case_and_omits_absent_optionals(transaction_factory):
    full = transaction_factory(
        id="a1",
        amount=50,
        date=datetime(2024, 1, 1, 10, tzinfo=UTC),
        created_at=datetime(2024, 1, 1, 10, 0, 1, tzinfo=UTC),
        note="tip",
        payment_method="online",
        is_recurring=True,
        receipt_data_url="data:image/png;base64,AA",
    )
    bare = transaction_factory(id="b2", date=datetime(2024, 1, 1, 11, tzinfo=UTC))

    text = export_csv.transactions_json([full, bare])
    data = json.loads(text)

    assert data[0] == {
        "id": "a1",
        "amount": 50.0,
        "type": "income",
        "category": "Food Sale",
        "date": "2024-01-01T10:00:00.000Z",
        "note": "tip",
        "createdAt": "2024-01-01T10:00:01.000Z",
        "paymentMethod": "online",
        "isRecurring": True,
        "receiptDataUrl": "data:image/png;base64,AA",
    }
    assert set(data[1]) == {"id", "amount", "type", "category", "date", "createdAt"}
    assert text.startswith('[\n  {\n    "id"')


def test_write_exports_create_files(tmp_path: Path, transaction_factory):
    txs = [transaction_factory(), transaction_factory(type="expense", category="Rent")]

    csv_path = export_csv.write_transactions_csv(transactions=txs, output_path=tmp_path / "out" / "cafe-ledger.csv")
    json_path = export_csv.write_transactions_json(transactions=txs, output_path=tmp_path / "out" / "cafe-ledger.json")

    assert csv_path.exists() and json_path.exists()
    raw = csv_path.read_bytes()
    assert b"\r\n" not in raw
    assert raw.count(b"\n") == 3
    assert len(json.loads(json_path.read_text(encoding="utf-8"))) == 2
