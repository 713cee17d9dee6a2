"""Flask CLI commands for CafeLedger."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("cafeledger-export")
    @click.option(
        "--out",
        "out_dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Directory for cafe-ledger.csv and cafe-ledger.json (defaults to DATA_DIR/exports).",
    )
    def cafeledger_export(out_dir: Path | None) -> None:
        """Write the CSV and JSON exports of every transaction."""

        from .services.export_csv import write_transactions_csv, write_transactions_json

        context = app.extensions["cafeledger"]
        target = out_dir or Path(context.config.DATA_DIR) / "exports"
        transactions, _ = context.repositories()
        rows = transactions.list_transactions()
        csv_path = write_transactions_csv(
            transactions=rows, output_path=target / context.config.CSV_EXPORT_NAME
        )
        json_path = write_transactions_json(
            transactions=rows, output_path=target / context.config.JSON_EXPORT_NAME
        )
        click.echo(f"Exported {len(rows)} transactions")
        click.echo(f"CSV written: {csv_path}")
        click.echo(f"JSON written: {json_path}")

    @app.cli.command("cafeledger-seed")
    def cafeledger_seed() -> None:
        """Insert a small week of demo entries and a note."""

        from .clock import utc_now
        from .models.transaction import NewTransaction

        context = app.extensions["cafeledger"]
        transactions, notes = context.repositories()
        now = utc_now()
        demo = [
            NewTransaction(amount=4200.0, type="income", category="Food Sale", date=now, payment_method="cash"),
            NewTransaction(amount=2650.0, type="income", category="Food Sale", date=now, payment_method="online"),
            NewTransaction(amount=850.0, type="expense", category="Grocery", date=now, payment_method="cash"),
            NewTransaction(
                amount=15000.0,
                type="expense",
                category="Rent",
                date=now - timedelta(days=35),
                payment_method="online",
                is_recurring=True,
                note="Monthly shop rent",
            ),
        ]
        for offset in range(1, 7):
            demo.append(
                NewTransaction(
                    amount=3000.0 + offset * 250,
                    type="income",
                    category="Food Sale",
                    date=now - timedelta(days=offset),
                    payment_method="cash" if offset % 2 else "online",
                )
            )
            demo.append(
                NewTransaction(
                    amount=600.0 + offset * 40,
                    type="expense",
                    category="Chicken",
                    date=now - timedelta(days=offset),
                    payment_method="cash",
                )
            )
        for new in demo:
            transactions.create_transaction(new)
        notes.create_note("Gas cylinder delivery due on Friday.")
        click.echo(f"Seeded {len(demo)} transactions and 1 note.")
