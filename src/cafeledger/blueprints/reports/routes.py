"""Export downloads, the printable daily-close report and the weekly chart."""

from __future__ import annotations

from flask import Response, flash, g, redirect, render_template, url_for

from ...errors import StorageError
from ...extensions import get_context, get_ledger
from ...logging_config import get_logger
from ...services.aggregation import trailing_week
from ...services.export_csv import transactions_csv, transactions_json
from ...services.reports import build_daily_close, weekly_profit_png
from . import bp

logger = get_logger("web.reports")


def _load_transactions():
    return get_ledger().transactions.list_transactions()


def _download(body: str, mimetype: str, filename: str) -> Response:
    return Response(
        body,
        mimetype=mimetype,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@bp.get("/export/transactions.csv")
def export_csv():
    try:
        transactions = _load_transactions()
    except StorageError as exc:
        logger.exception("CSV export failed")
        flash(str(exc), "danger")
        return redirect(url_for("cashbook.index"))
    logger.info("CSV export", extra={"rows": len(transactions)})
    return _download(
        transactions_csv(transactions), "text/csv", get_context().config.CSV_EXPORT_NAME
    )


@bp.get("/export/transactions.json")
def export_json():
    try:
        transactions = _load_transactions()
    except StorageError as exc:
        logger.exception("JSON export failed")
        flash(str(exc), "danger")
        return redirect(url_for("cashbook.index"))
    logger.info("JSON export", extra={"rows": len(transactions)})
    return _download(
        transactions_json(transactions), "application/json", get_context().config.JSON_EXPORT_NAME
    )


@bp.get("/reports/daily-close")
def daily_close():
    """Standalone printable summary of today's entries."""

    context = get_context()
    try:
        transactions = _load_transactions()
    except StorageError as exc:
        logger.exception("Daily close failed")
        flash(str(exc), "danger")
        return redirect(url_for("cashbook.index"))
    report = build_daily_close(transactions, today=g.today, tz=context.tz)
    return render_template("reports/daily_close.html", report=report)


@bp.get("/reports/weekly.png")
def weekly_chart():
    context = get_context()
    try:
        transactions = _load_transactions()
    except StorageError:
        logger.exception("Weekly chart failed")
        transactions = []
    buckets = trailing_week(transactions, g.today, context.tz)
    png = weekly_profit_png(buckets, currency=context.config.CURRENCY_SYMBOL)
    return Response(png, mimetype="image/png", headers={"Cache-Control": "no-store"})
