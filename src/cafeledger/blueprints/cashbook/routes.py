"""Cashbook routes: the tabbed page, transaction writes and device settings."""

from __future__ import annotations

from typing import Any

from flask import flash, g, redirect, render_template, request, url_for

from ...clock import utc_now
from ...context import TABS
from ...errors import ReceiptError, StorageError
from ...extensions import current_role, get_context, get_ledger, get_state
from ...logging_config import get_logger
from ...models.note import Note
from ...models.transaction import Transaction
from ...services.aggregation import build_insights, compute_totals, transactions_on
from ...services.cash import reconcile_cash
from ...services.history import (
    HistoryFilters,
    category_suggestions,
    filter_history,
    recent_transactions,
)
from ...services.receipts import encode_receipt
from ...services.recurring import recurring_reminders
from .. import run_action
from . import bp
from .forms import QUICK_PICKS, TransactionEntryForm, parse_money

logger = get_logger("web.cashbook")


def _tab_redirect(tab: str | None = None):
    state = get_state()
    if tab in TABS:
        state.active_tab = tab
    return redirect(url_for("cashbook.index"))


def _page_context(form: TransactionEntryForm | None = None) -> dict[str, Any]:
    """Reload both record lists and recompute every derived view."""

    context = get_context()
    state = get_state()
    tz = context.tz
    transactions: list[Transaction] = []
    notes: list[Note] = []
    try:
        snapshot = get_ledger().load()
        transactions, notes = snapshot.transactions, snapshot.notes
    except StorageError as exc:
        logger.exception("Reload failed")
        flash(str(exc), "danger")

    today = g.today
    todays = transactions_on(transactions, today, tz)
    filters = HistoryFilters.from_mapping(request.args)
    history = filter_history(transactions, filters, tz)

    return {
        "state": state,
        "tabs": TABS,
        "role": current_role(),
        "today": today,
        "tz": tz,
        "form": form or TransactionEntryForm(),
        "quick_picks": QUICK_PICKS,
        "suggestions": category_suggestions(transactions, request.args.get("category_q", "")),
        "today_totals": compute_totals(todays),
        "all_totals": compute_totals(transactions),
        "recent": recent_transactions(transactions),
        "reminders": recurring_reminders(transactions, now=utc_now(), tz=tz),
        "filters": filters,
        "history": history,
        "history_totals": compute_totals(history),
        "insights": build_insights(transactions, today=today, target=state.daily_target, tz=tz),
        "cash": reconcile_cash(
            transactions, starting_cash=state.starting_cash, today=today, tz=tz
        ),
        "notes": notes,
        "max_receipt_kb": context.config.MAX_RECEIPT_BYTES // 1024,
    }


@bp.get("/")
def index():
    """Render the single page with the requested (or remembered) tab."""

    state = get_state()
    tab = request.args.get("tab")
    if tab in TABS:
        state.active_tab = tab
    return render_template("cashbook/index.html", **_page_context())


@bp.post("/transactions")
def create_transaction():
    """Validate, attach the optional receipt and persist a new transaction."""

    form = TransactionEntryForm.from_mapping(request.form)
    if not form.validate():
        get_state().active_tab = "add"
        return render_template("cashbook/index.html", **_page_context(form)), 400

    receipt_data_url = None
    upload = request.files.get("receipt")
    if upload is not None and upload.filename:
        try:
            receipt_data_url = encode_receipt(
                upload.stream,
                upload.mimetype,
                max_bytes=get_context().config.MAX_RECEIPT_BYTES,
            )
        except ReceiptError as exc:
            flash(f"{exc} The entry was saved without it.", "warning")

    new = form.to_new_transaction(receipt_data_url=receipt_data_url)
    run_action(get_ledger().add_transaction, current_role(), new, success="Transaction saved.")
    return _tab_redirect("add")


@bp.post("/transactions/<transaction_id>/delete")
def delete_transaction(transaction_id: str):
    run_action(
        get_ledger().delete_transaction,
        current_role(),
        transaction_id,
        success="Transaction deleted.",
    )
    return _tab_redirect(request.form.get("tab"))


@bp.post("/transactions/clear")
def clear_transactions():
    run_action(get_ledger().clear_all, current_role(), success="All transactions cleared.")
    return _tab_redirect(request.form.get("tab") or "history")


@bp.post("/transactions/<transaction_id>/recur")
def add_recurring(transaction_id: str):
    """Add this month's copy of a recurring template."""

    run_action(
        get_ledger().add_recurring_now,
        current_role(),
        transaction_id,
        success="Recurring entry added for this month.",
    )
    return _tab_redirect("add")


@bp.post("/settings/target")
def update_target():
    value = parse_money(request.form.get("daily_target"))
    if value is None:
        flash("Enter a valid target", "warning")
    else:
        get_state().daily_target = value
        flash("Daily target updated.", "success")
    return _tab_redirect(request.form.get("tab") or "add")


@bp.post("/settings/starting-cash")
def update_starting_cash():
    value = parse_money(request.form.get("starting_cash"))
    if value is None:
        flash("Enter a valid amount", "warning")
    else:
        get_state().starting_cash = value
        flash("Starting cash updated.", "success")
    return _tab_redirect("cash")
