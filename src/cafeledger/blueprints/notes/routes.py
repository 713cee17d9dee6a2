"""Note routes."""

from __future__ import annotations

from flask import flash, redirect, request, url_for

from ...extensions import current_role, get_ledger, get_state
from .. import run_action
from . import bp
from .forms import NoteForm


@bp.post("/notes")
def create_note():
    form = NoteForm.from_mapping(request.form)
    get_state().active_tab = "notes"
    if not form.validate():
        for messages in form.errors.values():
            for message in messages:
                flash(message, "warning")
        return redirect(url_for("cashbook.index"))

    run_action(get_ledger().add_note, current_role(), form.text, success="Note added.")
    return redirect(url_for("cashbook.index"))


@bp.post("/notes/<note_id>/delete")
def delete_note(note_id: str):
    get_state().active_tab = "notes"
    run_action(get_ledger().delete_note, current_role(), note_id, success="Note deleted.")
    return redirect(url_for("cashbook.index"))
