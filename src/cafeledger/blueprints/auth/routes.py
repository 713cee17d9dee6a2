"""Sign-in and sign-out routes."""

from __future__ import annotations

from urllib.parse import urlparse

from flask import flash, redirect, render_template, request, url_for

from ...errors import AuthError, StorageError
from ...extensions import get_context, get_state
from ...logging_config import get_logger
from . import bp

logger = get_logger("web.auth")


def _safe_next(target: str | None) -> str:
    """Only follow same-site relative redirects."""

    if target and target.startswith("/") and not urlparse(target).netloc and not target.startswith("//"):
        return target
    return url_for("cashbook.index")


@bp.route("/login", methods=["GET", "POST"])
def login():
    next_url = request.values.get("next")
    if request.method == "GET":
        return render_template("auth/login.html", next_url=next_url)

    username = request.form.get("username", "").strip()
    password = request.form.get("password", "")
    try:
        grant = get_context().login_service.login(username, password)
    except AuthError as exc:
        logger.info("Sign-in rejected", extra={"username": username})
        flash(str(exc), "danger")
        return render_template("auth/login.html", next_url=next_url, username=username), 401
    except StorageError as exc:
        logger.exception("Sign-in failed")
        flash(str(exc), "danger")
        return render_template("auth/login.html", next_url=next_url, username=username), 503

    state = get_state()
    state.role = grant.role
    state.access_token = grant.access_token
    flash(f"Signed in as {grant.username} ({grant.role}).", "success")
    return redirect(_safe_next(next_url))


@bp.post("/logout")
def logout():
    state = get_state()
    get_context().login_service.logout(state.access_token)
    state.sign_out()
    flash("Signed out.", "info")
    if get_context().config.REQUIRE_LOGIN:
        return redirect(url_for("auth.login"))
    return redirect(url_for("cashbook.index"))
