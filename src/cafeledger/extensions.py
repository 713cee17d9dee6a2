"""Request-scoped accessors for the application context and session state."""

from __future__ import annotations

from typing import Optional

from flask import current_app, g

from .context import AppContext, SessionState
from .services.auth import ADMIN
from .services.ledger_service import LedgerService


def get_context() -> AppContext:
    """Return the context created by ``create_app``."""

    context = current_app.extensions.get("cafeledger")
    if context is None:  # pragma: no cover - only without the app factory
        raise RuntimeError("CafeLedger context not initialized")
    return context


def get_state() -> SessionState:
    state = g.get("state")
    if state is None:
        state = g.state = SessionState()
    return state


def current_role() -> Optional[str]:
    """Role used for permission checks; without login gating the session acts as admin."""

    state = get_state()
    if state.role:
        return state.role
    if get_context().config.REQUIRE_LOGIN:
        return None
    return ADMIN


def get_ledger() -> LedgerService:
    return get_context().ledger(get_state().access_token)


__all__ = ["current_role", "get_context", "get_ledger", "get_state"]
