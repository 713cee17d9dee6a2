"""CafeLedger application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, g, redirect, request, session, url_for

from . import cli as _cli
from .clock import local_now, to_local
from .config import BaseConfig, DevConfig, TestingConfig
from .context import SessionState, create_app_context
from .logging_config import get_logger, setup_logging

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestingConfig,
    "default": BaseConfig,
}

# Endpoints reachable without a signed-in role when login is required.
_PUBLIC_ENDPOINTS = {"auth.login", "static"}

logger = get_logger("app")


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths registered on every app."""

    yield "cafeledger.blueprints.cashbook"
    yield "cafeledger.blueprints.notes"
    yield "cafeledger.blueprints.auth"
    yield "cafeledger.blueprints.reports"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_obj = _resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["CAFELEDGER_CONFIG"] = config_obj

    setup_logging(config_obj)
    context = create_app_context(config_obj)
    app.extensions["cafeledger"] = context

    _register_blueprints(app)
    _register_session_hooks(app)
    _register_template_helpers(app, config_obj)
    _cli.init_app(app)

    logger.info("Application created", extra={"config": type(config_obj).__name__})
    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


def _register_session_hooks(app: Flask) -> None:
    """Load the session struct before each request and save it afterwards."""

    @app.before_request
    def _load_session_state():
        context = app.extensions["cafeledger"]
        g.today = local_now(context.tz).date()
        g.settings_store, g.device_store = context.settings_stores(session)
        state = SessionState.load(g.settings_store, g.today, device=g.device_store)
        if state.role is not None:
            if context.login_service.restore(state.role, state.access_token) is None:
                state.sign_out()
        g.state = state

        if (
            context.config.REQUIRE_LOGIN
            and state.role is None
            and request.endpoint not in _PUBLIC_ENDPOINTS
        ):
            return redirect(url_for("auth.login", next=request.path))
        return None

    @app.after_request
    def _save_session_state(response):
        state = g.get("state")
        if state is not None and "settings_store" in g:
            state.save(g.settings_store, g.today, device=g.device_store)
        return response


def _register_template_helpers(app: Flask, config: BaseConfig) -> None:
    symbol = config.CURRENCY_SYMBOL

    @app.template_filter("money")
    def money(value) -> str:
        amount = float(value or 0)
        sign = "-" if amount < 0 else ""
        return f"{sign}{symbol}{abs(amount):,.2f}"

    @app.template_filter("localtime")
    def localtime(value, fmt: str = "%d %b %Y %H:%M") -> str:
        return to_local(value, config.local_zone()).strftime(fmt)

    @app.context_processor
    def _inject_globals():
        from .extensions import current_role
        from .services import auth

        role = current_role()
        return {
            "app_name": config.APP_NAME,
            "currency": symbol,
            "current_role": role,
            "can": lambda action: auth.can(role, action),
            "actions": auth,
            "login_required": config.REQUIRE_LOGIN,
        }


__all__ = ["BaseConfig", "DevConfig", "TestingConfig", "create_app"]
