"""Application context for dependency injection and the per-session settings struct."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import MutableMapping, Optional

import httpx

from .config import BaseConfig
from .domain.repositories.note import NoteRepository
from .domain.repositories.settings import SettingsStore
from .domain.repositories.transaction import TransactionRepository
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import (
    CookieSettingsStore,
    SQLModelNoteRepository,
    SQLModelSettingsRepository,
    SQLModelTransactionRepository,
    SupabaseAuthBackend,
    SupabaseClient,
    SupabaseNoteRepository,
    SupabaseTransactionRepository,
)
from .logging_config import get_logger
from .models import DEVICE_TABLES, RECORD_TABLES
from .services.auth import LoginService, StaticCredentialResolver
from .services.ledger_service import LedgerService

logger = get_logger("context")

TABS = ("add", "history", "insights", "cash", "notes")
DEFAULT_TAB = TABS[0]


def _parse_amount(raw: Optional[str]) -> float:
    if raw is None:
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) and value >= 0 else 0.0


def starting_cash_key(day: date) -> str:
    return f"starting_cash:{day.isoformat()}"


# Date of the one starting-cash key currently stored.
STARTING_CASH_DAY_KEY = "starting_cash_day"


@dataclass
class SessionState:
    """Per-browser UI settings, loaded once per request and saved explicitly.

    ``active_tab``, ``role`` and ``access_token`` always live in ``store`` (the
    signed session cookie). The daily target and today's starting cash go to
    ``device`` when one is given, so a shared settings database never carries
    a signed-in role across browsers.
    """

    active_tab: str = DEFAULT_TAB
    daily_target: float = 0.0
    starting_cash: float = 0.0
    role: Optional[str] = None
    access_token: Optional[str] = None

    @classmethod
    def load(
        cls, store: SettingsStore, today: date, *, device: Optional[SettingsStore] = None
    ) -> SessionState:
        device = device if device is not None else store
        tab = store.get("active_tab") or DEFAULT_TAB
        return cls(
            active_tab=tab if tab in TABS else DEFAULT_TAB,
            daily_target=_parse_amount(device.get("daily_target")),
            starting_cash=_parse_amount(device.get(starting_cash_key(today))),
            role=store.get("role") or None,
            access_token=store.get("access_token") or None,
        )

    def save(
        self, store: SettingsStore, today: date, *, device: Optional[SettingsStore] = None
    ) -> None:
        device = device if device is not None else store
        store.set("active_tab", self.active_tab)
        for key in ("role", "access_token"):
            value = getattr(self, key)
            if value:
                store.set(key, value)
            else:
                store.delete(key)

        if self.daily_target:
            device.set("daily_target", repr(float(self.daily_target)))
        else:
            device.delete("daily_target")
        self._save_starting_cash(device, today)

    def _save_starting_cash(self, device: SettingsStore, today: date) -> None:
        """Keep at most one dated starting-cash key: today's, and only when set."""

        stored_day = device.get(STARTING_CASH_DAY_KEY)
        if stored_day and stored_day != today.isoformat():
            device.delete(f"starting_cash:{stored_day}")
        key = starting_cash_key(today)
        if self.starting_cash:
            device.set(key, repr(float(self.starting_cash)))
            device.set(STARTING_CASH_DAY_KEY, today.isoformat())
        else:
            device.delete(key)
            device.delete(STARTING_CASH_DAY_KEY)

    def sign_out(self) -> None:
        self.role = None
        self.access_token = None


@dataclass
class AppContext:
    """Centralized application context with repositories and services."""

    config: BaseConfig
    tz: Optional[tzinfo]
    device_session_factory: SessionFactory
    login_service: LoginService
    record_session_factory: Optional[SessionFactory] = None
    supabase: Optional[SupabaseClient] = None

    def repositories(
        self, access_token: Optional[str] = None
    ) -> tuple[TransactionRepository, NoteRepository]:
        """Record repositories for the configured backend acting as ``access_token``."""

        if self.supabase is not None:
            client = self.supabase.authorized(access_token)
            return SupabaseTransactionRepository(client), SupabaseNoteRepository(client)
        if self.record_session_factory is None:
            raise RuntimeError("Record store not initialized")
        return (
            SQLModelTransactionRepository(self.record_session_factory),
            SQLModelNoteRepository(self.record_session_factory),
        )

    def ledger(self, access_token: Optional[str] = None) -> LedgerService:
        transactions, notes = self.repositories(access_token)
        return LedgerService(transactions, notes)

    def settings_stores(
        self, cookie: MutableMapping[str, object]
    ) -> tuple[SettingsStore, Optional[SettingsStore]]:
        """Per-browser store plus the device database when configured.

        Role, token and tab stay in the signed cookie either way.
        """

        session_store = CookieSettingsStore(cookie)
        if self.config.SETTINGS_STORE == "database":
            return session_store, SQLModelSettingsRepository(self.device_session_factory)
        return session_store, None

    def close(self) -> None:
        if self.supabase is not None:
            self.supabase.close()


def create_app_context(
    config: Optional[BaseConfig] = None, *, transport: httpx.BaseTransport | None = None
) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    _, device_factory = bootstrap_database(
        config, url=config.DEVICE_DATABASE_URL, tables=DEVICE_TABLES
    )

    record_factory: Optional[SessionFactory] = None
    supabase: Optional[SupabaseClient] = None
    backend: Optional[SupabaseAuthBackend] = None
    if config.STORAGE_BACKEND == "supabase":
        supabase = SupabaseClient(
            config.SUPABASE_URL,
            config.SUPABASE_KEY,
            timeout=config.HTTP_TIMEOUT,
            transport=transport,
        )
        backend = SupabaseAuthBackend(supabase)
    else:
        _, record_factory = bootstrap_database(config, tables=RECORD_TABLES)

    login_service = LoginService(StaticCredentialResolver(config.ACCOUNTS), backend)
    logger.info(
        "Application context ready",
        extra={
            "storage_backend": config.STORAGE_BACKEND,
            "settings_store": config.SETTINGS_STORE,
            "require_login": config.REQUIRE_LOGIN,
        },
    )
    return AppContext(
        config=config,
        tz=config.local_zone(),
        device_session_factory=device_factory,
        login_service=login_service,
        record_session_factory=record_factory,
        supabase=supabase,
    )


__all__ = [
    "AppContext",
    "DEFAULT_TAB",
    "STARTING_CASH_DAY_KEY",
    "SessionState",
    "TABS",
    "create_app_context",
    "starting_cash_key",
]
