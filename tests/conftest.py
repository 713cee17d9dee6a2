"""Pytest configuration and shared fixtures for CafeLedger tests.

This module provides database fixtures, transaction factories and Flask app
fixtures for testing aggregation, repositories, services and routes without
touching the real instance database.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlmodel import create_engine

from cafeledger.infra.database import create_session_factory, init_database
from cafeledger.infra.repositories import (
    SQLModelNoteRepository,
    SQLModelSettingsRepository,
    SQLModelTransactionRepository,
)
from cafeledger.models.transaction import Transaction

# Fixed "now" used by clock-driven tests: a Wednesday afternoon in UTC.
NOW = datetime(2024, 3, 13, 15, 30, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock advancing one second per call (keeps created_at ordering strict)."""

    def __init__(self, start: datetime = NOW):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(seconds=1)
        return value


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path: Path):
    """Isolated SQLite file with every table created; disposed after the test."""

    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Context-managed session factory matching the repositories' expectations."""

    return create_session_factory(db_engine)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def transaction_repo(session_factory, clock, id_factory) -> SQLModelTransactionRepository:
    return SQLModelTransactionRepository(session_factory, id_factory=id_factory, clock=clock)


@pytest.fixture
def note_repo(session_factory, clock, id_factory) -> SQLModelNoteRepository:
    return SQLModelNoteRepository(session_factory, id_factory=id_factory, clock=clock)


@pytest.fixture
def settings_repo(session_factory) -> SQLModelSettingsRepository:
    return SQLModelSettingsRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def transaction_factory():
    """Build in-memory ``Transaction`` entries with sensible defaults.

    Usage:
        tx = transaction_factory(amount=120, type="expense", category="Rent")
    """

    counter = itertools.count(1)

    def _create_transaction(
        amount: float = 100.0,
        type: str = "income",
        category: str = "Food Sale",
        date: datetime = NOW,
        **overrides,
    ) -> Transaction:
        number = next(counter)
        fields = {
            "id": f"tx-{number}",
            "amount": float(amount),
            "type": type,
            "category": category,
            "date": date,
            "created_at": date + timedelta(seconds=number),
        }
        fields.update(overrides)
        return Transaction(**fields)

    return _create_transaction


# =============================================================================
# Flask App Fixtures
# =============================================================================


def _configure_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, **extra: str) -> None:
    monkeypatch.setenv("CAFELEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CAFELEDGER_DATABASE_URL", f"sqlite:///{tmp_path / 'records.db'}")
    monkeypatch.setenv("CAFELEDGER_DEVICE_DATABASE_URL", f"sqlite:///{tmp_path / 'device.db'}")
    monkeypatch.setenv("CAFELEDGER_TIMEZONE", "UTC")
    monkeypatch.setenv("CAFELEDGER_STORAGE_BACKEND", "sqlmodel")
    monkeypatch.setenv("CAFELEDGER_SETTINGS_STORE", "cookie")
    monkeypatch.setenv("CAFELEDGER_REQUIRE_LOGIN", "false")
    monkeypatch.delenv("CAFELEDGER_ACCOUNTS", raising=False)
    for key, value in extra.items():
        monkeypatch.setenv(key, value)


@pytest.fixture()
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    from cafeledger import create_app

    _configure_env(monkeypatch, tmp_path)
    app = create_app("testing")
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def gated_app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """App with login gating enabled and the default placeholder accounts."""

    from cafeledger import create_app

    _configure_env(monkeypatch, tmp_path, CAFELEDGER_REQUIRE_LOGIN="true")
    app = create_app("testing")
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def gated_client(gated_app):
    with gated_app.test_client() as client:
        yield client


@pytest.fixture()
def shared_device_app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Gated app keeping device settings in the server's own settings database."""

    from cafeledger import create_app

    _configure_env(
        monkeypatch,
        tmp_path,
        CAFELEDGER_REQUIRE_LOGIN="true",
        CAFELEDGER_SETTINGS_STORE="database",
    )
    app = create_app("testing")
    app.config.update(TESTING=True)
    return app
