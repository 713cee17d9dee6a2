"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from datetime import tzinfo
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

# Placeholder sign-in table; real deployments rely on backend access rules.
DEFAULT_ACCOUNTS = "admin:admin123:admin,manager:manager123:moderator,staff:staff123:user"


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def parse_accounts(raw: str) -> list[tuple[str, str, str, Optional[str]]]:
    """Parse ``username:password:role[:backend_email]`` entries separated by commas."""

    accounts: list[tuple[str, str, str, Optional[str]]] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts = chunk.split(":")
        if len(parts) not in (3, 4):
            raise ValueError(f"Invalid account entry: {chunk!r}")
        username, password, role = (p.strip() for p in parts[:3])
        email = parts[3].strip() if len(parts) == 4 and parts[3].strip() else None
        accounts.append((username, password, role, email))
    return accounts


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "CafeLedger"
    DB_FILENAME = "cafeledger.db"
    DEVICE_DB_FILENAME = "device.db"
    CSV_EXPORT_NAME = "cafe-ledger.csv"
    JSON_EXPORT_NAME = "cafe-ledger.json"
    STORAGE_BACKENDS = ("sqlmodel", "supabase")
    SETTINGS_STORES = ("cookie", "database")

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("CAFELEDGER_SECRET_KEY", "replace-me")
        self.DEV_MODE = _env_bool("CAFELEDGER_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("CAFELEDGER_DATABASE_URL", self._sqlite_url(self.DB_FILENAME))
        self.DEVICE_DATABASE_URL = os.getenv(
            "CAFELEDGER_DEVICE_DATABASE_URL", self._sqlite_url(self.DEVICE_DB_FILENAME)
        )
        self.STORAGE_BACKEND = os.getenv("CAFELEDGER_STORAGE_BACKEND", "sqlmodel").strip().lower()
        self.SUPABASE_URL = os.getenv("CAFELEDGER_SUPABASE_URL", "")
        self.SUPABASE_KEY = os.getenv("CAFELEDGER_SUPABASE_KEY", "")
        self.HTTP_TIMEOUT = _env_float("CAFELEDGER_HTTP_TIMEOUT", 10.0)
        self.REQUIRE_LOGIN = _env_bool("CAFELEDGER_REQUIRE_LOGIN", default=False)
        self.ACCOUNTS = parse_accounts(os.getenv("CAFELEDGER_ACCOUNTS", DEFAULT_ACCOUNTS))
        self.SETTINGS_STORE = os.getenv("CAFELEDGER_SETTINGS_STORE", "cookie").strip().lower()
        self.TIMEZONE = os.getenv("CAFELEDGER_TIMEZONE") or None
        self.CURRENCY_SYMBOL = os.getenv("CAFELEDGER_CURRENCY_SYMBOL", "₹")
        self.MAX_RECEIPT_BYTES = int(_env_float("CAFELEDGER_MAX_RECEIPT_BYTES", 2 * 1024 * 1024))
        self.validate()

    def validate(self) -> None:
        """Reject inconsistent settings early."""

        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("CAFELEDGER_SECRET_KEY must be set in non-dev mode.")
        if self.STORAGE_BACKEND not in self.STORAGE_BACKENDS:
            raise ValueError(f"Unknown storage backend: {self.STORAGE_BACKEND}")
        if self.SETTINGS_STORE not in self.SETTINGS_STORES:
            raise ValueError(f"Unknown settings store: {self.SETTINGS_STORE}")
        if self.STORAGE_BACKEND == "supabase" and not (self.SUPABASE_URL and self.SUPABASE_KEY):
            raise ValueError(
                "CAFELEDGER_SUPABASE_URL and CAFELEDGER_SUPABASE_KEY are required "
                "for the supabase storage backend."
            )

    def _resolve_data_dir(self) -> Path:
        """Return the directory where SQLite files and logs live."""

        data_root = os.getenv("CAFELEDGER_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _sqlite_url(self, filename: str) -> str:
        return f"sqlite:///{Path(self.DATA_DIR) / filename}"

    def local_zone(self) -> tzinfo | None:
        """Timezone used for calendar-day grouping; ``None`` means the host's local zone."""

        return ZoneInfo(self.TIMEZONE) if self.TIMEZONE else None

    def sqlalchemy_engine_options(self, url: str | None = None) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        target = url or self.DATABASE_URL
        if target.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the test-suite."""

    DEBUG = False
    TESTING = True
