"""Settings stores for device-local key/value pairs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import MutableMapping, Optional

from sqlmodel import select

from ...models.settings import DeviceSetting
from ..database import SessionFactory


class SQLModelSettingsRepository:
    """Settings kept in the device's own SQLite file."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            setting = session.exec(select(DeviceSetting).where(DeviceSetting.key == key)).first()
            return setting.value if setting else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            setting = session.get(DeviceSetting, key)
            if setting:
                setting.value = value
                setting.updated_at = datetime.now(timezone.utc)
            else:
                setting = DeviceSetting(key=key, value=value)
            session.add(setting)
            session.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            setting = session.get(DeviceSetting, key)
            if setting:
                session.delete(setting)
                session.commit()


class CookieSettingsStore:
    """Settings kept in the browser's signed session cookie (one store per browser)."""

    PREFIX = "cafeledger."

    def __init__(self, session: MutableMapping[str, object]):
        self._session = session

    def get(self, key: str) -> Optional[str]:
        value = self._session.get(self.PREFIX + key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        self._session[self.PREFIX + key] = value

    def delete(self, key: str) -> None:
        self._session.pop(self.PREFIX + key, None)


__all__ = ["CookieSettingsStore", "SQLModelSettingsRepository"]
