"""Device-local settings store protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class SettingsStore(Protocol):
    """String key/value storage that never goes through the record store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
