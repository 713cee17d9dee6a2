"""Device-local settings stored outside the record store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlmodel import Field, SQLModel


class DeviceSetting(SQLModel, table=True):
    """Key-value storage for per-device conveniences (daily target, drawer float)."""

    __tablename__: ClassVar[str] = "device_setting"

    key: str = Field(primary_key=True, max_length=64)
    value: str = Field(nullable=False, max_length=2048)
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
