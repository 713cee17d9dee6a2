"""Blueprint packages and the shared write-then-redirect helper."""

from __future__ import annotations

from typing import Any, Callable

from flask import flash

from ..errors import AuthError, PermissionDenied, StorageError, ValidationError
from ..logging_config import get_logger

logger = get_logger("web")


def run_action(action: Callable[..., Any], *args: Any, success: str | None = None) -> bool:
    """Run one write and flash the outcome; failures leave stored state unchanged."""

    try:
        action(*args)
    except PermissionDenied as exc:
        logger.warning("Permission denied", extra={"role": exc.role, "action": exc.action})
        flash(str(exc), "danger")
        return False
    except (ValidationError, AuthError) as exc:
        flash(str(exc), "warning")
        return False
    except StorageError as exc:
        logger.exception("Write failed")
        flash(str(exc), "danger")
        return False
    if success:
        flash(success, "success")
    return True


__all__ = ["run_action"]
