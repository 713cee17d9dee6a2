"""Exports and printable reports blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint(
    "reports",
    __name__,
    template_folder="../../templates",
)

from . import routes  # noqa: E402,F401 - ensure routes get registered

__all__ = ["bp"]
