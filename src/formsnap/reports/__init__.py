"""Report generation over snapshot histories and its renderers."""

from __future__ import annotations

from .formatters import format_report
from .generator import generate_report

__all__ = ["format_report", "generate_report"]
