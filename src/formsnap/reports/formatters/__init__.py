"""Report renderers and the `format_report` dispatcher.

Every renderer is a pure function of a `SnapshotReport`: no I/O, no mutation.
"""

from __future__ import annotations

from collections.abc import Callable

from formsnap.core.contracts.report import ReportFormat, SnapshotReport

from .html import format_html_report
from .markdown import format_markdown_report
from .text import format_text_report

Renderer = Callable[..., str]


def format_json_report(report: SnapshotReport, **_: bool) -> str:
    """Raw JSON of the report structure (wire names, ISO datetimes)."""
    return report.model_dump_json(indent=2, by_alias=True)


RENDERERS: dict[str, Renderer] = {
    "text": format_text_report,
    "markdown": format_markdown_report,
    "html": format_html_report,
    "json": format_json_report,
}


def format_report(
    report: SnapshotReport,
    format: ReportFormat = "text",
    *,
    include_metadata: bool = True,
    include_timestamps: bool = True,
) -> str:
    """Render `report` in one of ``text``, ``markdown``, ``html`` or ``json``.

    Raises
    ------
    ValueError
        For an unknown format name.
    """
    renderer = RENDERERS.get(format)
    if renderer is None:
        raise ValueError(f"Unknown report format {format!r}; expected one of {sorted(RENDERERS)}")
    return renderer(
        report,
        include_metadata=include_metadata,
        include_timestamps=include_timestamps,
    )


__all__ = [
    "RENDERERS",
    "format_html_report",
    "format_json_report",
    "format_markdown_report",
    "format_report",
    "format_text_report",
]
