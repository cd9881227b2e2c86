"""Self-contained HTML report renderer (Jinja2, autoescaped).

All user-controlled content (field names, values, versions, metadata) is
passed to the template as plain strings and escaped by Jinja2's autoescape;
the template itself never marks report data as safe.
"""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, PackageLoader, TemplateNotFound, select_autoescape

from formsnap.core.contracts.report import ProcessedSnapshot, SnapshotReport

from .common import (
    GROUP_HEADINGS,
    LOW_SUMMARY,
    TITLE,
    format_timestamp,
    grouped,
    iso_timestamp,
    json_value,
    metadata_payload,
    summary_rows,
)

TEMPLATE_NAME = "report.html.jinja"

_ENV: Environment | None = None


def _get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment(
            loader=PackageLoader("formsnap.reports", "templates"),
            autoescape=select_autoescape(enabled_extensions=("html", "html.jinja")),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _ENV


def _card_context(
    processed: ProcessedSnapshot,
    *,
    include_metadata: bool,
    include_timestamps: bool,
) -> dict[str, Any]:
    snap = processed.snapshot
    metadata = metadata_payload(processed) if include_metadata else None
    return {
        "version": snap.version,
        "importance": processed.importance,
        "timestamp": format_timestamp(snap.timestamp) if include_timestamps else None,
        "iso_timestamp": iso_timestamp(snap.timestamp),
        "changes": [
            {
                "field": name,
                "before": json_value(change.from_, indent=2),
                "after": json_value(change.to, indent=2),
            }
            for name, change in (processed.changes or {}).items()
        ],
        "metadata": json_value(metadata, indent=2) if metadata else None,
    }


def format_html_report(
    report: SnapshotReport,
    *,
    include_metadata: bool = True,
    include_timestamps: bool = True,
) -> str:
    groups = [
        {
            "heading": GROUP_HEADINGS[tier],
            "collapsed": tier == "low",
            "entries": [
                _card_context(
                    p,
                    include_metadata=include_metadata,
                    include_timestamps=include_timestamps,
                )
                for p in items
            ],
        }
        for tier, items in grouped(report)
    ]
    context = {
        "title": TITLE,
        "summary": summary_rows(report),
        "groups": groups,
        "low_summary": LOW_SUMMARY,
    }
    try:
        template = _get_env().get_template(TEMPLATE_NAME)
    except TemplateNotFound as exc:  # pragma: no cover - packaging guard
        raise RuntimeError(f"Report template '{TEMPLATE_NAME}' not found.") from exc
    return template.render(**context)


__all__ = ["format_html_report"]
