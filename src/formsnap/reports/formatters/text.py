"""Plain-text report renderer."""

from __future__ import annotations

from formsnap.core.contracts.report import SnapshotReport

from .common import TITLE, format_timestamp, json_value, metadata_payload, summary_rows


def format_text_report(
    report: SnapshotReport,
    *,
    include_metadata: bool = True,
    include_timestamps: bool = True,
) -> str:
    lines = [TITLE, "=" * len(TITLE), "", "Summary:"]
    lines.extend(f"{label}: {value}" for label, value in summary_rows(report))
    lines.extend(["", "Snapshots:", ""])

    for processed in report.snapshots:
        snap = processed.snapshot
        heading = f"Version {snap.version}"
        if include_timestamps:
            heading += f" ({format_timestamp(snap.timestamp)})"
        lines.extend([heading, f"Importance: {processed.importance}", ""])

        if processed.changes:
            lines.append("Changes:")
            for name, change in processed.changes.items():
                lines.extend(
                    [
                        f"  {name}:",
                        f"    From: {json_value(change.from_)}",
                        f"    To:   {json_value(change.to)}",
                    ]
                )

        metadata = metadata_payload(processed) if include_metadata else None
        if metadata:
            lines.append("Metadata:")
            lines.extend(f"  {key}: {json_value(value)}" for key, value in metadata.items())
        lines.append("")

    return "\n".join(lines)


__all__ = ["format_text_report"]
