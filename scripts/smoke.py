# scripts/smoke.py
"""
Smoke Test Script for the formsnap engine.

Runs the whole flow once against a real on-disk store: capture a few states,
diff them, migrate the latest snapshot, validate it and render a report.

Usage
-----
1. Use a throwaway directory (default):
    $ uv run python scripts/smoke.py

2. Keep the store and write the report somewhere:
    $ uv run python scripts/smoke.py --store-dir artifacts/smoke --format html -o report.html
"""

import argparse
import asyncio
import logging
import sys
import tempfile
import traceback
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from formsnap.core.diff import compare_snapshots
from formsnap.core.migration import Migration, MigrationManager
from formsnap.core.store import FileStorage, SnapshotStore
from formsnap.core.validation import validate_snapshot
from formsnap.reports import format_report, generate_report

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
FIELDS: dict[str, Any] = {
    "name": {"type": "string", "required": True, "important": True},
    "email": {"type": "string", "required": True, "important": True},
    "newsletter": {"type": "boolean"},
    "tags": {"type": "array"},
}

STATES: list[dict[str, Any]] = [
    {"name": "Ada Lovelace", "email": "ada@example.com", "newsletter": False, "tags": []},
    {"name": "Ada Lovelace", "email": "ada@example.com", "newsletter": True, "tags": ["math"]},
    {"name": "Ada King", "email": "ada@example.org", "newsletter": True, "tags": ["math"]},
]


def _split_name(state: dict[str, Any]) -> dict[str, Any]:
    if "name" not in state:
        return state
    first, _, last = str(state.pop("name")).partition(" ")
    return {**state, "firstName": first, "lastName": last}


def _join_name(state: dict[str, Any]) -> dict[str, Any]:
    if "firstName" not in state:
        return state
    first, last = state.pop("firstName"), state.pop("lastName", "")
    return {**state, "name": f"{first} {last}".strip()}


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run formsnap Smoke Test")
    parser.add_argument("--store-dir", "-d", type=str, help="Directory for the file-backed store")
    parser.add_argument("--format", "-f", default="text", help="text | markdown | html | json")
    parser.add_argument("--output", "-o", type=str, help="Write the report to this file")
    args = parser.parse_args()

    store_dir = Path(args.store_dir) if args.store_dir else Path(tempfile.mkdtemp(prefix="formsnap-"))
    print(f"\n📂 Using store directory: {store_dir}")

    try:
        # 1. Capture Phase
        store = SnapshotStore("smoke", storage=FileStorage(store_dir), max_snapshots=5)
        previous: dict[str, Any] | None = None
        for state in STATES:
            if previous is None:
                store.create_snapshot(state, {"source": "smoke"})
            elif store.create_auto_snapshot(FIELDS, state, previous) is None:
                store.create_snapshot(state, {"source": "smoke"})
            previous = state
        history = store.get_all_snapshots()
        print(f"📸 Captured {len(history)} snapshots")

        # 2. Diff Phase
        diff = compare_snapshots(history[0], history[-1])
        print(f"🔍 First -> last: {len(diff.modified)} modified, {len(diff.unchanged)} unchanged")

        # 3. Migration Phase
        manager = MigrationManager().add_migration(
            Migration(version="2.0.0", description="Split name", up=_split_name, down=_join_name)
        )
        manager.validate_migrations()
        migrated = asyncio.run(manager.migrate_to_latest(history[-1]))
        print(f"🚚 Migrated to {migrated.version}: {sorted(migrated.state)}")

        # 4. Validation Phase
        result = validate_snapshot(history[-1], FIELDS)
        print(f"✅ Latest snapshot valid: {result.is_valid}")

        # 5. Report Phase
        report = generate_report(history, FIELDS)
        rendered = format_report(report, args.format)
    except Exception as exc:
        print(f"\n❌ Smoke run crashed: {exc}")
        traceback.print_exc()
        return

    print("\n" + "=" * 60)
    print("✅ Smoke run finished successfully!")
    print("=" * 60)
    print(f"  - Important changes: {report.summary.important_changes}")
    print(f"  - Versions: {', '.join(report.summary.versions)}")

    if args.output:
        Path(args.output).write_text(rendered, encoding="utf-8")
        print(f"\n💾 Report saved to: {args.output}")
    else:
        print("\n" + rendered)


if __name__ == "__main__":
    main()
