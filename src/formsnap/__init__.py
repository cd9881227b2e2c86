"""formsnap: versioned, diffable and migratable form snapshots.

The package is organised in three layers:

- ``formsnap.core``    : contracts, storage, diffing, validation and migrations.
- ``formsnap.reports`` : report generation over a snapshot history and the
  text / Markdown / HTML / JSON renderers.
- ``formsnap.cli`` and ``formsnap.api`` : thin Typer and FastAPI surfaces.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
