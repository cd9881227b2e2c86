"""Core snapshot engine: contracts, store, differ, validator and migrations.

Downstream code usually imports from the submodules directly, e.g.:
    from formsnap.core.store import SnapshotStore
    from formsnap.core.migration import Migration, MigrationManager
"""

from __future__ import annotations

__all__ = ["__doc__"]
