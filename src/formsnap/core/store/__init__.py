"""Snapshot persistence: the store, its storage providers and the change channel."""

from __future__ import annotations

from .backends import FileStorage, KeyValueStorage, MemoryStorage
from .manager import SnapshotStore
from .notify import ChangeNotifier

__all__ = ["ChangeNotifier", "FileStorage", "KeyValueStorage", "MemoryStorage", "SnapshotStore"]
