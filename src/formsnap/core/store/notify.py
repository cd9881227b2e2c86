"""Advisory publish/subscribe channel for snapshot changes.

A `SnapshotStore` publishes its storage key after every write or clear so
other views of the same form (another process polling the same directory,
a live-updating viewer) can refresh. Delivery is synchronous and best
effort: a failing subscriber is logged and skipped, never allowed to break
the write that triggered it. There is no mutual exclusion.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable

from formsnap.core.settings import get_logger

Listener = Callable[[str, str], None]
"""Callback signature: ``listener(key, event)`` where event is "update" or "clear"."""

logger = get_logger(__name__)


class ChangeNotifier:
    """Explicitly constructed, injectable notification hub."""

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        """Register `listener` for `key`; returns an unsubscribe callable."""
        self._listeners[key].append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners.get(key, []):
                self._listeners[key].remove(listener)

        return _unsubscribe

    def publish(self, key: str, event: str = "update") -> None:
        for listener in list(self._listeners.get(key, [])):
            try:
                listener(key, event)
            except Exception:
                logger.exception("Snapshot change listener failed for %s", key)


__all__ = ["ChangeNotifier", "Listener"]
