"""Key-value persistence providers for the snapshot store.

The store only needs three operations (`get`, `set`, `remove`) on string
values. Two providers ship with the package:

- `MemoryStorage` : a dict, for tests and short-lived processes.
- `FileStorage`   : one UTF-8 text file per key under a directory.

Default directory
-----------------
`FileStorage()` without arguments uses `FORMSNAP_STORE_DIR` (via settings) or
`artifacts/snapshots/`.

Concurrency
-----------
No locking is performed. Two writers on the same key race and the last
write wins; `ChangeNotifier` (see `notify.py`) is advisory only.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from formsnap.core.settings import load_settings

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@runtime_checkable
class KeyValueStorage(Protocol):
    """Minimal string key-value provider consumed by `SnapshotStore`."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Volatile dict-backed provider."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> tuple[str, ...]:
        """Return the stored keys as a sorted tuple (stable for tests)."""
        return tuple(sorted(self._data))

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._data)


def _default_dir() -> Path:
    """Return the configured base directory for snapshot files."""
    return load_settings().store_dir


class FileStorage:
    """Persist each key as ``<base_dir>/<key>.json``.

    Keys are sanitised to a filename-safe alphabet; distinct keys that
    sanitise to the same name share a file.
    """

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self.base_dir: Path = Path(base_dir) if base_dir is not None else _default_dir()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.base_dir / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        # write-then-rename so readers never observe a half-written file
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    def keys(self) -> tuple[str, ...]:
        """Return the (sanitised) keys currently on disk, sorted."""
        return tuple(sorted(p.stem for p in self.base_dir.glob("*.json")))


__all__ = ["FileStorage", "KeyValueStorage", "MemoryStorage"]
