"""Shared fixtures for the formsnap test-suite."""

from __future__ import annotations

from collections.abc import Callable, Generator

import pytest

from formsnap.core.settings import load_settings
from formsnap.core.store import MemoryStorage


@pytest.fixture(autouse=True)  # type: ignore[misc]
def _fresh_settings() -> Generator[None, None, None]:
    """Rebuild the cached settings around every test so env tweaks never leak."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


@pytest.fixture  # type: ignore[misc]
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture  # type: ignore[misc]
def clock() -> Callable[[], int]:
    """Deterministic millisecond clock advancing by one second per call."""
    ticks = {"now": 1_700_000_000_000}

    def _tick() -> int:
        ticks["now"] += 1000
        return ticks["now"]

    return _tick
