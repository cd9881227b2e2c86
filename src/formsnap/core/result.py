"""Typed Result container for recoverable failures.

The snapshot engine separates two error channels:

- *Recoverable* failures (a corrupt persisted payload, an undecodable blob)
  are returned as values so callers can degrade gracefully.
- *Workflow-halting* failures (a broken migration chain) are raised.

This module provides the first channel: a small `Result[T, E]` with
`Ok(value)` / `Err(error)` variants and the handful of combinators the
store's decode pipeline needs.

Example
-------
>>> from formsnap.core.result import ok, err, Result
>>> def parse_count(x: str) -> Result[int, str]:
...     return ok(int(x)) if x.isdigit() else err(f"not a count: {x!r}")
>>> ok("3").flat_map(parse_count).map(lambda n: n + 1).unwrap()
4
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, cast

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class Result(Generic[T, E]):
    """Sum type: either `Ok[T]` or `Err[E]`."""

    def is_ok(self) -> bool:
        """Return ``True`` for an :class:`Ok` value."""
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` for an :class:`Err` value."""
        return isinstance(self, Err)

    def unwrap(self) -> T:
        """Return the success value or raise ``RuntimeError`` on ``Err``."""
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        raise RuntimeError(f"Attempted to unwrap Err: {self!r}")

    def unwrap_err(self) -> E:
        """Return the error payload or raise ``RuntimeError`` on ``Ok``."""
        if isinstance(self, Err):
            return cast(Err[T, E], self).error
        raise RuntimeError(f"Attempted to unwrap_err on Ok: {self!r}")

    def get_or(self, default: T) -> T:
        """Return the success value, or ``default`` on ``Err``."""
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        return default

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        """Apply ``fn`` to a success value; errors pass through untouched."""
        if isinstance(self, Ok):
            return Ok(fn(cast(Ok[T, E], self).value))
        return cast(Result[U, E], self)

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain a step that itself returns a :class:`Result`."""
        if isinstance(self, Ok):
            return fn(cast(Ok[T, E], self).value)
        return cast(Result[U, E], self)

    def __repr__(self) -> str:  # pragma: no cover - trivial representation
        if isinstance(self, Ok):
            return f"Ok({cast(Ok[T, E], self).value!r})"
        if isinstance(self, Err):
            return f"Err({cast(Err[T, E], self).error!r})"
        return "Result(?)"


@dataclass(frozen=True, repr=False)
class Ok(Result[T, E]):
    """Successful result wrapping a value of type ``T``."""

    value: T


@dataclass(frozen=True, repr=False)
class Err(Result[T, E]):
    """Failed result wrapping an error payload of type ``E``."""

    error: E


def ok(value: T) -> Result[T, E]:
    """Construct :class:`Ok` with better type inference at call sites."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Construct :class:`Err` with better type inference at call sites."""
    return Err(error)


__all__ = ["Err", "Ok", "Result", "err", "ok"]
