"""Structural validation of a snapshot against a field configuration.

The validator is deliberately small: required-ness and a primitive type
check per configured field. Range checks and cross-field rules belong to the
form layer. Fields absent from the configuration are accepted as-is.

`validate_snapshot` never raises; malformed input yields a result whose
`errors` describe the problem.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from formsnap.core.contracts.analysis import (
    SnapshotValidationResult,
    ValidationCode,
    ValidationIssue,
)
from formsnap.core.contracts.snapshot import (
    FieldConfig,
    Snapshot,
    SnapshotMetadata,
    coerce_config,
)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a number for form purposes
    return isinstance(value, int | float) and not isinstance(value, bool)


_TYPE_CHECKS: dict[str, tuple[Callable[[Any], bool], str]] = {
    "string": (lambda v: isinstance(v, str), "a string"),
    "number": (_is_number, "a number"),
    "boolean": (lambda v: isinstance(v, bool), "a boolean"),
    "array": (lambda v: isinstance(v, list | tuple), "an array"),
}


def _split(snapshot: Any) -> tuple[Any, Any]:
    """Return ``(state, metadata)`` from a model or a raw payload.

    Anything else (``None``, a list, a string) has no state at all.
    """
    if isinstance(snapshot, Snapshot):
        return snapshot.state, snapshot.metadata
    if isinstance(snapshot, Mapping):
        return snapshot.get("state"), snapshot.get("metadata")
    return None, None


def validate_snapshot(
    snapshot: Snapshot | Mapping[str, Any],
    config: Mapping[str, FieldConfig | Mapping[str, Any]],
) -> SnapshotValidationResult:
    """Check `snapshot` against `config` and collect every issue.

    Parameters
    ----------
    snapshot:
        A `Snapshot` or a raw ``{"state": ..., "metadata": ...}`` mapping (for
        payloads that have not been turned into models yet).
    config:
        Field name -> `FieldConfig` (or plain dict with ``type``/``required``).

    Returns
    -------
    SnapshotValidationResult
        ``INVALID_STATE`` alone when the state is not a mapping; otherwise any
        mix of ``REQUIRED_FIELD``, ``INVALID_TYPE`` and ``INVALID_METADATA``.
    """
    state, metadata = _split(snapshot)

    if not isinstance(state, Mapping):
        issue = ValidationIssue(
            code=ValidationCode.INVALID_STATE,
            message="Invalid snapshot state structure",
        )
        return SnapshotValidationResult(is_valid=False, errors=[issue])

    try:
        field_configs = coerce_config(config)
    except (TypeError, ValueError) as exc:
        issue = ValidationIssue(
            code=ValidationCode.INVALID_STATE,
            message=f"Invalid field configuration: {exc}",
        )
        return SnapshotValidationResult(is_valid=False, errors=[issue])

    errors: list[ValidationIssue] = []
    for name, field_config in field_configs.items():
        value = state.get(name)

        if value is None:
            if field_config.required:
                errors.append(
                    ValidationIssue(
                        code=ValidationCode.REQUIRED_FIELD,
                        field=name,
                        message=f'Required field "{name}" is missing',
                    )
                )
            continue

        check = _TYPE_CHECKS.get(field_config.type or "")
        if check is not None and not check[0](value):
            errors.append(
                ValidationIssue(
                    code=ValidationCode.INVALID_TYPE,
                    field=name,
                    message=f'Field "{name}" must be {check[1]}',
                )
            )

    if metadata is not None and not isinstance(metadata, Mapping | SnapshotMetadata):
        errors.append(
            ValidationIssue(
                code=ValidationCode.INVALID_METADATA,
                message="Invalid metadata structure",
            )
        )

    return SnapshotValidationResult(is_valid=not errors, errors=errors)


__all__ = ["validate_snapshot"]
