"""Reversible text encoding applied to persisted payloads.

The encoding (URL-quote, then base64) is cosmetic: it keeps payloads ASCII
and opaque to casual inspection, it is not encryption. `decode` is the exact
inverse of `encode` for every string.
"""

from __future__ import annotations

import base64
import binascii
from urllib.parse import quote, unquote

from formsnap.core.result import Result, err, ok


def encode(text: str) -> str:
    quoted = quote(text, safe="")
    return base64.b64encode(quoted.encode("ascii")).decode("ascii")


def decode(blob: str) -> Result[str, str]:
    """Invert `encode`; malformed input is an ``Err`` rather than an exception."""
    try:
        quoted = base64.b64decode(blob.encode("ascii"), validate=True).decode("ascii")
        text = unquote(quoted, errors="strict")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        return err(f"payload is not valid encoded text: {exc}")
    return ok(text)


__all__ = ["decode", "encode"]
