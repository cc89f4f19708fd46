# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Opaque list cursors: base64 of the last key returned on a page."""

from __future__ import annotations

import base64
import binascii

from kvtable.core.exceptions import InvalidCursorError


def encode_cursor(key: str) -> str:
    return base64.b64encode(key.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> str:
    """Recover the key a cursor was built from.

    Raises:
        InvalidCursorError: If *cursor* is not base64 of a UTF-8 string.
    """
    try:
        raw = base64.b64decode(cursor, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, TypeError, ValueError) as exc:
        raise InvalidCursorError(f"Invalid list cursor {cursor!r}") from exc
