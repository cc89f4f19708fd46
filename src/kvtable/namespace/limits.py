# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Size limits of the hosted KV service.

Only checked when a namespace is created with ``enforce_limits=True``.
"""

from __future__ import annotations

from kvtable.core.exceptions import LimitExceededError

MIN_CACHE_TTL = 60  # seconds
MAX_LIST_KEYS = 1000
MAX_KEY_SIZE = 512  # bytes
MAX_VALUE_SIZE = 25 * 1024 * 1024
MAX_METADATA_SIZE = 1024  # bytes


def check_key(key: str) -> None:
    size = len(key.encode("utf-8"))
    if size > MAX_KEY_SIZE:
        raise LimitExceededError(
            f"KV key is {size} bytes, exceeding the limit of {MAX_KEY_SIZE} bytes"
        )


def check_value(value: bytes) -> None:
    if len(value) > MAX_VALUE_SIZE:
        raise LimitExceededError(
            f"KV value is {len(value)} bytes, exceeding the limit of {MAX_VALUE_SIZE} bytes"
        )


def check_metadata(metadata: bytes | None) -> None:
    if metadata is not None and len(metadata) > MAX_METADATA_SIZE:
        raise LimitExceededError(
            f"KV metadata is {len(metadata)} bytes, exceeding the limit of "
            f"{MAX_METADATA_SIZE} bytes"
        )


def clamp_list_limit(limit: int) -> int:
    return min(limit, MAX_LIST_KEYS)
