# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations and defaults shared across the adapter."""

from __future__ import annotations

from enum import StrEnum

from kvtable.core.exceptions import ConfigurationError, UnsupportedReadTypeError


class ReadType(StrEnum):
    TEXT = "text"
    JSON = "json"
    ARRAY_BUFFER = "arrayBuffer"
    STREAM = "stream"

    @classmethod
    def parse(cls, value: str | ReadType) -> ReadType:
        try:
            return cls(value)
        except ValueError:
            msg = (
                f"Unknown response type {value!r}. Possible types are "
                '"text", "json", "arrayBuffer", and "stream".'
            )
            raise UnsupportedReadTypeError(msg) from None


# Read types allowed when several keys are fetched in one batch.
BATCH_READ_TYPES = frozenset({ReadType.TEXT, ReadType.JSON})


class PruneTrigger(StrEnum):
    PUT = "put"
    DELETE = "delete"
    GET = "get"
    GET_WITH_METADATA = "getWithMetadata"
    LIST = "list"

    @classmethod
    def parse(cls, value: str | PruneTrigger) -> PruneTrigger:
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            msg = f"Unknown prune trigger {value!r}. Expected one of: {allowed}."
            raise ConfigurationError(msg) from None


class Dialect(StrEnum):
    SQLITE = "sqlite"
    POSTGRES = "postgres"


DEFAULT_PRUNE_TRIGGERS = frozenset({PruneTrigger.PUT, PruneTrigger.DELETE})
DEFAULT_TABLE_NAME = "kv_entries"
DEFAULT_LIST_LIMIT = 1000

# Appended to a prefix to form the exclusive upper bound of a range scan.
MAX_CODE_POINT = "\U0010ffff"
