# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""JSON encoding of the metadata stored alongside each key."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Final

from pydantic import BaseModel

from kvtable.core.exceptions import MetadataSerializationError


class _Unset:
    """Marker for "no metadata supplied" (distinct from ``None``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


def _default(obj: Any) -> Any:
    # Dates serialise the way a JSON host would stringify them.
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def encode_metadata(metadata: Any = UNSET) -> bytes | None:
    """Serialise *metadata* for storage; :data:`UNSET` stores ``NULL``.

    Raises:
        MetadataSerializationError: If *metadata* has no JSON representation.
    """
    if metadata is UNSET:
        return None
    try:
        text = json.dumps(
            metadata,
            default=_default,
            allow_nan=False,
            ensure_ascii=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise MetadataSerializationError(
            f"Metadata could not be serialized to JSON: {exc}"
        ) from exc
    return text.encode("utf-8")


def decode_metadata(data: bytes | None) -> Any:
    """Inverse of :func:`encode_metadata`; ``NULL`` decodes to ``None``."""
    if data is None:
        return None
    return json.loads(bytes(data).decode("utf-8"))
