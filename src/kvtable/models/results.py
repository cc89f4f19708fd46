# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Result shapes returned by the namespace façade."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GetWithMetadataResult(BaseModel):
    """Value and metadata of a single key.

    ``cache_status`` is always ``None``; there is no caching layer.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None
    metadata: Any = None
    cache_status: None = Field(default=None, serialization_alias="cacheStatus")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ListKey(BaseModel):
    """One key of a list page.

    ``expiration`` and ``metadata`` are only *set* when the row has them, so
    :meth:`to_dict` omits them otherwise.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    expiration: int | None = None
    metadata: Any = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ListResult(BaseModel):
    """A page of keys plus the continuation cursor, if any."""

    model_config = ConfigDict(frozen=True)

    keys: list[ListKey] = Field(default_factory=list)
    list_complete: bool
    cursor: str | None = None
    cache_status: None = Field(default=None, serialization_alias="cacheStatus")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "keys": [k.to_dict() for k in self.keys],
            "list_complete": self.list_complete,
        }
        if self.cursor is not None:
            out["cursor"] = self.cursor
        out["cacheStatus"] = None
        return out
