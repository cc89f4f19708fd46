# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Per-namespace configuration model."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from kvtable.core.constants import DEFAULT_PRUNE_TRIGGERS, DEFAULT_TABLE_NAME, PruneTrigger
from kvtable.core.exceptions import ConfigurationError
from kvtable.storage.statements import sanitize_table_name


class NamespaceOptions(BaseModel):
    """Final, validated configuration of a :class:`~kvtable.namespace.kv.KVNamespace`.

    Attributes:
        namespace: Logical partition; keys are unique within a namespace.
        table_name: Backing table.  Must match ``[A-Za-z0-9_]+``.
        auto_create: Create the table and index on first use.
        prune_on: Operations after which expired rows are swept.
        enforce_limits: Apply the KV key/value/metadata size limits.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str = ""
    table_name: str = DEFAULT_TABLE_NAME
    auto_create: bool = True
    prune_on: frozenset[PruneTrigger] = Field(default=DEFAULT_PRUNE_TRIGGERS)
    enforce_limits: bool = False

    @field_validator("table_name")
    @classmethod
    def _check_table_name(cls, v: str) -> str:
        return sanitize_table_name(v)

    @field_validator("prune_on", mode="before")
    @classmethod
    def _parse_prune_on(cls, v: object) -> frozenset[PruneTrigger]:
        if isinstance(v, str):
            v = [t.strip() for t in v.split(",") if t.strip()]
        if not isinstance(v, Iterable):
            raise ConfigurationError(f"prune_on must be a collection of triggers, got {v!r}")
        return frozenset(PruneTrigger.parse(t) for t in v)

    @classmethod
    def build(cls, options: NamespaceOptions | None = None, **overrides: Any) -> NamespaceOptions:
        """Merge *overrides* onto *options* (or the defaults) and validate.

        Raises:
            ConfigurationError: If any option is invalid.
        """
        data = options.model_dump() if options is not None else {}
        data.update(overrides)
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid namespace options: {exc}") from exc
