# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""KV-contract façade over a relational table.

:class:`KVNamespace` exposes ``get``, ``get_with_metadata``, ``put``,
``delete``, ``list`` and ``prune_expired`` with the semantics of a hosted
key-value namespace, and translates each call into parameterised SQL run
through a :class:`~kvtable.storage.backend.DatabaseBackend`.

Every call follows the same sequence: validate arguments, make sure the
schema exists, bind and run statements, reshape rows, and finally sweep
expired rows if the prune policy says so.  Validation happens before any
statement is issued, so a rejected call has no side effect.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from kvtable.core.constants import (
    BATCH_READ_TYPES,
    DEFAULT_LIST_LIMIT,
    MAX_CODE_POINT,
    PruneTrigger,
    ReadType,
)
from kvtable.core.exceptions import (
    InvalidExpirationError,
    InvalidKeyError,
    UnsupportedReadTypeError,
    ValidationError,
)
from kvtable.models.options import NamespaceOptions
from kvtable.models.results import GetWithMetadataResult, ListKey, ListResult
from kvtable.namespace import limits
from kvtable.namespace.cursor import decode_cursor, encode_cursor
from kvtable.namespace.metadata import UNSET, decode_metadata, encode_metadata
from kvtable.namespace.prune import PrunePolicy
from kvtable.namespace.values import decode_value, encode_value
from kvtable.storage.backend import DatabaseBackend, Statement
from kvtable.storage.schema import BootstrapState, SchemaBootstrapper
from kvtable.storage.statements import StatementSet

logger = logging.getLogger(__name__)

ReadOptions = str | ReadType | Mapping[str, Any] | None

# Largest value of a signed 64-bit INTEGER / BIGINT column.
_MAX_EXPIRES_AT = 2**63 - 1


def _parse_read_options(
    options: ReadOptions, cache_ttl: int | None
) -> ReadType:
    """Accept ``"json"``, ``ReadType.JSON`` or ``{"type": "json", "cacheTtl": 60}``."""
    if isinstance(options, Mapping):
        raw_type = options.get("type")
        if cache_ttl is None:
            cache_ttl = options.get("cacheTtl", options.get("cache_ttl"))
    else:
        raw_type = options
    if cache_ttl is not None and (
        isinstance(cache_ttl, bool)
        or not isinstance(cache_ttl, int)
        or cache_ttl < limits.MIN_CACHE_TTL
    ):
        raise InvalidExpirationError(
            f"Invalid cache_ttl of {cache_ttl!r}. "
            f"Cache TTL must be at least {limits.MIN_CACHE_TTL}."
        )
    return ReadType.parse(raw_type if raw_type is not None else ReadType.TEXT)


class KVNamespace:
    """A KV namespace stored as rows of one relational table.

    Args:
        backend: Engine used for every statement.
        options: Validated :class:`NamespaceOptions`; keyword *overrides*
            (``namespace``, ``table_name``, ``auto_create``, ``prune_on``,
            ``enforce_limits``) are merged on top.
        clock: Returns the current UNIX time in seconds.  Floored to whole
            seconds for every expiry comparison.

    Raises:
        ConfigurationError: If the table name or any option is invalid.
    """

    def __init__(
        self,
        backend: DatabaseBackend,
        options: NamespaceOptions | None = None,
        *,
        clock: Callable[[], float] = time.time,
        **overrides: Any,
    ) -> None:
        self.options = NamespaceOptions.build(options, **overrides)
        self._backend = backend
        self._clock = clock
        self._statements = StatementSet.for_table(self.options.table_name, backend.backend_name)
        self._schema = SchemaBootstrapper(
            backend, self._statements, enabled=self.options.auto_create
        )
        self._prune_policy = PrunePolicy(self.options.prune_on)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def namespace(self) -> str:
        return self.options.namespace

    @property
    def statements(self) -> StatementSet:
        return self._statements

    @property
    def prune_policy(self) -> PrunePolicy:
        return self._prune_policy

    @property
    def schema_state(self) -> BootstrapState:
        return self._schema.state

    def __repr__(self) -> str:
        return (
            f"KVNamespace(namespace={self.namespace!r}, "
            f"table={self._statements.table!r}, backend={self._backend.backend_name!r})"
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(
        self,
        key: str | Sequence[str],
        type: ReadOptions = None,  # noqa: A002
        *,
        cache_ttl: int | None = None,
    ) -> Any:
        """Return the value of *key*, or ``None`` if it is absent or expired.

        With a list of keys, returns a ``dict`` keyed by the requested keys
        in request order; absent keys map to ``None``.  Only ``text`` and
        ``json`` are allowed for key lists.
        """
        read_type = _parse_read_options(type, cache_ttl)
        result = await self._read(key, read_type, with_metadata=False)
        await self._maybe_prune(PruneTrigger.GET)
        return result

    async def get_with_metadata(
        self,
        key: str | Sequence[str],
        type: ReadOptions = None,  # noqa: A002
        *,
        cache_ttl: int | None = None,
    ) -> Any:
        """Like :meth:`get`, but return value and metadata together.

        A single absent key yields ``GetWithMetadataResult(value=None,
        metadata=None)``; in a key list, absent keys map to ``None``.
        """
        read_type = _parse_read_options(type, cache_ttl)
        result = await self._read(key, read_type, with_metadata=True)
        await self._maybe_prune(PruneTrigger.GET_WITH_METADATA)
        return result

    async def _read(
        self,
        key: str | Sequence[str],
        read_type: ReadType,
        *,
        with_metadata: bool,
    ) -> Any:
        stmt = self._statements.get_with_metadata if with_metadata else self._statements.get

        if isinstance(key, (list, tuple)):
            if read_type not in BATCH_READ_TYPES:
                raise UnsupportedReadTypeError(
                    f'"{read_type}" is not a valid type. Use "json" or "text"'
                )
            keys = [self._check_key(k) for k in key]
            await self._schema.ensure()
            return await self._read_many(stmt, keys, read_type, with_metadata)

        self._check_key(key)
        await self._schema.ensure()
        row = await self._backend.fetch_one(stmt.sql, (self.namespace, key, self._now()))
        logger.debug("get %r in namespace %r: %s", key, self.namespace, "hit" if row else "miss")
        if row is None:
            return GetWithMetadataResult() if with_metadata else None
        return self._shape(row, read_type, with_metadata)

    async def _read_many(
        self,
        stmt: Statement,
        keys: list[str],
        read_type: ReadType,
        with_metadata: bool,
    ) -> dict[str, Any]:
        if not keys:
            return {}
        now = self._now()
        results = await self._backend.batch([stmt.bind(self.namespace, k, now) for k in keys])
        out: dict[str, Any] = {}
        for k, res in zip(keys, results, strict=True):
            row = res.first()
            out[k] = None if row is None else self._shape(row, read_type, with_metadata)
        logger.debug("get %d keys in namespace %r", len(keys), self.namespace)
        return out

    @staticmethod
    def _shape(row: Mapping[str, Any], read_type: ReadType, with_metadata: bool) -> Any:
        value = decode_value(row["value"], read_type)
        if not with_metadata:
            return value
        return GetWithMetadataResult(value=value, metadata=decode_metadata(row["metadata"]))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def put(
        self,
        key: str,
        value: Any,
        *,
        expiration: float | None = None,
        expiration_ttl: int | None = None,
        metadata: Any = UNSET,
    ) -> None:
        """Insert or fully replace *key*.

        Args:
            key: Key to write.
            value: ``str``, bytes-like, binary file-like, or async byte stream.
            expiration: Absolute expiry as UNIX seconds; must be in the future.
            expiration_ttl: Seconds from now until expiry; a positive ``int``.
                Takes precedence over *expiration*.
            metadata: Any JSON-serializable value.  Omit to store none.

        Raises:
            InvalidKeyError: If *key* is not a string.
            UnsupportedValueError: If *value* has an unsupported type.
            InvalidExpirationError: If the expiry is not in the future.
            MetadataSerializationError: If *metadata* is not JSON-serializable.
            LimitExceededError: If limits are enforced and a payload is too big.
        """
        self._check_key(key)
        data = await encode_value(value)
        now = self._now()
        ttl_seconds = self._resolve_ttl(now, expiration, expiration_ttl)
        meta = encode_metadata(metadata)
        if self.options.enforce_limits:
            limits.check_value(data)
            limits.check_metadata(meta)

        await self._schema.ensure()
        await self._backend.execute(
            self._statements.put.sql,
            (self.namespace, key, data, ttl_seconds, now, meta),
        )
        logger.debug(
            "put %r in namespace %r (%d bytes, ttl=%s)", key, self.namespace, len(data), ttl_seconds
        )
        await self._maybe_prune(PruneTrigger.PUT)

    @staticmethod
    def _resolve_ttl(now: int, expiration: Any, expiration_ttl: Any) -> int | None:
        """Turn the expiry options into seconds relative to *now*.

        A fractional *expiration* is rounded up, so the key stays readable
        through the second the caller named.
        """
        if expiration_ttl is not None:
            if (
                isinstance(expiration_ttl, bool)
                or not isinstance(expiration_ttl, int)
                or expiration_ttl <= 0
            ):
                raise InvalidExpirationError(
                    f"Invalid expiration_ttl of {expiration_ttl!r}. "
                    "Please specify integer greater than 0."
                )
            if now + expiration_ttl > _MAX_EXPIRES_AT:
                raise InvalidExpirationError(
                    f"Invalid expiration_ttl of {expiration_ttl!r}. "
                    "Expiration is too far in the future."
                )
            return expiration_ttl
        if expiration is not None:
            if (
                isinstance(expiration, bool)
                or not isinstance(expiration, (int, float))
                or not math.isfinite(expiration)
                or expiration <= now
            ):
                raise InvalidExpirationError(
                    f"Invalid expiration of {expiration!r}. Please specify integer "
                    "greater than the current number of seconds since the UNIX epoch."
                )
            expires_at = math.ceil(expiration)
            if expires_at > _MAX_EXPIRES_AT:
                raise InvalidExpirationError(
                    f"Invalid expiration of {expiration!r}. "
                    "Expiration is too far in the future."
                )
            return expires_at - now
        return None

    async def delete(self, key: str) -> None:
        """Remove *key*.  Deleting an absent key is not an error."""
        self._check_key(key)
        await self._schema.ensure()
        removed = await self._backend.execute(
            self._statements.delete.sql, (self.namespace, key)
        )
        logger.debug("delete %r in namespace %r (%d rows)", key, self.namespace, removed)
        await self._maybe_prune(PruneTrigger.DELETE)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        prefix: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> ListResult:
        """Return one page of live keys in byte-wise order.

        Options may be given as keywords or as a mapping with ``prefix``,
        ``limit`` and ``cursor`` entries.  ``limit`` defaults to 1000 and is
        never less than 1.  When more keys remain, the result carries a
        cursor to pass back with the same ``prefix`` and ``limit``.

        Raises:
            InvalidCursorError: If *cursor* cannot be decoded.
        """
        if options:
            prefix = prefix if prefix is not None else options.get("prefix")
            limit = limit if limit is not None else options.get("limit")
            cursor = cursor if cursor is not None else options.get("cursor")

        prefix = prefix or ""
        if not isinstance(prefix, str):
            raise ValidationError(f"list prefix must be a string, got {type(prefix).__name__}")
        page_size = self._page_size(limit)
        start_after = decode_cursor(cursor) if cursor else ""

        await self._schema.ensure()
        rows = await self._backend.fetch_all(
            self._statements.range_list.sql,
            (
                self.namespace,
                self._now(),
                prefix,
                prefix + MAX_CODE_POINT,
                start_after,
                page_size + 1,
            ),
        )

        has_more = len(rows) > page_size
        page = rows[:page_size]
        keys = [self._list_key(r) for r in page]
        if has_more:
            result = ListResult(
                keys=keys, list_complete=False, cursor=encode_cursor(page[-1]["key"])
            )
        else:
            result = ListResult(keys=keys, list_complete=True)

        logger.debug(
            "list prefix=%r in namespace %r: %d keys, complete=%s",
            prefix,
            self.namespace,
            len(keys),
            result.list_complete,
        )
        await self._maybe_prune(PruneTrigger.LIST)
        return result

    def _page_size(self, limit: Any) -> int:
        if limit is None:
            size = DEFAULT_LIST_LIMIT
        else:
            try:
                size = int(limit)
            except (TypeError, ValueError):
                raise ValidationError(f"list limit must be a number, got {limit!r}") from None
        size = max(1, size)
        if self.options.enforce_limits:
            size = limits.clamp_list_limit(size)
        return size

    @staticmethod
    def _list_key(row: Mapping[str, Any]) -> ListKey:
        fields: dict[str, Any] = {"name": row["key"]}
        if row["expiration"] is not None:
            fields["expiration"] = int(row["expiration"])
        if row["metadata"] is not None:
            fields["metadata"] = decode_metadata(row["metadata"])
        return ListKey(**fields)

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------

    async def prune_expired(self) -> int:
        """Physically delete expired rows of this namespace.

        Returns:
            The number of rows removed.
        """
        await self._schema.ensure()
        removed = await self._backend.execute(
            self._statements.prune_expired.sql, (self.namespace, self._now())
        )
        if removed:
            logger.info("Pruned %d expired keys from namespace %r", removed, self.namespace)
        return removed

    async def bootstrap(self) -> None:
        """Create the table and index now instead of on first use."""
        await self._schema.ensure()

    async def _maybe_prune(self, trigger: PruneTrigger) -> None:
        if self._prune_policy.should_prune(trigger):
            await self.prune_expired()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _now(self) -> int:
        return math.floor(self._clock())

    def _check_key(self, key: Any) -> str:
        if not isinstance(key, str):
            raise InvalidKeyError(f"KV keys must be strings, got {type(key).__name__}")
        try:
            key.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidKeyError(f"KV key {key!r} is not valid UTF-8 text") from None
        if self.options.enforce_limits:
            limits.check_key(key)
        return key
