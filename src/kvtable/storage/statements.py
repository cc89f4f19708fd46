# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Parameterised SQL templates for one KV table.

Every template is written with ``?`` placeholders and scoped by
``namespace``.  Key ordering is pinned to byte-wise collation in both
dialects (``COLLATE BINARY`` in SQLite, ``COLLATE "C"`` in PostgreSQL) so
range scans never depend on the server locale.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from kvtable.core.constants import Dialect
from kvtable.core.exceptions import ConfigurationError
from kvtable.storage.backend import Statement

_TABLE_NAME = re.compile(r"[A-Za-z0-9_]+")


def sanitize_table_name(name: str) -> str:
    """Validate that *name* is safe to interpolate into SQL as an identifier.

    Only ``A-Z``, ``a-z``, ``0-9`` and ``_`` are allowed, so the name never
    needs quoting or escaping.

    Raises:
        ConfigurationError: If *name* contains anything else.
    """
    if not isinstance(name, str) or not _TABLE_NAME.fullmatch(name):
        msg = (
            f"Invalid table name {name!r}. "
            "Allowed characters: A-Z, a-z, 0-9, and _. "
            "No spaces, punctuation, unicode, or special symbols are permitted."
        )
        raise ConfigurationError(msg)
    return name


# Column types and collation per dialect.
_DIALECT_TYPES: dict[Dialect, dict[str, str]] = {
    Dialect.SQLITE: {
        "text": "TEXT COLLATE BINARY",
        "blob": "BLOB",
        "int": "INTEGER",
        "collate": "COLLATE BINARY",
    },
    Dialect.POSTGRES: {
        "text": 'TEXT COLLATE "C"',
        "blob": "BYTEA",
        "int": "BIGINT",
        "collate": 'COLLATE "C"',
    },
}

_LIVE = "(expires_at IS NULL OR expires_at > ?)"


@dataclass(frozen=True, slots=True)
class StatementSet:
    """The fixed statements used by one namespace over one table."""

    table: str
    dialect: Dialect
    get: Statement
    get_with_metadata: Statement
    range_list: Statement
    put: Statement
    delete: Statement
    prune_expired: Statement
    create_table: Statement
    create_index: Statement

    @classmethod
    def for_table(cls, table: str, dialect: Dialect | str = Dialect.SQLITE) -> StatementSet:
        t = sanitize_table_name(table)
        try:
            d = Dialect(dialect)
        except ValueError:
            raise ConfigurationError(f"Unsupported SQL dialect: {dialect!r}") from None
        types = _DIALECT_TYPES[d]

        return cls(
            table=t,
            dialect=d,
            # params: namespace, key, now
            get=Statement(
                f"SELECT value FROM {t} WHERE namespace = ? AND key = ? AND {_LIVE}",
                returns_rows=True,
            ),
            get_with_metadata=Statement(
                f"SELECT value, metadata FROM {t} "
                f"WHERE namespace = ? AND key = ? AND {_LIVE}",
                returns_rows=True,
            ),
            # params: namespace, now, lower, upper, start_after, limit
            range_list=Statement(
                f"SELECT key, expires_at AS expiration, metadata FROM {t} "
                f"WHERE namespace = ? AND {_LIVE} "
                "AND key >= ? AND key < ? AND key > ? "
                f"ORDER BY key {types['collate']} LIMIT ?",
                returns_rows=True,
            ),
            # params: namespace, key, value, ttl_seconds, created_at, metadata
            put=Statement(
                f"INSERT INTO {t} (namespace, key, value, ttl_seconds, created_at, metadata) "
                "VALUES (?, ?, ?, ?, ?, ?) "
                "ON CONFLICT (namespace, key) DO UPDATE SET "
                "value = excluded.value, "
                "ttl_seconds = excluded.ttl_seconds, "
                "created_at = excluded.created_at, "
                "metadata = excluded.metadata"
            ),
            # params: namespace, key
            delete=Statement(f"DELETE FROM {t} WHERE namespace = ? AND key = ?"),
            # params: namespace, now
            prune_expired=Statement(
                f"DELETE FROM {t} "
                "WHERE namespace = ? AND expires_at IS NOT NULL AND expires_at <= ?"
            ),
            # expires_at is NULL whenever ttl_seconds is NULL.
            create_table=Statement(
                f"CREATE TABLE IF NOT EXISTS {t} (\n"
                f"    namespace   {types['text']} NOT NULL,\n"
                f"    key         {types['text']} NOT NULL,\n"
                f"    value       {types['blob']} NOT NULL,\n"
                f"    ttl_seconds {types['int']},\n"
                f"    created_at  {types['int']} NOT NULL,\n"
                f"    expires_at  {types['int']} GENERATED ALWAYS AS "
                "(created_at + ttl_seconds) STORED,\n"
                f"    metadata    {types['blob']},\n"
                "    PRIMARY KEY (namespace, key)\n"
                ")"
            ),
            create_index=Statement(
                f"CREATE INDEX IF NOT EXISTS {t}_expires_idx "
                f"ON {t} (namespace, expires_at)"
            ),
        )

    def schema(self) -> list[Statement]:
        """Return the DDL statements in execution order."""
        return [self.create_table, self.create_index]
