# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Database connection management with pluggable backend support.

Supports both SQLite (aiosqlite, default) and PostgreSQL (asyncpg).
The active backend is controlled by the ``KVTABLE_DB_BACKEND`` env var.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite

from kvtable.core.constants import Dialect
from kvtable.core.exceptions import BackingStoreError, ConfigurationError
from kvtable.storage.backend import DatabaseBackend

if TYPE_CHECKING:
    from kvtable.core.config import Settings
    from kvtable.namespace.kv import KVNamespace

_backend: DatabaseBackend | None = None


async def connect_sqlite(db_path: Path | str = "kvtable.db") -> aiosqlite.Connection:
    """Open an aiosqlite connection in autocommit mode.

    File databases are switched to WAL mode for concurrent readers.
    """
    try:
        conn = await aiosqlite.connect(str(db_path), isolation_level=None)
        conn.row_factory = aiosqlite.Row
        if str(db_path) != ":memory:":
            await conn.execute("PRAGMA journal_mode=WAL")
        return conn
    except Exception as exc:
        msg = f"Failed to open SQLite database at {db_path}: {exc}"
        raise BackingStoreError(msg) from exc


async def create_backend(
    *,
    backend: str | None = None,
    db_path: Path | str = "kvtable.db",
    postgres_url: str = "",
    postgres_pool_min: int = 1,
    postgres_pool_max: int = 10,
) -> DatabaseBackend:
    """Open a new :class:`DatabaseBackend` without caching it.

    Args:
        backend: ``"sqlite"`` or ``"postgres"``.  Falls back to the
            ``KVTABLE_DB_BACKEND`` env var (default ``"sqlite"``).
        db_path: Path for the SQLite database file.
        postgres_url: PostgreSQL DSN (``postgresql://…``).
        postgres_pool_min: Minimum pool size for PostgreSQL.
        postgres_pool_max: Maximum pool size for PostgreSQL.
    """
    chosen = (backend or os.environ.get("KVTABLE_DB_BACKEND", "sqlite")).lower()

    if chosen == Dialect.SQLITE:
        from kvtable.storage.sqlite_backend import SQLiteBackend

        conn = await connect_sqlite(db_path)
        return SQLiteBackend(conn)

    if chosen == Dialect.POSTGRES:
        url = postgres_url or os.environ.get("KVTABLE_POSTGRES_URL", "")
        if not url:
            msg = (
                "PostgreSQL backend selected but no connection URL provided. "
                "Set KVTABLE_POSTGRES_URL or pass postgres_url."
            )
            raise ConfigurationError(msg)

        from kvtable.storage.postgres import PostgresDatabase

        return await PostgresDatabase.create(
            url, min_size=postgres_pool_min, max_size=postgres_pool_max
        )

    msg = f"Unknown database backend: {chosen!r}. Expected 'sqlite' or 'postgres'."
    raise ConfigurationError(msg)


async def init_backend(**kwargs: object) -> DatabaseBackend:
    """Initialise and return the process-wide :class:`DatabaseBackend`.

    Accepts the same keyword arguments as :func:`create_backend`.  Later
    calls return the already-open backend.
    """
    global _backend

    if _backend is not None:
        return _backend

    _backend = await create_backend(**kwargs)  # type: ignore[arg-type]
    return _backend


async def get_backend() -> DatabaseBackend:
    """Get the active :class:`DatabaseBackend`.

    Raises :class:`BackingStoreError` if no backend has been initialised.
    """
    if _backend is None:
        raise BackingStoreError("Database backend not initialized. Call init_backend() first.")
    return _backend


async def close_backend() -> None:
    """Close the process-wide backend, if any."""
    global _backend

    if _backend is not None:
        await _backend.close()
        _backend = None


@asynccontextmanager
async def open_namespace(
    settings: Settings | None = None,
    **overrides: object,
) -> AsyncIterator[KVNamespace]:
    """Open a backend from *settings* and yield a :class:`KVNamespace` on it.

    Keyword *overrides* are applied on top of the namespace options derived
    from settings.  The backend is closed when the block exits.
    """
    from kvtable.core.config import get_settings
    from kvtable.namespace.kv import KVNamespace

    settings = settings or get_settings()
    options = settings.namespace_options(**overrides)
    backend = await create_backend(
        backend=settings.db_backend,
        db_path=settings.db_path,
        postgres_url=settings.postgres_url,
        postgres_pool_min=settings.postgres_pool_min,
        postgres_pool_max=settings.postgres_pool_max,
    )
    try:
        yield KVNamespace(backend, options)
    finally:
        await backend.close()
