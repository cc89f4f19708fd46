# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SQLite implementation of the abstract :class:`DatabaseBackend`.

Wraps an :mod:`aiosqlite` connection and exposes the uniform query
interface used by the namespace façade.  A single connection is shared
by every caller, so statements are serialised with an :class:`asyncio.Lock`
to keep a batch transaction from interleaving with other coroutines.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import aiosqlite

from kvtable.storage.backend import BoundStatement, DatabaseBackend, StatementResult

logger = logging.getLogger(__name__)


def _row_to_dict(cursor: Any, row: Any) -> dict[str, Any]:
    columns = [d[0] for d in cursor.description]
    return dict(zip(columns, row, strict=False))


class SQLiteBackend(DatabaseBackend):
    """Async SQLite backend backed by an :class:`aiosqlite.Connection`."""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Query execution
    # ------------------------------------------------------------------

    async def _run(self, query: str, params: tuple[Any, ...] | None) -> Any:
        if params:
            return await self._conn.execute(query, params)
        return await self._conn.execute(query)

    async def execute(self, query: str, params: tuple[Any, ...] | None = None) -> int:
        async with self._lock:
            cursor = await self._run(query, params)
            changes = cursor.rowcount
            await cursor.close()
            if self._conn.in_transaction:
                await self._conn.commit()
        return max(changes, 0)

    async def fetch_one(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        async with self._lock:
            cursor = await self._run(query, params)
            row = await cursor.fetchone()
            result = None if row is None else _row_to_dict(cursor, row)
            await cursor.close()
        return result

    async def fetch_all(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        async with self._lock:
            cursor = await self._run(query, params)
            rows = await cursor.fetchall()
            result = [_row_to_dict(cursor, r) for r in rows]
            await cursor.close()
        return result

    async def batch(self, statements: Sequence[BoundStatement]) -> list[StatementResult]:
        results: list[StatementResult] = []
        async with self._lock:
            await self._conn.execute("BEGIN")
            try:
                for stmt in statements:
                    cursor = await self._run(stmt.sql, stmt.params)
                    result = StatementResult(changes=max(cursor.rowcount, 0))
                    if stmt.returns_rows:
                        rows = await cursor.fetchall()
                        result.rows = [_row_to_dict(cursor, r) for r in rows]
                    await cursor.close()
                    results.append(result)
            except BaseException:
                await self._conn.rollback()
                raise
            await self._conn.commit()
        logger.debug("Committed batch of %d statements", len(results))
        return results

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        await self._conn.close()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def backend_name(self) -> str:
        return "sqlite"

    @property
    def raw_connection(self) -> aiosqlite.Connection:
        """Return the underlying :class:`aiosqlite.Connection`."""
        return self._conn
