# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract database backend interface for pluggable storage engines.

Both the SQLite (aiosqlite) and PostgreSQL (asyncpg) backends implement
this interface so that the namespace façade can remain backend-agnostic.
The façade only needs four primitives: prepare-and-bind a statement,
execute one statement, fetch one row or all rows, and run a list of bound
statements as a single atomic batch.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class BoundStatement:
    """A SQL statement together with its positional parameters."""

    sql: str
    params: tuple[Any, ...] = ()
    returns_rows: bool = False


@dataclass(frozen=True, slots=True)
class Statement:
    """A prepared statement template written with ``?`` placeholders."""

    sql: str
    returns_rows: bool = False

    def bind(self, *params: Any) -> BoundStatement:
        return BoundStatement(self.sql, tuple(params), self.returns_rows)


@dataclass(slots=True)
class StatementResult:
    """Outcome of one statement inside a batch."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    changes: int = 0

    def first(self) -> dict[str, Any] | None:
        return self.rows[0] if self.rows else None


class DatabaseBackend(abc.ABC):
    """Abstract base class for async database backends.

    Concrete implementations wrap a connection (SQLite) or connection pool
    (PostgreSQL) and expose a uniform query interface.  Statement errors
    raised by the driver propagate unchanged.
    """

    # ------------------------------------------------------------------
    # Query execution
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def execute(self, query: str, params: tuple[Any, ...] | None = None) -> int:
        """Execute a single data-modifying statement and commit it.

        Args:
            query: SQL query string with ``?`` placeholders.
            params: Optional tuple of bind parameters.

        Returns:
            The number of rows changed by the statement.
        """

    @abc.abstractmethod
    async def fetch_one(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        """Execute a query and return the first row as a dict, or ``None``."""

    @abc.abstractmethod
    async def fetch_all(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        """Execute a query and return all rows as a list of dicts."""

    @abc.abstractmethod
    async def batch(self, statements: Sequence[BoundStatement]) -> list[StatementResult]:
        """Execute *statements* in order inside one transaction.

        Either every statement takes effect or none does.

        Returns:
            One :class:`StatementResult` per statement, in input order.
        """

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the underlying connection or pool."""

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    @abc.abstractmethod
    def backend_name(self) -> str:
        """Return ``'sqlite'`` or ``'postgres'``."""
