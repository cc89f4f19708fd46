# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from kvtable.namespace.kv import KVNamespace
from kvtable.storage.database import connect_sqlite
from kvtable.storage.sqlite_backend import SQLiteBackend

T0 = 1_700_000_000


class FakeClock:
    """Deterministic stand-in for :func:`time.time`."""

    def __init__(self, start: float = T0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def backend():
    """An in-memory SQLite backend, closed after the test."""
    conn = await connect_sqlite(":memory:")
    sqlite_backend = SQLiteBackend(conn)
    yield sqlite_backend
    await sqlite_backend.close()


@pytest.fixture
def kv(backend: SQLiteBackend, clock: FakeClock) -> KVNamespace:
    return KVNamespace(backend, clock=clock)


@pytest.fixture
def t0() -> int:
    """The fake clock's starting time."""
    return T0
