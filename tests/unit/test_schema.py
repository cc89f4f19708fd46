# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for single-flight schema bootstrap."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from kvtable.storage.backend import DatabaseBackend
from kvtable.storage.schema import BootstrapState, SchemaBootstrapper
from kvtable.storage.statements import StatementSet


def _mock_backend() -> AsyncMock:
    backend = AsyncMock(spec=DatabaseBackend)
    backend.backend_name = "sqlite"
    return backend


class TestSchemaBootstrapper:
    async def test_runs_schema_in_one_batch(self) -> None:
        backend = _mock_backend()
        stmts = StatementSet.for_table("kv")
        boot = SchemaBootstrapper(backend, stmts)

        await boot.ensure()

        backend.batch.assert_awaited_once()
        bound = backend.batch.await_args.args[0]
        assert [b.sql for b in bound] == [stmts.create_table.sql, stmts.create_index.sql]
        assert boot.state is BootstrapState.READY

    async def test_initial_state(self) -> None:
        boot = SchemaBootstrapper(_mock_backend(), StatementSet.for_table("kv"))
        assert boot.state is BootstrapState.NOT_STARTED

    async def test_concurrent_callers_share_one_bootstrap(self) -> None:
        backend = _mock_backend()
        release = asyncio.Event()

        async def slow_batch(statements):
            await release.wait()
            return []

        backend.batch.side_effect = slow_batch
        boot = SchemaBootstrapper(backend, StatementSet.for_table("kv"))

        waiters = [asyncio.create_task(boot.ensure()) for _ in range(5)]
        await asyncio.sleep(0)
        assert boot.state is BootstrapState.BOOTSTRAPPING
        release.set()
        await asyncio.gather(*waiters)

        assert backend.batch.await_count == 1
        assert boot.state is BootstrapState.READY

    async def test_ensure_after_ready_is_noop(self) -> None:
        backend = _mock_backend()
        boot = SchemaBootstrapper(backend, StatementSet.for_table("kv"))
        await boot.ensure()
        await boot.ensure()
        await boot.ensure()
        assert backend.batch.await_count == 1

    async def test_disabled_never_issues_ddl(self) -> None:
        backend = _mock_backend()
        boot = SchemaBootstrapper(backend, StatementSet.for_table("kv"), enabled=False)
        await boot.ensure()
        backend.batch.assert_not_awaited()
        assert not boot.enabled
        assert boot.state is BootstrapState.NOT_STARTED

    async def test_failure_is_sticky(self) -> None:
        backend = _mock_backend()
        backend.batch.side_effect = RuntimeError("disk full")
        boot = SchemaBootstrapper(backend, StatementSet.for_table("kv"))

        with pytest.raises(RuntimeError, match="disk full"):
            await boot.ensure()
        with pytest.raises(RuntimeError, match="disk full"):
            await boot.ensure()

        assert backend.batch.await_count == 1
        assert boot.state is BootstrapState.FAILED

    async def test_cancelled_caller_does_not_cancel_bootstrap(self) -> None:
        backend = _mock_backend()
        release = asyncio.Event()

        async def slow_batch(statements):
            await release.wait()
            return []

        backend.batch.side_effect = slow_batch
        boot = SchemaBootstrapper(backend, StatementSet.for_table("kv"))

        first = asyncio.create_task(boot.ensure())
        await asyncio.sleep(0)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        release.set()
        await boot.ensure()
        assert backend.batch.await_count == 1
        assert boot.state is BootstrapState.READY


class TestSchemaOnSQLite:
    async def test_creates_table_and_index(self, backend) -> None:
        boot = SchemaBootstrapper(backend, StatementSet.for_table("kv_entries"))
        await boot.ensure()

        rows = await backend.fetch_all(
            "SELECT type, name FROM sqlite_master WHERE tbl_name = ? ORDER BY type",
            ("kv_entries",),
        )
        found = {(r["type"], r["name"]) for r in rows}
        assert ("table", "kv_entries") in found
        assert ("index", "kv_entries_expires_idx") in found

    async def test_idempotent_across_instances(self, backend) -> None:
        stmts = StatementSet.for_table("kv_entries")
        await SchemaBootstrapper(backend, stmts).ensure()
        await SchemaBootstrapper(backend, stmts).ensure()
        row = await backend.fetch_one(
            "SELECT COUNT(*) AS n FROM sqlite_master WHERE type = 'table' AND name = ?",
            ("kv_entries",),
        )
        assert row["n"] == 1
