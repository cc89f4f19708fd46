# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Single-flight creation of the KV table and its expiry index.

The first operation on a namespace creates the table; every concurrent
caller awaits the same in-flight task instead of issuing its own DDL.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from kvtable.storage.backend import DatabaseBackend
from kvtable.storage.statements import StatementSet

logger = logging.getLogger(__name__)


class BootstrapState(StrEnum):
    NOT_STARTED = "not_started"
    BOOTSTRAPPING = "bootstrapping"
    READY = "ready"
    FAILED = "failed"


class SchemaBootstrapper:
    """Ensure the backing table exists, at most once per instance.

    Args:
        backend: Engine that runs the DDL.
        statements: Statement set whose :meth:`~StatementSet.schema` is run.
        enabled: When ``False``, :meth:`ensure` is a no-op and a missing
            table surfaces as the engine's own error on first use.
    """

    def __init__(
        self,
        backend: DatabaseBackend,
        statements: StatementSet,
        *,
        enabled: bool = True,
    ) -> None:
        self._backend = backend
        self._statements = statements
        self._enabled = enabled
        self._task: asyncio.Task[None] | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> BootstrapState:
        task = self._task
        if task is None:
            return BootstrapState.NOT_STARTED
        if not task.done():
            return BootstrapState.BOOTSTRAPPING
        if task.cancelled() or task.exception() is not None:
            return BootstrapState.FAILED
        return BootstrapState.READY

    async def ensure(self) -> None:
        """Create the schema if needed and wait for it to be ready.

        A failed bootstrap is not retried; later calls re-raise its error.
        """
        if not self._enabled:
            return
        # No await between the check and the assignment: the first caller
        # publishes the task before any other coroutine can run.
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
        # shield() keeps a cancelled caller from cancelling the shared task.
        await asyncio.shield(self._task)

    async def _run(self) -> None:
        table = self._statements.table
        logger.debug("Bootstrapping schema for table %s", table)
        try:
            await self._backend.batch([stmt.bind() for stmt in self._statements.schema()])
        except Exception:
            logger.exception("Schema bootstrap failed for table %s", table)
            raise
        logger.info("Schema ready for table %s", table)
