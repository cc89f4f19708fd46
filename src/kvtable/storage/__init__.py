# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage layer -- database backends, statement templates, and schema bootstrap."""

from kvtable.storage.backend import BoundStatement, DatabaseBackend, Statement, StatementResult
from kvtable.storage.database import close_backend, get_backend, init_backend
from kvtable.storage.query_adapter import adapt_query
from kvtable.storage.schema import BootstrapState, SchemaBootstrapper
from kvtable.storage.statements import StatementSet, sanitize_table_name

__all__ = [
    "BootstrapState",
    "BoundStatement",
    "DatabaseBackend",
    "SchemaBootstrapper",
    "Statement",
    "StatementResult",
    "StatementSet",
    "adapt_query",
    "close_backend",
    "get_backend",
    "init_backend",
    "sanitize_table_name",
]
