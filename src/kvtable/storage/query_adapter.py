# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Query parameter adapter for cross-database compatibility.

Statement templates are written once with ``?`` placeholders.  SQLite
accepts them as-is; asyncpg needs ``$1, $2, …``.  :func:`adapt_query`
rewrites a template for the target dialect.
"""

from __future__ import annotations

import re
from functools import lru_cache

from kvtable.core.constants import Dialect

# A quoted literal ('...' with '' escapes, or "..." identifiers) or a bare ``?``.
_TOKEN = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|\?")


def adapt_query(query: str, dialect: str) -> str:
    """Rewrite ``?`` parameter placeholders for the target *dialect*.

    Args:
        query: SQL query with ``?`` positional placeholders.
        dialect: ``"sqlite"`` (no-op) or ``"postgres"`` (``$N``).

    Returns:
        The rewritten query string.

    Raises:
        ValueError: If *dialect* is not recognised.
    """
    if dialect == Dialect.SQLITE:
        return query

    if dialect == Dialect.POSTGRES:
        return _question_to_dollar(query)

    msg = f"Unknown SQL dialect: {dialect!r}. Expected 'sqlite' or 'postgres'."
    raise ValueError(msg)


@lru_cache(maxsize=256)
def _question_to_dollar(query: str) -> str:
    """Number each ``?`` outside quoted literals as ``$1``, ``$2``, …"""
    counter = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal counter
        token = match.group(0)
        if token != "?":
            return token
        counter += 1
        return f"${counter}"

    return _TOKEN.sub(_replace, query)
