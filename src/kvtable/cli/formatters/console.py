# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console output for KV reads and list pages."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from rich.console import Console
from rich.table import Table

from kvtable.models.results import ListKey, ListResult

console = Console()


def _format_expiration(expiration: int | None) -> str:
    if expiration is None:
        return "-"
    ts = datetime.fromtimestamp(expiration, tz=UTC)
    return f"{expiration} ({ts.isoformat()})"


def _format_metadata(key: ListKey) -> str:
    if "metadata" not in key.model_fields_set:
        return "-"
    return json.dumps(key.metadata)


def format_list_result(result: ListResult, *, title: str = "Keys") -> None:
    """Print one list page as a table, followed by the continuation cursor."""
    table = Table(title=title)
    table.add_column("Name", style="bold")
    table.add_column("Expiration", style="dim")
    table.add_column("Metadata")

    for key in result.keys:
        table.add_row(key.name, _format_expiration(key.expiration), _format_metadata(key))

    console.print(table)
    if result.list_complete:
        console.print(f"[green]{len(result.keys)} keys, list complete[/green]")
    else:
        console.print(f"{len(result.keys)} keys, more available. Cursor: {result.cursor}")


def format_value(value: Any, metadata: Any = None, *, show_metadata: bool = False) -> None:
    """Print a value read from the namespace."""
    if isinstance(value, str):
        console.print(value, markup=False, highlight=False)
    else:
        console.print_json(json.dumps(value))
    if show_metadata:
        console.print("[dim]metadata:[/dim]", end=" ")
        console.print_json(json.dumps(metadata))
