# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Annotated, Any, TypeVar

import typer

from kvtable.core.exceptions import ConfigurationError, ValidationError

app = typer.Typer(
    name="kvtable",
    help="KV namespace emulated on a relational table",
    no_args_is_help=True,
)

T = TypeVar("T")


class TextOrJson(StrEnum):
    TEXT = "text"
    JSON = "json"


@dataclass
class _Target:
    namespace: str | None = None
    table: str | None = None


@app.callback()
def main(
    ctx: typer.Context,
    namespace: Annotated[
        str | None, typer.Option("--namespace", "-n", help="Namespace to operate on")
    ] = None,
    table: Annotated[
        str | None, typer.Option("--table", "-t", help="Backing table name")
    ] = None,
) -> None:
    """Read and write a KV namespace stored in SQLite or PostgreSQL."""
    from kvtable.core.config import get_settings
    from kvtable.core.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    ctx.obj = _Target(namespace=namespace, table=table)


def _run(ctx: typer.Context, op: Callable[[Any], Awaitable[T]]) -> T:
    """Open the configured namespace, run *op* on it, and map errors to exit codes."""
    target: _Target = ctx.obj or _Target()

    async def _inner() -> T:
        from kvtable.storage.database import open_namespace

        async with open_namespace(namespace=target.namespace, table_name=target.table) as kv:
            return await op(kv)

    try:
        return asyncio.run(_inner())
    except (ConfigurationError, ValidationError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc


@app.command()
def init(ctx: typer.Context) -> None:
    """Create the backing table and index if they do not exist."""

    async def op(kv: Any) -> None:
        await kv.bootstrap()

    _run(ctx, op)
    typer.echo("Schema ready.")


@app.command()
def get(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to read")],
    read_type: Annotated[
        TextOrJson, typer.Option("--type", help="Decode the value as text or JSON")
    ] = TextOrJson.TEXT,
    with_metadata: Annotated[
        bool, typer.Option("--metadata", "-m", help="Also print the key's metadata")
    ] = False,
) -> None:
    """Print the value stored under KEY."""
    from kvtable.cli.formatters.console import format_value

    async def op(kv: Any) -> Any:
        return await kv.get_with_metadata(key, TextOrJson.TEXT.value)

    # A present key always reads as a string, so None means missing.
    result = _run(ctx, op)
    if result.value is None:
        typer.echo(f"Key not found: {key}", err=True)
        raise typer.Exit(1)

    value = result.value
    if read_type is TextOrJson.JSON:
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            typer.echo(f"Error: value of {key} is not valid JSON: {exc}", err=True)
            raise typer.Exit(2) from exc
    format_value(value, result.metadata, show_metadata=with_metadata)


@app.command()
def put(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to write")],
    value: Annotated[str, typer.Argument(help="Value to store (UTF-8 text)")],
    ttl: Annotated[
        int | None, typer.Option("--ttl", help="Expire after this many seconds")
    ] = None,
    expiration: Annotated[
        int | None, typer.Option("--expiration", help="Expire at this UNIX timestamp")
    ] = None,
    metadata: Annotated[
        str | None, typer.Option("--metadata", help="JSON metadata to attach")
    ] = None,
) -> None:
    """Store VALUE under KEY, replacing any previous value."""
    from kvtable.namespace.metadata import UNSET

    meta: Any = UNSET
    if metadata is not None:
        try:
            meta = json.loads(metadata)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"metadata is not valid JSON: {exc}") from exc

    async def op(kv: Any) -> None:
        await kv.put(key, value, expiration=expiration, expiration_ttl=ttl, metadata=meta)

    _run(ctx, op)
    typer.echo(f"Stored {key}.")


@app.command()
def delete(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to delete")],
) -> None:
    """Delete KEY.  Deleting a missing key succeeds."""

    async def op(kv: Any) -> None:
        await kv.delete(key)

    _run(ctx, op)
    typer.echo(f"Deleted {key}.")


@app.command(name="list")
def list_keys(
    ctx: typer.Context,
    prefix: Annotated[str, typer.Option("--prefix", "-p", help="Only keys starting with this")] = "",
    limit: Annotated[int, typer.Option("--limit", "-l", help="Page size")] = 1000,
    cursor: Annotated[
        str | None, typer.Option("--cursor", "-c", help="Cursor from a previous page")
    ] = None,
    fetch_all: Annotated[
        bool, typer.Option("--all", help="Follow cursors until the listing is complete")
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print pages as JSON")] = False,
) -> None:
    """List keys in byte-wise order."""
    from kvtable.cli.formatters.console import format_list_result

    async def op(kv: Any) -> list[Any]:
        pages = [await kv.list(prefix=prefix, limit=limit, cursor=cursor)]
        while fetch_all and not pages[-1].list_complete:
            pages.append(await kv.list(prefix=prefix, limit=limit, cursor=pages[-1].cursor))
        return pages

    pages = _run(ctx, op)
    for i, page in enumerate(pages, start=1):
        if as_json:
            typer.echo(json.dumps(page.to_dict()))
        else:
            format_list_result(page, title=f"Keys (page {i})" if len(pages) > 1 else "Keys")


@app.command()
def prune(ctx: typer.Context) -> None:
    """Delete expired keys and report how many were removed."""

    async def op(kv: Any) -> int:
        return await kv.prune_expired()

    removed = _run(ctx, op)
    typer.echo(f"Pruned {removed} expired keys.")
