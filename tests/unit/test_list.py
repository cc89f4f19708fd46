# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for prefix listing and cursor pagination."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock

import pytest

from kvtable.core.exceptions import InvalidCursorError, ValidationError
from kvtable.models.results import ListResult
from kvtable.namespace.kv import KVNamespace
from kvtable.storage.backend import DatabaseBackend


async def _fill(kv, count: int = 10) -> list[str]:
    keys = [f"KEY_{i}" for i in range(count)]
    for key in keys:
        await kv.put(key, f"value {key}")
    return keys


def _names(page: ListResult) -> list[str]:
    return [k.name for k in page.keys]


class TestList:
    async def test_empty(self, kv) -> None:
        page = await kv.list()
        assert page.keys == []
        assert page.list_complete is True
        assert page.cursor is None
        assert page.to_dict() == {"keys": [], "list_complete": True, "cacheStatus": None}

    async def test_all_keys(self, kv) -> None:
        keys = await _fill(kv)
        page = await kv.list()
        assert _names(page) == keys
        assert page.list_complete is True

    async def test_byte_wise_order(self, kv) -> None:
        for key in ["é", "a", "~", "Z", "B", "ab", "aB"]:
            await kv.put(key, "v")
        page = await kv.list()
        assert _names(page) == ["B", "Z", "a", "aB", "ab", "~", "é"]

    async def test_prefix(self, kv) -> None:
        await _fill(kv, 12)
        await kv.put("OTHER", "v")
        page = await kv.list(prefix="KEY_1")
        assert _names(page) == ["KEY_1", "KEY_10", "KEY_11"]

    async def test_prefix_with_no_matches(self, kv) -> None:
        await _fill(kv)
        page = await kv.list(prefix="nope")
        assert page.keys == []
        assert page.list_complete is True

    async def test_prefix_with_like_wildcards_is_literal(self, kv) -> None:
        await kv.put("a%b", "1")
        await kv.put("a_b", "2")
        await kv.put("axb", "3")
        assert _names(await kv.list(prefix="a%")) == ["a%b"]
        assert _names(await kv.list(prefix="a_")) == ["a_b"]

    async def test_expiration_and_metadata(self, kv, t0) -> None:
        await kv.put("plain", "v")
        await kv.put("rich", "v", expiration_ttl=60, metadata={"tag": "x"})
        page = await kv.list()
        assert [k.to_dict() for k in page.keys] == [
            {"name": "plain"},
            {"name": "rich", "expiration": t0 + 60, "metadata": {"tag": "x"}},
        ]

    async def test_explicit_null_metadata_is_listed(self, kv) -> None:
        await kv.put("k", "v", metadata=None)
        page = await kv.list()
        assert page.keys[0].to_dict() == {"name": "k", "metadata": None}

    async def test_expired_keys_hidden(self, kv, clock) -> None:
        await kv.put("short", "v", expiration_ttl=1)
        await kv.put("long", "v", expiration_ttl=100)
        clock.advance(2)
        assert _names(await kv.list()) == ["long"]

    async def test_options_mapping(self, kv) -> None:
        await _fill(kv)
        page = await kv.list({"prefix": "KEY_", "limit": 2})
        assert _names(page) == ["KEY_0", "KEY_1"]
        assert page.list_complete is False


class TestPagination:
    async def test_pages_of_three(self, kv) -> None:
        await _fill(kv, 10)

        pages = []
        cursor = None
        while True:
            page = await kv.list(prefix="KEY_", limit=3, cursor=cursor)
            pages.append(page)
            if page.list_complete:
                break
            cursor = page.cursor

        assert [_names(p) for p in pages] == [
            ["KEY_0", "KEY_1", "KEY_2"],
            ["KEY_3", "KEY_4", "KEY_5"],
            ["KEY_6", "KEY_7", "KEY_8"],
            ["KEY_9"],
        ]
        assert [p.list_complete for p in pages] == [False, False, False, True]
        assert pages[0].cursor == base64.b64encode(b"KEY_2").decode()
        assert pages[-1].cursor is None

    async def test_exact_page_is_complete(self, kv) -> None:
        await _fill(kv, 3)
        page = await kv.list(limit=3)
        assert len(page.keys) == 3
        assert page.list_complete is True
        assert "cursor" not in page.to_dict()

    async def test_cursor_in_dict(self, kv) -> None:
        await _fill(kv, 3)
        page = await kv.list(limit=2)
        assert page.to_dict()["cursor"] == page.cursor

    async def test_zero_limit_clamped_to_one(self, kv) -> None:
        await _fill(kv, 3)
        page = await kv.list(limit=0)
        assert _names(page) == ["KEY_0"]
        assert page.list_complete is False

    async def test_negative_limit_clamped_to_one(self, kv) -> None:
        await _fill(kv, 2)
        assert len((await kv.list(limit=-5)).keys) == 1

    async def test_invalid_limit(self, kv) -> None:
        with pytest.raises(ValidationError, match="limit"):
            await kv.list(limit="many")

    async def test_keys_written_between_pages(self, kv) -> None:
        await kv.put("b", "v")
        await kv.put("d", "v")
        first = await kv.list(limit=1)
        await kv.put("a", "v")
        await kv.put("c", "v")
        second = await kv.list(limit=10, cursor=first.cursor)
        assert _names(first) == ["b"]
        assert _names(second) == ["c", "d"]

    async def test_malformed_cursor(self, kv) -> None:
        with pytest.raises(InvalidCursorError):
            await kv.list(cursor="not base64!!")

    async def test_non_string_prefix(self, kv) -> None:
        with pytest.raises(ValidationError, match="prefix"):
            await kv.list(prefix=123)


class TestListBinding:
    """Parameters bound to the range statement."""

    def _kv(self, **overrides) -> tuple[KVNamespace, AsyncMock]:
        backend = AsyncMock(spec=DatabaseBackend)
        backend.backend_name = "sqlite"
        backend.fetch_all.return_value = []
        kv = KVNamespace(backend, auto_create=False, clock=lambda: 1000.5, **overrides)
        return kv, backend

    async def test_default_params(self) -> None:
        kv, backend = self._kv(namespace="ns")
        await kv.list()
        sql, params = backend.fetch_all.await_args.args
        assert sql == kv.statements.range_list.sql
        assert params == ("ns", 1000, "", "\U0010ffff", "", 1001)

    async def test_prefix_and_cursor_params(self) -> None:
        kv, backend = self._kv()
        cursor = base64.b64encode(b"app:7").decode()
        await kv.list(prefix="app:", limit=5, cursor=cursor)
        _, params = backend.fetch_all.await_args.args
        assert params == ("", 1000, "app:", "app:\U0010ffff", "app:7", 6)

    async def test_limit_clamped_when_enforced(self) -> None:
        kv, backend = self._kv(enforce_limits=True)
        await kv.list(limit=5000)
        _, params = backend.fetch_all.await_args.args
        assert params[-1] == 1001

    async def test_large_limit_allowed_by_default(self) -> None:
        kv, backend = self._kv()
        await kv.list(limit=5000)
        _, params = backend.fetch_all.await_args.args
        assert params[-1] == 5001
