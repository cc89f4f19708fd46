# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for metadata JSON encoding."""

from __future__ import annotations

import json
from datetime import UTC, date, datetime

import pytest
from pydantic import BaseModel

from kvtable.core.exceptions import MetadataSerializationError
from kvtable.namespace.metadata import UNSET, decode_metadata, encode_metadata


class _Owner(BaseModel):
    name: str
    seen: datetime


class TestEncodeMetadata:
    def test_unset_stores_null(self) -> None:
        assert encode_metadata() is None
        assert encode_metadata(UNSET) is None

    def test_explicit_none_is_json_null(self) -> None:
        assert encode_metadata(None) == b"null"

    def test_compact_separators(self) -> None:
        assert encode_metadata({"a": 1, "b": [1, 2]}) == b'{"a":1,"b":[1,2]}'

    def test_non_ascii_kept_as_utf8(self) -> None:
        assert encode_metadata({"name": "zoë"}) == '{"name":"zoë"}'.encode()

    def test_datetime_and_date_become_iso_strings(self) -> None:
        encoded = encode_metadata(
            {"at": datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC), "on": date(2024, 1, 2)}
        )
        assert json.loads(encoded) == {"at": "2024-01-02T03:04:05+00:00", "on": "2024-01-02"}

    def test_pydantic_model(self) -> None:
        owner = _Owner(name="alice", seen=datetime(2024, 1, 1, tzinfo=UTC))
        assert json.loads(encode_metadata(owner)) == {
            "name": "alice",
            "seen": "2024-01-01T00:00:00Z",
        }

    @pytest.mark.parametrize(
        "metadata",
        [object(), {1, 2}, float("nan"), {"x": float("inf")}, b"raw bytes"],
    )
    def test_not_serializable(self, metadata) -> None:
        with pytest.raises(MetadataSerializationError):
            encode_metadata(metadata)

    def test_circular_reference(self) -> None:
        circular: dict = {}
        circular["self"] = circular
        with pytest.raises(MetadataSerializationError):
            encode_metadata(circular)

    def test_serialization_error_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            encode_metadata(object())


class TestDecodeMetadata:
    def test_null_column(self) -> None:
        assert decode_metadata(None) is None

    def test_round_trip(self) -> None:
        value = {"nested": {"list": [1, "two", None, True]}}
        assert decode_metadata(encode_metadata(value)) == value


class TestUnset:
    def test_falsy_and_repr(self) -> None:
        assert not UNSET
        assert repr(UNSET) == "UNSET"
