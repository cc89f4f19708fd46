# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Conversion between caller value representations and stored bytes.

Writes accept text, bytes, byte views, and readable byte streams; streams
are drained into one buffer before storage.  Reads hand back the
representation the caller asked for.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from kvtable.core.constants import ReadType
from kvtable.core.exceptions import UnsupportedValueError

_UNSUPPORTED_VALUE = (
    "put() accepts only str, bytes, bytearray, memoryview, "
    "binary file-like objects, and async byte streams as values"
)


class ValueStream:
    """A one-chunk async byte stream.

    Yields the whole stored value once and then stops.  The backing table
    has no chunked read primitive, so there is never more than one chunk.
    """

    __slots__ = ("_data", "_consumed")

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._consumed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        if self._consumed:
            raise StopAsyncIteration
        self._consumed = True
        return self._data

    async def read(self) -> bytes:
        """Drain whatever remains of the stream."""
        chunks = [chunk async for chunk in self]
        return b"".join(chunks)

    def __repr__(self) -> str:
        return f"ValueStream({len(self._data)} bytes, consumed={self._consumed})"


def _as_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, bytes):
        return chunk
    if isinstance(chunk, (bytearray, memoryview)):
        return bytes(chunk)
    raise UnsupportedValueError(
        f"stream yielded {type(chunk).__name__}; byte streams must yield bytes-like chunks"
    )


async def drain_stream(stream: AsyncIterable[Any]) -> bytes:
    """Read an async byte stream to the end and join its chunks."""
    chunks = [_as_bytes(chunk) async for chunk in stream]
    return b"".join(chunks)


async def encode_value(value: Any) -> bytes:
    """Normalise a ``put()`` value into the bytes that get stored.

    Raises:
        UnsupportedValueError: If *value* is not a supported representation.
    """
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, AsyncIterable):
        return await drain_stream(value)
    read = getattr(value, "read", None)
    if callable(read):
        data = read()
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise UnsupportedValueError(
                f"{type(value).__name__}.read() returned {type(data).__name__}; "
                "file-like values must be opened in binary mode"
            )
        return bytes(data)
    raise UnsupportedValueError(f"{_UNSUPPORTED_VALUE}, got {type(value).__name__}")


def decode_value(data: bytes, read_type: ReadType) -> Any:
    """Convert stored bytes into the representation named by *read_type*.

    A ``json`` read of bytes that are not valid JSON raises
    :class:`json.JSONDecodeError`.
    """
    read_type = ReadType.parse(read_type)
    if read_type is ReadType.ARRAY_BUFFER:
        return data
    if read_type is ReadType.STREAM:
        return ValueStream(data)
    text = bytes(data).decode("utf-8")
    if read_type is ReadType.JSON:
        return json.loads(text)
    return text
