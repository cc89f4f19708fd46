# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for kvtable."""


class KVTableError(Exception):
    """Base exception for all kvtable errors."""


class ConfigurationError(KVTableError):
    """Invalid or missing configuration."""


class BackingStoreError(KVTableError):
    """The backing database could not be opened or reached."""


class ValidationError(KVTableError):
    """A caller-supplied argument was rejected before any statement ran."""


class UnsupportedValueError(ValidationError, TypeError):
    """``put()`` received a value that is not text, bytes, a view, or a stream."""


class UnsupportedReadTypeError(ValidationError, TypeError):
    """A read requested an unknown or disallowed response type."""


class MetadataSerializationError(ValidationError, TypeError):
    """Metadata could not be serialized to JSON."""


class InvalidExpirationError(ValidationError, ValueError):
    """``expiration`` or ``expiration_ttl`` is out of range."""


class InvalidCursorError(ValidationError, ValueError):
    """A list cursor could not be decoded."""


class LimitExceededError(ValidationError, ValueError):
    """A key, value, or metadata payload exceeds the KV size limits."""


class InvalidKeyError(ValidationError, TypeError):
    """A key is not a string."""
