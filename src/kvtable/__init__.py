# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""kvtable - a KV namespace emulated on a relational table."""

__version__ = "0.1.0"

from kvtable.core.constants import PruneTrigger, ReadType
from kvtable.models.options import NamespaceOptions
from kvtable.models.results import GetWithMetadataResult, ListKey, ListResult
from kvtable.namespace.kv import KVNamespace
from kvtable.namespace.metadata import UNSET
from kvtable.namespace.values import ValueStream
from kvtable.storage.database import close_backend, create_backend, init_backend, open_namespace

__all__ = [
    "UNSET",
    "GetWithMetadataResult",
    "KVNamespace",
    "ListKey",
    "ListResult",
    "NamespaceOptions",
    "PruneTrigger",
    "ReadType",
    "ValueStream",
    "__version__",
    "close_backend",
    "create_backend",
    "init_backend",
    "open_namespace",
]
