# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Option and result models for kvtable."""

from kvtable.models.options import NamespaceOptions
from kvtable.models.results import GetWithMetadataResult, ListKey, ListResult

__all__ = [
    "GetWithMetadataResult",
    "ListKey",
    "ListResult",
    "NamespaceOptions",
]
