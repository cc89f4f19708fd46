# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""KV-contract façade and the codecs it composes."""

from kvtable.namespace.kv import KVNamespace
from kvtable.namespace.metadata import UNSET
from kvtable.namespace.prune import PrunePolicy
from kvtable.namespace.values import ValueStream

__all__ = ["UNSET", "KVNamespace", "PrunePolicy", "ValueStream"]
