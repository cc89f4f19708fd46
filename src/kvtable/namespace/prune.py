# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Which operations sweep expired rows after they finish."""

from __future__ import annotations

from collections.abc import Iterable

from kvtable.core.constants import DEFAULT_PRUNE_TRIGGERS, PruneTrigger


class PrunePolicy:
    """Set of operations that run ``prune_expired()`` afterwards.

    Pruning is a write, so the default only prunes after ``put`` and
    ``delete`` and keeps it off the read paths.

    Raises:
        ConfigurationError: If a trigger name is unknown.
    """

    __slots__ = ("_triggers",)

    def __init__(self, triggers: Iterable[str | PruneTrigger] = DEFAULT_PRUNE_TRIGGERS) -> None:
        self._triggers = frozenset(PruneTrigger.parse(t) for t in triggers)

    @classmethod
    def never(cls) -> PrunePolicy:
        return cls(())

    @property
    def triggers(self) -> frozenset[PruneTrigger]:
        return self._triggers

    def should_prune(self, trigger: str | PruneTrigger) -> bool:
        return PruneTrigger.parse(trigger) in self._triggers

    def __repr__(self) -> str:
        names = ", ".join(sorted(t.value for t in self._triggers))
        return f"PrunePolicy({{{names}}})"
