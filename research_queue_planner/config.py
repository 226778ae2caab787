from __future__ import annotations

from dataclasses import dataclass

DEFAULT_HISTORY_LIMIT = 100


@dataclass(frozen=True, slots=True)
class QueueSettings:
    history_limit: int = DEFAULT_HISTORY_LIMIT
    # Raise on invariant violations instead of dropping the mutation.
    strict: bool = False
    # List friendly labels in history debug logs.
    verbose_debug: bool = False
    completion_notices: bool = True
