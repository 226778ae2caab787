from __future__ import annotations

from collections import deque
from typing import Generic, TypeVar

from .config import DEFAULT_HISTORY_LIMIT

SnapshotT = TypeVar("SnapshotT")


class UndoHistory(Generic[SnapshotT]):
    """Bounded undo/redo stacks of full queue snapshots.

    The top of the undo stack is always the current state, so the bottom entry
    is never handed out by :meth:`undo`.
    """

    def __init__(self, initial: SnapshotT, *, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._undo: deque[SnapshotT] = deque([initial], maxlen=limit)
        self._redo: list[SnapshotT] = []

    @property
    def current(self) -> SnapshotT:
        return self._undo[-1]

    @property
    def can_undo(self) -> bool:
        return len(self._undo) > 1

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def push(self, snapshot: SnapshotT) -> None:
        self._undo.append(snapshot)
        self._redo.clear()

    def undo(self) -> SnapshotT | None:
        if not self.can_undo:
            return None
        self._redo.append(self._undo.pop())
        return self._undo[-1]

    def redo(self) -> SnapshotT | None:
        if not self._redo:
            return None
        snapshot = self._redo.pop()
        self._undo.append(snapshot)
        return snapshot

    def clear(self, snapshot: SnapshotT) -> None:
        self._undo.clear()
        self._undo.append(snapshot)
        self._redo.clear()
