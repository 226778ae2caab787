"""Undo-recording command layer over a :class:`ResearchQueue`."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable

from .config import QueueSettings
from .history import UndoHistory
from .input_loader import QueueCategory
from .queue_engine import ItemT, QueueItem, ResearchQueue

logger = logging.getLogger(__name__)

Snapshot = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class QueueAdvanced:
    category: QueueCategory
    finished: QueueItem
    next: QueueItem | None


class QueueController(Generic[ItemT]):
    """Apply queue mutations and record a snapshot after each visible change.

    Restores from undo/redo go through ``replace_all`` so each snapshot is
    checked against current eligibility instead of being trusted blindly.
    """

    def __init__(
        self,
        queue: ResearchQueue[ItemT],
        resolve: Callable[[str], ItemT | None],
        *,
        settings: QueueSettings | None = None,
    ):
        self.queue = queue
        self.settings = settings or queue.settings
        self._resolve = resolve
        self._listeners: list[Callable[[QueueAdvanced], None]] = []
        self.history: UndoHistory[Snapshot] = UndoHistory(
            queue.identifiers(), limit=self.settings.history_limit
        )

    @property
    def category(self) -> QueueCategory:
        return self.queue.category

    def subscribe(self, listener: Callable[[QueueAdvanced], None]) -> None:
        self._listeners.append(listener)

    def append(self, item: ItemT) -> bool:
        return self._recorded(self.queue.append, item)

    def prepend(self, item: ItemT) -> bool:
        return self._recorded(self.queue.prepend, item)

    def insert(self, item: ItemT, target: int) -> None:
        self._recorded(self.queue.insert, item, target)

    def remove(self, item: ItemT) -> bool:
        return self._recorded(self.queue.remove, item)

    def replace(self, item: ItemT) -> None:
        self._recorded(self.queue.replace, item)

    def replace_all(self, items: Iterable[ItemT]) -> None:
        self._recorded(self.queue.replace_all, list(items))

    def clear(self) -> None:
        self._recorded(self.queue.clear)

    def finish(self, item: ItemT) -> None:
        self._recorded(self.queue.finish, item)

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        logger.debug("Undo %s queue to %s", self.category.value, self._describe(snapshot))
        self.queue.replace_all(self._resolve_all(snapshot))
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        logger.debug("Redo %s queue to %s", self.category.value, self._describe(snapshot))
        self.queue.replace_all(self._resolve_all(snapshot))
        return True

    def sanity_check(self) -> None:
        self.queue.sanity_check()

    def notify_instant_finished(self) -> tuple[ItemT, ...]:
        return self.queue.drop_satisfied()

    def on_item_completed(self, item: ItemT) -> QueueAdvanced | None:
        """Drop a just-researched item and announce what comes next.

        ``item`` must already be satisfied; an event is only produced when it
        was the head of its knowledge lane.
        """

        if item not in self.queue:
            return None
        if not item.is_satisfied():
            logger.warning("Ignoring completion of %s: research is not finished", item.identifier)
            return None

        lane = item.knowledge_category
        head = self.queue.current(lane)
        self.remove(item)
        if item != head:
            return None

        event = QueueAdvanced(category=self.category, finished=item, next=self.queue.current(lane))
        logger.info(
            "Research %s finished, next in %s queue: %s",
            item.identifier,
            self.category.value,
            event.next.identifier if event.next is not None else "none",
        )
        if self.settings.completion_notices:
            for listener in list(self._listeners):
                listener(event)
        return event

    def load(self, identifiers: Iterable[str]) -> tuple[str, ...]:
        """Rehydrate the queue from saved identifiers; returns the unknown ones."""

        self.queue.clear()
        dropped: list[str] = []

        for identifier in identifiers:
            item = self._resolve(identifier)
            if item is None:
                logger.warning(
                    "Dropping unknown research %s from saved %s queue", identifier, self.category.value
                )
                dropped.append(identifier)
                continue
            if item not in self.queue and not self.queue.append(item):
                logger.warning("Saved research %s can no longer be queued", identifier)

        self.history.clear(self.queue.identifiers())
        return tuple(dropped)

    def save(self) -> Snapshot:
        return self.queue.identifiers()

    def reset(self) -> None:
        self.queue.clear()
        self.history.clear(self.queue.identifiers())

    def record(self) -> None:
        snapshot = self.queue.identifiers()
        logger.debug("Undo state recorded for %s queue: %s", self.category.value, self._describe(snapshot))
        self.history.push(snapshot)

    def _recorded(self, mutate: Callable, *args):
        before = self.queue.identifiers()
        result = mutate(*args)
        if self.queue.identifiers() != before:
            self.record()
        return result

    def _resolve_all(self, identifiers: Iterable[str]) -> list[ItemT]:
        items: list[ItemT] = []
        for identifier in identifiers:
            item = self._resolve(identifier)
            if item is None:
                logger.warning("Skipping unknown research %s in history snapshot", identifier)
                continue
            items.append(item)
        return items

    def _describe(self, snapshot: Snapshot) -> str:
        if not self.settings.verbose_debug:
            return f"{len(snapshot)} item(s)"
        labels = []
        for identifier in snapshot:
            item = self._resolve(identifier)
            labels.append(getattr(item, "friendly_name", identifier))
        return ", ".join(labels) or "<empty>"
