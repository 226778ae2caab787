"""Dependency-respecting research queue.

The queue keeps a linear order over research items in which every unmet
prerequisite precedes the items that depend on it. It records no history;
``commands.QueueController`` layers undo/redo on top.
"""

from __future__ import annotations

import logging
from typing import Generic, Iterable, Iterator, Protocol, Sequence, TypeVar

from .closure import closure, missing_prerequisites, unmet_prerequisites
from .config import QueueSettings
from .input_loader import KnowledgeCategory, QueueCategory

logger = logging.getLogger(__name__)


class QueueItem(Protocol):
    @property
    def identifier(self) -> str: ...

    @property
    def category(self) -> QueueCategory: ...

    @property
    def knowledge_category(self) -> KnowledgeCategory: ...

    def prerequisites(self) -> Iterable[QueueItem]: ...

    def is_satisfied(self) -> bool: ...

    def is_eligible(self) -> bool: ...


class ActiveItemSink(Protocol):
    def get_active(self, lane: KnowledgeCategory) -> QueueItem | None: ...

    def set_active(self, lane: KnowledgeCategory, item: QueueItem | None) -> None: ...

    def mark_completed(self, item: QueueItem) -> None: ...


ItemT = TypeVar("ItemT", bound=QueueItem)


class QueueInvariantError(RuntimeError):
    """A computed queue order would put a prerequisite after its dependent."""


class ResearchQueue(Generic[ItemT]):
    def __init__(
        self,
        category: QueueCategory,
        *,
        lanes: Sequence[KnowledgeCategory],
        sink: ActiveItemSink | None = None,
        settings: QueueSettings | None = None,
    ):
        self.category = category
        self.lanes = tuple(lanes)
        self.sink = sink
        self.settings = settings or QueueSettings()
        self._queue: list[ItemT] = []

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, item: object) -> bool:
        return item in self._queue

    def __iter__(self) -> Iterator[ItemT]:
        # Callers may mutate the queue while iterating.
        return iter(tuple(self._queue))

    def __getitem__(self, index: int) -> ItemT:
        return self._queue[index]

    def __repr__(self) -> str:
        return f"ResearchQueue({self.category.value!r}, {list(self.identifiers())!r})"

    def items(self) -> tuple[ItemT, ...]:
        return tuple(self._queue)

    def identifiers(self) -> tuple[str, ...]:
        return tuple(item.identifier for item in self._queue)

    def index_of(self, item: ItemT) -> int | None:
        try:
            return self._queue.index(item)
        except ValueError:
            return None

    def current(self, lane: KnowledgeCategory | None = None) -> ItemT | None:
        """Head of the queue, or of one knowledge lane when ``lane`` is given."""
        for item in self._queue:
            if lane is None or item.knowledge_category == lane:
                return item
        return None

    def heads(self) -> dict[KnowledgeCategory, ItemT | None]:
        return {lane: self.current(lane) for lane in self.lanes}

    @property
    def num_queued(self) -> int:
        return max(len(self._queue) - 1, 0)

    def append(self, item: ItemT) -> bool:
        if not self._append(item):
            return False
        self.update_active()
        return True

    def prepend(self, item: ItemT) -> bool:
        if not self._accepts(item):
            return False
        if not self._commit(self._insert_block(closure(item), 0)):
            return False
        self.update_active()
        return True

    def insert(self, item: ItemT, target: int) -> None:
        """Place ``item`` in the slot before the element currently at ``target``."""
        if not self._accepts(item):
            return

        target = max(0, min(len(self._queue), target))
        index = self.index_of(item)
        if index == target:
            return

        if index is None:
            order = self._insert_block(closure(item), target)
        elif target > index:
            order = self._move_forward(item, index, target)
        else:
            order = self._move_backward(item, index, target)

        if self._commit(order):
            self.update_active()

    def remove(self, item: ItemT) -> bool:
        if not self._remove(item):
            return False
        self.update_active()
        return True

    def replace(self, item: ItemT) -> None:
        self._queue.clear()
        self._append(item)
        self.update_active()

    def replace_all(self, items: Iterable[ItemT]) -> None:
        self._queue.clear()
        for item in items:
            self._append(item)
        self.update_active()

    def clear(self) -> None:
        self._queue.clear()
        self.update_active()

    def finish(self, item: ItemT) -> None:
        for node in closure(item):
            if node in self._queue:
                self._queue.remove(node)
            if self.sink is not None:
                self.sink.mark_completed(node)
        self.update_active()

    def drop_satisfied(self) -> tuple[ItemT, ...]:
        finished = tuple(node for node in self._queue if node.is_satisfied())
        for node in finished:
            self._queue.remove(node)
        self.update_active()
        return finished

    def sanity_check(self) -> None:
        finished: list[ItemT] = []
        unavailable: list[ItemT] = []

        for node in self._queue:
            if node.is_satisfied():
                finished.append(node)
            elif not node.is_eligible():
                unavailable.append(node)

        for node in finished:
            self._queue.remove(node)
        for node in unavailable:
            self._remove(node)

        if self.sink is not None:
            replaced = False
            for lane in self.lanes:
                active = self.sink.get_active(lane)
                if active is None or active == self.current(lane):
                    continue
                if not self._accepts(active):
                    continue
                logger.info(
                    "Active %s research %s is not at the head of the %s queue; replacing queue",
                    lane.value,
                    active.identifier,
                    self.category.value,
                )
                # A second drifting lane joins the replacement instead of wiping it.
                if not replaced:
                    self._queue.clear()
                    replaced = True
                self._commit(self._insert_block(closure(active), 0))

        self.update_active()

    def update_active(self) -> None:
        if self.sink is None:
            return
        for lane in self.lanes:
            head = self.current(lane)
            if self.sink.get_active(lane) != head:
                self.sink.set_active(lane, head)

    def _accepts(self, item: ItemT) -> bool:
        return item.category == self.category and item.is_eligible()

    def _append(self, item: ItemT) -> bool:
        if item in self._queue or not self._accepts(item):
            return False
        order = list(self._queue)
        for node in closure(item):
            if node not in order:
                order.append(node)
        return self._commit(order)

    def _remove(self, item: ItemT) -> bool:
        index = self.index_of(item)
        if index is None:
            return False

        if item.is_satisfied():
            order = self._queue[:index] + self._queue[index + 1 :]
        else:
            doomed = {item}
            for node in self._queue[index + 1 :]:
                if unmet_prerequisites(node) & doomed:
                    doomed.add(node)
            if len(doomed) > 1:
                logger.debug("Removing %s cascades to %d dependents", item.identifier, len(doomed) - 1)
            order = [node for node in self._queue if node not in doomed]

        return self._commit(order)

    def _insert_block(self, nodes: Iterable[ItemT], position: int) -> list[ItemT]:
        order = list(self._queue)
        # Members already ahead of the slot are correctly ordered; leave them.
        settled = set(order[:position])
        cursor = position
        for node in nodes:
            if node in settled:
                continue
            if node in order:
                order.remove(node)
            order.insert(cursor, node)
            cursor += 1
        return order

    def _move_forward(self, item: ItemT, index: int, target: int) -> list[ItemT]:
        moving = [item]
        for node in self._queue[index + 1 : target]:
            if item in unmet_prerequisites(node):
                moving.append(node)

        order = [node for node in self._queue if node not in moving]
        destination = target - len(moving)
        order[destination:destination] = moving
        return order

    def _move_backward(self, item: ItemT, index: int, target: int) -> list[ItemT]:
        prerequisites = unmet_prerequisites(item)
        moving = [node for node in self._queue[target:index] if node in prerequisites]
        moving.append(item)
        return self._insert_block(moving, target)

    def _commit(self, order: list[ItemT]) -> bool:
        problem = self._find_violation(order)
        if problem is None:
            self._queue[:] = order
            return True

        message = f"Rejected {self.category.value} queue change: {problem}"
        if self.settings.strict:
            raise QueueInvariantError(message)
        logger.error(message)
        return False

    @staticmethod
    def _find_violation(order: Sequence[ItemT]) -> str | None:
        positions: dict[ItemT, int] = {}
        for index, node in enumerate(order):
            if node in positions:
                return f"{node.identifier} queued twice"
            positions[node] = index

        for index, node in enumerate(order):
            for prereq in missing_prerequisites(node):
                position = positions.get(prereq)
                if position is not None and position > index:
                    return f"{prereq.identifier} queued after its dependent {node.identifier}"
        return None
