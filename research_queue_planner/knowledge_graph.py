from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping

from .input_loader import KnowledgeCategory, Node, QueueCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResearchItem:
    """Stable handle on one research node, compared by identifier."""

    identifier: str
    graph: KnowledgeGraph = field(compare=False, repr=False)

    @property
    def node(self) -> Node:
        return self.graph.nodes[self.identifier]

    @property
    def friendly_name(self) -> str:
        return self.node.friendly_name

    @property
    def category(self) -> QueueCategory:
        return self.node.category

    @property
    def knowledge_category(self) -> KnowledgeCategory:
        return self.node.knowledge_category

    @property
    def tech_level(self) -> str | None:
        return self.node.tech_level

    def prerequisites(self) -> tuple[ResearchItem, ...]:
        return self.graph.prerequisites_of(self.identifier)

    def is_satisfied(self) -> bool:
        return self.graph.is_completed(self.identifier)

    def is_eligible(self) -> bool:
        return self.graph.is_eligible(self.identifier)


class KnowledgeGraph:
    """Research definitions plus the mutable completion and blocking state."""

    def __init__(self, nodes: Mapping[str, Node], *, completed: Iterable[str] = ()):
        self.nodes: Dict[str, Node] = dict(nodes)
        self._completed = {node_id for node_id in completed if node_id in self.nodes}
        self._blocked = {node_id for node_id, node in self.nodes.items() if node.hidden}
        self._items = {node_id: ResearchItem(node_id, self) for node_id in self.nodes}

    def by_identity(self, identifier: str) -> ResearchItem | None:
        return self._items.get(identifier)

    def item(self, identifier: str) -> ResearchItem:
        return self._items[identifier]

    def items(self, category: QueueCategory | None = None) -> list[ResearchItem]:
        return [
            item
            for item in self._items.values()
            if category is None or item.category is category
        ]

    def prerequisites_of(self, identifier: str) -> tuple[ResearchItem, ...]:
        node = self.nodes.get(identifier)
        if node is None:
            return ()
        return tuple(self._items[prereq] for prereq in node.prereqs if prereq in self._items)

    @property
    def completed(self) -> frozenset[str]:
        return frozenset(self._completed)

    def is_completed(self, identifier: str) -> bool:
        return identifier in self._completed

    def mark_completed(self, identifier: str) -> None:
        if identifier in self.nodes:
            self._completed.add(identifier)

    def mark_incomplete(self, identifier: str) -> None:
        self._completed.discard(identifier)

    def is_blocked(self, identifier: str) -> bool:
        return identifier in self._blocked

    def block(self, identifier: str) -> None:
        if identifier in self.nodes:
            self._blocked.add(identifier)

    def unblock(self, identifier: str) -> None:
        self._blocked.discard(identifier)

    def is_eligible(self, identifier: str) -> bool:
        """True when ``identifier`` and every unmet prerequisite can be researched.

        Walks the unmet closure once; a prerequisite that is blocked or belongs
        to another queue category makes the whole chain ineligible.
        """

        node = self.nodes.get(identifier)
        if node is None or identifier in self._completed or identifier in self._blocked:
            return False

        seen = {identifier}
        pending = [identifier]
        while pending:
            for prereq in self.nodes[pending.pop()].prereqs:
                if prereq in seen:
                    continue
                seen.add(prereq)
                prereq_node = self.nodes.get(prereq)
                if prereq_node is None or prereq in self._completed:
                    continue
                if prereq_node.category != node.category or prereq in self._blocked:
                    return False
                pending.append(prereq)
        return True


class ResearchManager:
    """Tracks the active project of each knowledge lane.

    Plays the active-item sink for the queues: they push their lane heads
    here, and reconciliation reads it back to spot projects that were started
    outside the queue.
    """

    def __init__(self, graph: KnowledgeGraph):
        self.graph = graph
        self._active: Dict[KnowledgeCategory, ResearchItem] = {}

    def get_active(self, lane: KnowledgeCategory) -> ResearchItem | None:
        return self._active.get(lane)

    def set_active(self, lane: KnowledgeCategory, item: ResearchItem | None) -> None:
        if item is None:
            stopped = self._active.pop(lane, None)
            if stopped is not None:
                logger.info("Stopped %s research %s", lane.value, stopped.identifier)
            return
        self._active[lane] = item
        logger.info("Active %s research is now %s", lane.value, item.identifier)

    def start(self, item: ResearchItem) -> None:
        self.set_active(item.knowledge_category, item)

    def mark_completed(self, item: ResearchItem) -> None:
        self.graph.mark_completed(item.identifier)
        if self._active.get(item.knowledge_category) == item:
            del self._active[item.knowledge_category]
        logger.info("Research %s completed", item.identifier)
