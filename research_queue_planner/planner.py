from __future__ import annotations

import logging
from typing import Callable, Dict

from .commands import QueueAdvanced, QueueController
from .config import QueueSettings
from .input_loader import QUEUE_LANES, QueueCategory
from .knowledge_graph import KnowledgeGraph, ResearchItem, ResearchManager
from .queue_engine import ResearchQueue
from .queue_storage import DecodedQueues, decode_queues, encode_queues

logger = logging.getLogger(__name__)


class ResearchPlanner:
    """One research queue per category, sharing a graph and an active-item sink."""

    def __init__(
        self,
        graph: KnowledgeGraph,
        *,
        settings: QueueSettings | None = None,
        manager: ResearchManager | None = None,
    ):
        self.graph = graph
        self.settings = settings or QueueSettings()
        self.manager = manager or ResearchManager(graph)
        self.queues: Dict[QueueCategory, QueueController[ResearchItem]] = {
            category: QueueController(
                ResearchQueue(
                    category,
                    lanes=QUEUE_LANES[category],
                    sink=self.manager,
                    settings=self.settings,
                ),
                graph.by_identity,
                settings=self.settings,
            )
            for category in QueueCategory
        }

    def controller(self, category: QueueCategory) -> QueueController[ResearchItem]:
        return self.queues[category]

    def queue_for(self, item: ResearchItem) -> QueueController[ResearchItem]:
        return self.queues[item.category]

    def subscribe(self, listener: Callable[[QueueAdvanced], None]) -> None:
        for controller in self.queues.values():
            controller.subscribe(listener)

    def append(self, item: ResearchItem) -> bool:
        return self.queue_for(item).append(item)

    def prepend(self, item: ResearchItem) -> bool:
        return self.queue_for(item).prepend(item)

    def insert(self, item: ResearchItem, target: int) -> None:
        self.queue_for(item).insert(item, target)

    def remove(self, item: ResearchItem) -> bool:
        return self.queue_for(item).remove(item)

    def finish(self, item: ResearchItem) -> None:
        self.queue_for(item).finish(item)

    def on_item_completed(self, item: ResearchItem) -> QueueAdvanced | None:
        return self.queue_for(item).on_item_completed(item)

    def complete(self, item: ResearchItem) -> QueueAdvanced | None:
        """Record that ``item`` was researched and advance its queue."""
        self.manager.mark_completed(item)
        return self.on_item_completed(item)

    def tick(self) -> None:
        for controller in self.queues.values():
            controller.sanity_check()

    def reset(self) -> None:
        for controller in self.queues.values():
            controller.reset()

    def save(self) -> dict:
        return encode_queues({category: controller.save() for category, controller in self.queues.items()})

    def load(self, payload: object) -> DecodedQueues | None:
        decoded = decode_queues(payload, self.graph)
        if decoded is None:
            logger.warning("Ignoring stored research queues with an unsupported format")
            return None

        for category, controller in self.queues.items():
            controller.load(decoded.orders.get(category, ()))
        return decoded
