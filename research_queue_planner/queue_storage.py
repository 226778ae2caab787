"""Helpers for persisting research queues to browser storage or save files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from .input_loader import QueueCategory
from .knowledge_graph import KnowledgeGraph

logger = logging.getLogger(__name__)

STORAGE_KEY = "research-queue-planner"
STORAGE_VERSION = 1


@dataclass(frozen=True, slots=True)
class DecodedQueues:
    orders: Mapping[QueueCategory, tuple[str, ...]]
    dropped: tuple[str, ...]


def encode_queues(orders: Mapping[QueueCategory, Iterable[str]]) -> dict:
    """Translate per-category identifier orders into a versioned payload."""

    return {
        "version": STORAGE_VERSION,
        "queues": {category.value: list(order) for category, order in orders.items()},
    }


def decode_queues(payload: object, graph: KnowledgeGraph) -> DecodedQueues | None:
    """Rebuild per-category orders from a storage payload.

    Invalid shapes or versions return ``None`` to signal caller should
    ignore the stored value. Identifiers that no longer resolve, or that
    resolve to research of another queue, are reported in ``dropped``.
    """

    if not isinstance(payload, dict):
        return None

    if payload.get("version") != STORAGE_VERSION:
        return None

    queues_value = payload.get("queues")
    if not isinstance(queues_value, dict):
        return None

    orders: dict[QueueCategory, tuple[str, ...]] = {}
    dropped: list[str] = []

    for key, order_value in queues_value.items():
        try:
            category = QueueCategory(key)
        except ValueError:
            logger.warning("Ignoring stored queue with unknown category %r", key)
            continue

        if not isinstance(order_value, list):
            return None

        seen: set[str] = set()
        order: list[str] = []
        for identifier in order_value:
            if not isinstance(identifier, str):
                return None
            item = graph.by_identity(identifier)
            if item is None or item.category is not category:
                dropped.append(identifier)
                continue
            if identifier in seen:
                continue
            seen.add(identifier)
            order.append(identifier)
        orders[category] = tuple(order)

    if dropped:
        logger.warning("Dropped %d stored research id(s): %s", len(dropped), ", ".join(dropped))
    return DecodedQueues(orders=MappingProxyType(orders), dropped=tuple(dropped))
