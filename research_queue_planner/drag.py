"""Pointer geometry and drag-and-drop state for the horizontal queue strip.

The queue engine never sees coordinates: :class:`QueueLayout` turns pointer
positions into queue slots and back, and :class:`DragController` turns a drag
release into ``insert`` / ``remove`` calls on a :class:`QueueController`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .commands import QueueController
from .queue_engine import QueueItem

logger = logging.getLogger(__name__)

# Fractions of a node height accepted above and below the strip as a drop.
BAND_ABOVE = 0.3
BAND_BELOW = 0.7


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.height

    def contains(self, point: Point) -> bool:
        return self.x <= point.x < self.x_max and self.y <= point.y < self.y_max


@dataclass
class QueueLayout:
    canvas: Rect
    node_width: float
    node_height: float
    margin: float
    scroll_x: float = 0.0

    @property
    def pitch(self) -> float:
        return self.node_width + self.margin

    def index_at_pointer(self, point: Point) -> int | None:
        if not self.canvas.contains(point):
            return None
        return int((point.x - self.canvas.x + self.scroll_x) // self.pitch)

    def pointer_for_index(self, index: int) -> Point:
        return Point(self.canvas.x + index * self.pitch - self.scroll_x, self.canvas.y)

    def in_drop_band(self, point: Point) -> bool:
        return (
            self.canvas.y - self.node_height * BAND_ABOVE
            <= point.y
            <= self.canvas.y_max + self.node_height * BAND_BELOW
        )

    def content_width(self, length: int) -> float:
        return max(length * self.pitch - self.margin, 0.0)


class DragSource(str, Enum):
    TREE = "tree"
    QUEUE = "queue"


class DropOutcome(str, Enum):
    INSERTED = "inserted"
    REMOVED = "removed"
    CLICKED = "clicked"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class Dragging:
    item: QueueItem
    source: DragSource


DragState = Union[Idle, Dragging]

IDLE = Idle()


class DragController:
    def __init__(self, controller: QueueController, layout: QueueLayout):
        self.controller = controller
        self.layout = layout
        self.state: DragState = IDLE

    @property
    def dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def start(self, item: QueueItem, source: DragSource) -> None:
        self.state = Dragging(item=item, source=source)

    def cancel(self) -> None:
        self.state = IDLE

    def display_length(self) -> int:
        length = len(self.controller.queue)
        state = self.state
        if isinstance(state, Dragging) and state.source is DragSource.TREE:
            return length + 1
        return length

    def display_positions(self, pointer: Point) -> list[int | None]:
        """Slot drawn for each queued node; ``None`` hides the dragged node."""
        queue = self.controller.queue.items()
        state = self.state
        if not isinstance(state, Dragging):
            return list(range(len(queue)))

        gap = self.layout.index_at_pointer(pointer)
        positions: list[int | None] = []
        slot = 0
        index = 0
        while index < len(queue):
            if state.source is DragSource.QUEUE and queue[index] == state.item:
                positions.append(None)
                index += 1
            elif gap == slot:
                slot += 1
            else:
                positions.append(slot)
                slot += 1
                index += 1
        return positions

    def release(self, pointer: Point) -> DropOutcome:
        state = self.state
        if not isinstance(state, Dragging):
            return DropOutcome.IGNORED
        self.state = IDLE

        canvas = self.layout.canvas
        if canvas.contains(pointer):
            outcome = self._drop_at(state, self.layout.index_at_pointer(pointer))
        elif self.layout.in_drop_band(pointer):
            if pointer.x <= canvas.x:
                outcome = self._drop_at(state, 0)
            elif pointer.x >= canvas.x_max:
                outcome = self._drop_at(state, len(self.controller.queue))
            else:
                outcome = DropOutcome.IGNORED
        elif state.source is DragSource.QUEUE:
            self.controller.remove(state.item)
            outcome = DropOutcome.REMOVED
        else:
            outcome = DropOutcome.IGNORED

        logger.debug("Released %s from %s: %s", state.item.identifier, state.source.value, outcome.value)
        return outcome

    def _drop_at(self, state: Dragging, index: int | None) -> DropOutcome:
        if index is None:
            return DropOutcome.IGNORED

        current = self.controller.queue.index_of(state.item)
        if current == index:
            return DropOutcome.CLICKED
        # The dragged node is hidden from the strip, so slots past it shift by one.
        if state.source is DragSource.QUEUE and current is not None and index > current:
            index += 1

        before = self.controller.queue.identifiers()
        self.controller.insert(state.item, index)
        if self.controller.queue.identifiers() == before:
            return DropOutcome.IGNORED
        return DropOutcome.INSERTED
