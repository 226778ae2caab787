"""Dependency-ordered research queues with undo/redo."""

from .closure import closure, missing_prerequisites, unmet_prerequisites
from .commands import QueueAdvanced, QueueController
from .config import QueueSettings
from .drag import (
    DragController,
    DragSource,
    Dragging,
    DropOutcome,
    Idle,
    Point,
    QueueLayout,
    Rect,
)
from .history import UndoHistory
from .input_loader import (
    QUEUE_LANES,
    InputLoader,
    KnowledgeCategory,
    LoadReport,
    Node,
    QueueCategory,
)
from .knowledge_graph import KnowledgeGraph, ResearchItem, ResearchManager
from .planner import ResearchPlanner
from .queue_engine import ActiveItemSink, QueueInvariantError, QueueItem, ResearchQueue
from .queue_storage import DecodedQueues, decode_queues, encode_queues
from .validation import GraphValidator, ValidationIssue, ValidationResult

__all__ = [
    "InputLoader",
    "LoadReport",
    "Node",
    "QueueCategory",
    "KnowledgeCategory",
    "QUEUE_LANES",
    "GraphValidator",
    "ValidationIssue",
    "ValidationResult",
    "KnowledgeGraph",
    "ResearchItem",
    "ResearchManager",
    "closure",
    "missing_prerequisites",
    "unmet_prerequisites",
    "QueueItem",
    "ActiveItemSink",
    "QueueInvariantError",
    "ResearchQueue",
    "UndoHistory",
    "QueueAdvanced",
    "QueueController",
    "QueueSettings",
    "ResearchPlanner",
    "encode_queues",
    "decode_queues",
    "DecodedQueues",
    "Point",
    "Rect",
    "QueueLayout",
    "DragSource",
    "DropOutcome",
    "Idle",
    "Dragging",
    "DragController",
]
