from __future__ import annotations

from pathlib import Path

from research_queue_planner import KnowledgeCategory, QueueCategory

BASE_DIR = Path(__file__).resolve().parents[2]
INPUT_DIR = BASE_DIR / "inputs"

HISTORY_LIMIT = 100
VERBOSE_DEBUG = False

QUEUE_TITLES = {
    QueueCategory.RESEARCH: "🔬 RESEARCH QUEUE",
    QueueCategory.ANOMALY: "👁️ ANOMALY QUEUE",
}

LANE_ICONS = {
    KnowledgeCategory.STANDARD: "🔬",
    KnowledgeCategory.BASIC: "🟣",
    KnowledgeCategory.ADVANCED: "🔴",
}
