from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class QueueCategory(str, Enum):
    RESEARCH = "research"
    ANOMALY = "anomaly"


class KnowledgeCategory(str, Enum):
    STANDARD = "standard"
    BASIC = "basic"
    ADVANCED = "advanced"

    @property
    def queue_category(self) -> QueueCategory:
        if self is KnowledgeCategory.STANDARD:
            return QueueCategory.RESEARCH
        return QueueCategory.ANOMALY


# Knowledge categories that own a head inside each queue.
QUEUE_LANES: dict[QueueCategory, tuple[KnowledgeCategory, ...]] = {
    QueueCategory.RESEARCH: (KnowledgeCategory.STANDARD,),
    QueueCategory.ANOMALY: (KnowledgeCategory.BASIC, KnowledgeCategory.ADVANCED),
}

_TRUTHY = {"1", "true", "yes", "y"}


@dataclass
class Node:
    identifier: str
    friendly_name: str
    knowledge_category: KnowledgeCategory = KnowledgeCategory.STANDARD
    tech_level: str | None = None
    prereqs: list[str] = field(default_factory=list)
    hidden: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def category(self) -> QueueCategory:
        return self.knowledge_category.queue_category


@dataclass
class LoadReport:
    nodes: dict[str, Node]
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class InputLoader:
    """Load research project definitions from structured files."""

    SUPPORTED_EXTENSIONS = {".json", ".csv", ".tsv"}
    RESERVED_KEYS = {
        "defName",
        "dataName",
        "id",
        "label",
        "friendlyName",
        "knowledgeCategory",
        "knowledge_category",
        "techLevel",
        "prerequisites",
        "prereqs",
        "hidden",
    }

    def __init__(self, input_dir: Path):
        self.input_dir = Path(input_dir)

    def load(self) -> LoadReport:
        nodes: dict[str, Node] = {}
        warnings: list[str] = []
        errors: list[str] = []

        for path in sorted(self.input_dir.glob("*")):
            if path.suffix.lower() not in self.SUPPORTED_EXTENSIONS:
                message = f"Ignoring unsupported file: {path.name}"
                warnings.append(message)
                logger.warning(message)
                continue

            try:
                records = list(self._parse_file(path))
            except (json.JSONDecodeError, UnicodeDecodeError, csv.Error) as exc:
                message = f"Failed to parse {path.name}: {exc}"
                errors.append(message)
                logger.error(message)
                continue

            for record in records:
                try:
                    node = self._build_node(record, source=path)
                except ValueError as exc:
                    message = str(exc)
                    errors.append(message)
                    logger.error(message)
                    continue

                if node.identifier in nodes:
                    message = f"Duplicate research id {node.identifier} in {path.name}; keeping first occurrence"
                    warnings.append(message)
                    logger.warning(message)
                    continue
                nodes[node.identifier] = node

        return LoadReport(nodes=nodes, warnings=warnings, errors=errors)

    def _parse_file(self, path: Path) -> Iterable[dict[str, Any]]:
        if path.suffix.lower() == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                yield data
            else:
                yield from data
            return

        delimiter = "," if path.suffix.lower() == ".csv" else "\t"
        with path.open(newline="", encoding="utf-8") as handle:
            reader = csv.DictReader(handle, delimiter=delimiter)
            for row in reader:
                yield {k: v for k, v in row.items() if k is not None}

    def _build_node(self, record: dict[str, Any], source: Path) -> Node:
        identifier = record.get("defName") or record.get("dataName") or record.get("id")
        if not identifier:
            raise ValueError(f"Record in {source.name} is missing an identifier")

        friendly_name = record.get("label") or record.get("friendlyName") or identifier
        prereqs_raw = record.get("prerequisites") or record.get("prereqs") or []

        return Node(
            identifier=str(identifier),
            friendly_name=str(friendly_name),
            knowledge_category=self._infer_knowledge_category(record, source),
            tech_level=record.get("techLevel") or None,
            prereqs=self._normalize_prereqs(prereqs_raw),
            hidden=self._parse_flag(record.get("hidden")),
            metadata={k: v for k, v in record.items() if k not in self.RESERVED_KEYS},
        )

    def _normalize_prereqs(self, prereqs_raw: Any) -> list[str]:
        if prereqs_raw is None:
            return []
        if isinstance(prereqs_raw, str):
            return [item.strip() for item in prereqs_raw.split(",") if item.strip()]
        if isinstance(prereqs_raw, Iterable):
            return [str(item) for item in prereqs_raw if str(item).strip()]
        return []

    @staticmethod
    def _parse_flag(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in _TRUTHY

    def _infer_knowledge_category(self, record: dict[str, Any], source: Path) -> KnowledgeCategory:
        explicit = record.get("knowledgeCategory") or record.get("knowledge_category")
        if isinstance(explicit, str):
            normalized = explicit.strip().lower()
            if normalized.startswith("adv"):
                return KnowledgeCategory.ADVANCED
            if normalized.startswith("bas"):
                return KnowledgeCategory.BASIC
            if normalized.startswith("std") or normalized.startswith("stand"):
                return KnowledgeCategory.STANDARD

        # Anomaly files without an explicit category default to the basic lane.
        if "anomaly" in source.stem.lower():
            return KnowledgeCategory.BASIC

        return KnowledgeCategory.STANDARD
