from __future__ import annotations

import json
from html import escape as html_escape
from typing import Iterable

import streamlit as st
import streamlit.components.v1 as components

from research_queue_planner import QueueCategory, ResearchItem, ResearchQueue

from ..config import LANE_ICONS


def label_for_item(item: ResearchItem) -> str:
    parts = [item.friendly_name, item.knowledge_category.value.title()]
    if item.tech_level:
        parts.append(item.tech_level)
    return " | ".join(parts) + f" [{item.identifier}]"


def option_choices(items: Iterable[ResearchItem]) -> dict[str, str]:
    entries = {label_for_item(item): item.identifier for item in items}
    return dict(sorted(entries.items(), key=lambda entry: entry[0].lower()))


def lane_positions(queue: ResearchQueue) -> list[int]:
    """1-based position of each queued item within its own knowledge lane."""
    counters: dict = {}
    positions: list[int] = []
    for item in queue:
        counters[item.knowledge_category] = counters.get(item.knowledge_category, 0) + 1
        positions.append(counters[item.knowledge_category])
    return positions


def parse_drop_payload(value: str, queued_ids: Iterable[str]) -> tuple[str, int] | None:
    if not value:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None

    node_id = parsed.get("id")
    slot = parsed.get("slot")
    if not isinstance(node_id, str) or node_id not in set(queued_ids):
        return None
    if isinstance(slot, bool) or not isinstance(slot, int):
        return None
    return node_id, slot


def storage_notices(dropped: Iterable[str] | None, read_error: str | None) -> list[str]:
    notices = []
    if read_error:
        notices.append(f"Saved research queues could not be read from browser storage: {read_error}")
    dropped = list(dropped or ())
    if dropped:
        notices.append(
            "Some saved research items were ignored because they are missing in this dataset: "
            + ", ".join(dropped)
        )
    return notices


def render_validation(result) -> None:
    if result.has_errors:
        with st.container(border=True):
            st.error("Validation failed. Resolve blocking issues to continue planning.")
            for issue in result.errors:
                st.write(f"**{issue.message}**: {', '.join(issue.nodes)}")
    elif result.warnings:
        with st.container(border=True):
            st.warning("Warnings detected:")
            for warning in result.warnings:
                st.write(f"**{warning.message}**: {', '.join(warning.nodes)}")


def render_sortable_queue(queue: ResearchQueue, category: QueueCategory) -> None:
    # Custom HTML/JS reports each drop as (dragged id, slot in the pre-drag order)
    # through a hidden Streamlit text input.
    heads = {head for head in queue.heads().values() if head is not None}
    items = []
    for item, position in zip(queue, lane_positions(queue)):
        icon = LANE_ICONS.get(item.knowledge_category, "")
        css_class = "queue-item head" if item in heads else "queue-item"
        safe_label = html_escape(f"{icon} {position}. {item.friendly_name}")
        safe_id = html_escape(item.identifier)
        items.append(f'<li class="{css_class}" draggable="true" data-id="{safe_id}">{safe_label}</li>')

    list_html = "\n".join(items)
    order_json = json.dumps(list(queue.identifiers()))
    input_label = f"{category.value} queue drop"
    html = f"""
    <div class="queue-root">
      <ul class="queue-strip">
        {list_html}
      </ul>
    </div>
    <script>
    const strip = document.querySelector(".queue-strip");
    if (strip) {{
      const parentDoc = window.parent.document;
      const originalOrder = {order_json};
      let dragItem = null;

      const reportDrop = () => {{
        if (!dragItem) return;
        const next = dragItem.nextElementSibling;
        const slot = next ? originalOrder.indexOf(next.dataset.id) : originalOrder.length;
        const input = parentDoc.querySelector("input[aria-label='{input_label}']");
        if (!input) return;
        const payload = {{ id: dragItem.dataset.id, slot: slot, nonce: Date.now() }};
        input.value = JSON.stringify(payload);
        input.dispatchEvent(new Event("input", {{ bubbles: true }}));
        dragItem = null;
      }};

      strip.addEventListener("dragstart", (event) => {{
        dragItem = event.target.closest(".queue-item");
        event.dataTransfer.effectAllowed = "move";
      }});

      strip.addEventListener("dragover", (event) => {{
        event.preventDefault();
        const target = event.target.closest(".queue-item");
        if (!target || target === dragItem) return;
        const rect = target.getBoundingClientRect();
        const after = (event.clientX - rect.left) > (rect.width / 2);
        strip.insertBefore(dragItem, after ? target.nextSibling : target);
      }});

      strip.addEventListener("drop", () => reportDrop());
      strip.addEventListener("dragend", () => reportDrop());
    }}
    </script>
    <style>
    .queue-root {{
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
      overflow-x: auto;
    }}
    .queue-strip {{
      display: flex;
      gap: 8px;
      list-style: none;
      padding-left: 0;
      margin: 0;
    }}
    .queue-item {{
      flex: 0 0 auto;
      padding: 10px 12px;
      background: white;
      border: 1px solid #d1d5db;
      border-radius: 8px;
      cursor: grab;
      user-select: none;
      color: #1f2937;
      font-size: 0.9rem;
    }}
    .queue-item.head {{
      border-color: #2563eb;
      box-shadow: 0 0 0 1px #2563eb;
    }}
    .queue-item:active {{
      cursor: grabbing;
    }}
    @media (prefers-color-scheme: dark) {{
      .queue-item {{
        background: #374151;
        border-color: #4b5563;
        color: #f3f4f6;
      }}
    }}
    </style>
    """
    components.html(html, height=70, scrolling=False)
