from __future__ import annotations

import streamlit as st

from research_queue_planner import QueueCategory, ResearchItem, ResearchPlanner

from .data import current_planner
from .storage import persist_queue_storage


def ensure_state() -> None:
    if "reload_token" not in st.session_state:
        st.session_state.reload_token = 0

    if "search_query" not in st.session_state:
        st.session_state.search_query = None

    if "queue_notices" not in st.session_state:
        st.session_state.queue_notices = []

    if "queue_drop_seen" not in st.session_state:
        st.session_state.queue_drop_seen = {}

    if "queue_storage_dirty" not in st.session_state:
        st.session_state.queue_storage_dirty = False


def _persist_after_mutation(planner: ResearchPlanner) -> None:
    st.session_state.queue_storage_dirty = True
    persist_queue_storage(planner)


def _resolve(node_id: str | None) -> tuple[ResearchPlanner, ResearchItem] | None:
    planner = current_planner()
    if planner is None or node_id is None:
        return None
    item = planner.graph.by_identity(node_id)
    if item is None:
        return None
    return planner, item


def apply_queue_addition(node_id: str | None, *, front: bool = False) -> None:
    resolved = _resolve(node_id)
    if resolved is None:
        return
    planner, item = resolved
    added = planner.prepend(item) if front else planner.append(item)
    if not added:
        st.session_state.queue_rejected = item.friendly_name
        return
    _persist_after_mutation(planner)


def apply_queue_insert(node_id: str | None, slot: int) -> None:
    resolved = _resolve(node_id)
    if resolved is None:
        return
    planner, item = resolved
    planner.insert(item, slot)
    _persist_after_mutation(planner)


def remove_queue_item(node_id: str | None) -> None:
    resolved = _resolve(node_id)
    if resolved is None:
        return
    planner, item = resolved
    planner.remove(item)
    _persist_after_mutation(planner)


def complete_research(node_id: str | None) -> None:
    resolved = _resolve(node_id)
    if resolved is None:
        return
    planner, item = resolved
    planner.complete(item)
    _persist_after_mutation(planner)


def finish_research(node_id: str | None) -> None:
    resolved = _resolve(node_id)
    if resolved is None:
        return
    planner, item = resolved
    planner.finish(item)
    _persist_after_mutation(planner)


def apply_undo(category: QueueCategory) -> None:
    planner = current_planner()
    if planner is not None and planner.controller(category).undo():
        _persist_after_mutation(planner)


def apply_redo(category: QueueCategory) -> None:
    planner = current_planner()
    if planner is not None and planner.controller(category).redo():
        _persist_after_mutation(planner)


def clear_queue(category: QueueCategory) -> None:
    planner = current_planner()
    if planner is None:
        return
    planner.controller(category).clear()
    _persist_after_mutation(planner)


def reconcile_queues() -> None:
    planner = current_planner()
    if planner is None:
        return
    before = planner.save()
    planner.tick()
    if planner.save() != before:
        _persist_after_mutation(planner)
