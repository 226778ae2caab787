from __future__ import annotations

import pandas as pd
import streamlit as st
from st_keyup import st_keyup

from research_queue_planner import QueueAdvanced, QueueCategory, ResearchPlanner

from ..config import LANE_ICONS, QUEUE_TITLES
from ..data import get_planner, load_inputs, validate_graph
from ..state import (
    apply_queue_addition,
    apply_queue_insert,
    apply_redo,
    apply_undo,
    clear_queue,
    complete_research,
    ensure_state,
    finish_research,
    reconcile_queues,
    remove_queue_item,
)
from ..storage import hydrate_queues_from_storage
from .layout import render_global_styles
from .shared import (
    label_for_item,
    option_choices,
    parse_drop_payload,
    render_sortable_queue,
    render_validation,
    storage_notices,
)


def render_header() -> None:
    st.title("🔬 Research Queue Planner")
    st.caption("Queue research in dependency order. Prerequisites are pulled in automatically.")


def render_search_box() -> None:
    """Render a search box using st_keyup for live filtering with debounce."""
    current_value = st.session_state.search_query or ""

    search_value = st_keyup(
        "Search by name...",
        value=current_value,
        debounce=300,
        placeholder="🔍 Filter research by name",
        key="search_input_widget",
    )

    if search_value != current_value:
        normalized = search_value.strip()
        st.session_state.search_query = normalized if normalized else None


def _flush_notices() -> None:
    notices: list[QueueAdvanced] = st.session_state.queue_notices
    for event in notices:
        next_label = event.next.friendly_name if event.next is not None else "none"
        st.toast(f"Research finished: {event.finished.friendly_name}. Next in queue: {next_label}", icon="🎉")
    notices.clear()

    rejected = st.session_state.pop("queue_rejected", None)
    if rejected:
        st.toast(f"{rejected} cannot be queued right now.", icon="⚠️")


def render_research_picker(planner: ResearchPlanner) -> None:
    with st.container(border=True):
        st.markdown("##### 📚 RESEARCH")
        render_search_box()

        query = (st.session_state.search_query or "").casefold()
        candidates = [
            item
            for item in planner.graph.items()
            if not item.is_satisfied() and (not query or query in item.friendly_name.casefold())
        ]
        if not candidates:
            st.warning("No research matches the current search.")
            return

        choices = option_choices(candidates)
        selected_label = st.selectbox(
            "Research project",
            ["Select research..."] + list(choices.keys()),
            key="research_picker_select",
            label_visibility="collapsed",
        )
        node_id = choices.get(selected_label)
        item = planner.graph.by_identity(node_id) if node_id else None
        if item is not None and not item.is_eligible():
            st.caption("This project is locked or hidden and cannot be queued.")

        col1, col2 = st.columns(2)
        with col1:
            st.button(
                "➕ Append",
                on_click=apply_queue_addition,
                args=(node_id,),
                disabled=node_id is None,
                key="picker_append_btn",
                width="stretch",
            )
            st.button(
                "✅ Mark researched",
                on_click=complete_research,
                args=(node_id,),
                disabled=node_id is None,
                key="picker_complete_btn",
                width="stretch",
            )
        with col2:
            st.button(
                "⏫ Prepend",
                on_click=apply_queue_addition,
                args=(node_id,),
                kwargs={"front": True},
                disabled=node_id is None,
                key="picker_prepend_btn",
                width="stretch",
            )
            st.button(
                "⚡ Finish instantly",
                on_click=finish_research,
                args=(node_id,),
                disabled=node_id is None,
                key="picker_finish_btn",
                help="Complete this project and all its missing prerequisites",
                width="stretch",
            )


def _render_history_controls(planner: ResearchPlanner, category: QueueCategory) -> None:
    controller = planner.controller(category)
    col1, col2, col3 = st.columns(3)
    with col1:
        st.button(
            "↶ Undo",
            on_click=apply_undo,
            args=(category,),
            disabled=not controller.history.can_undo,
            key=f"queue-undo-{category.value}",
            width="stretch",
        )
    with col2:
        st.button(
            "↷ Redo",
            on_click=apply_redo,
            args=(category,),
            disabled=not controller.history.can_redo,
            key=f"queue-redo-{category.value}",
            width="stretch",
        )
    with col3:
        st.button(
            "🧹 Clear",
            on_click=clear_queue,
            args=(category,),
            disabled=len(controller.queue) == 0,
            key=f"queue-clear-{category.value}",
            width="stretch",
        )


def _apply_pending_drop(planner: ResearchPlanner, category: QueueCategory) -> None:
    queue = planner.controller(category).queue
    drop_value = st.text_input(
        f"{category.value} queue drop",
        value="",
        key=f"queue-drop-{category.value}",
        label_visibility="collapsed",
    )
    seen: dict = st.session_state.queue_drop_seen
    if not drop_value or seen.get(category) == drop_value:
        return
    seen[category] = drop_value

    dropped = parse_drop_payload(drop_value, queue.identifiers())
    if dropped is None:
        return
    node_id, slot = dropped
    apply_queue_insert(node_id, slot)
    st.rerun()


def render_queue_container(planner: ResearchPlanner, category: QueueCategory) -> None:
    queue = planner.controller(category).queue

    with st.container(border=True):
        st.markdown(f"##### {QUEUE_TITLES[category]}")

        head_labels = [
            f"{LANE_ICONS[lane]} {lane.value.title()}: {head.friendly_name if head else 'idle'}"
            for lane, head in queue.heads().items()
        ]
        st.caption(" • ".join(head_labels))
        _render_history_controls(planner, category)

        if not len(queue):
            st.info("Nothing queued. Add research from the list.", icon="💡")
            return

        st.caption(f"{len(queue)} items • Drag to reorder")
        _apply_pending_drop(planner, category)
        render_sortable_queue(queue, category)

        rows = [
            {
                "#": position + 1,
                "Research": item.friendly_name,
                "Lane": item.knowledge_category.value.title(),
                "Tech level": item.tech_level or "",
                "Prerequisites": len(item.node.prereqs),
            }
            for position, item in enumerate(queue)
        ]
        st.dataframe(pd.DataFrame(rows), hide_index=True, width="stretch")

        remove_map = {label_for_item(item): item.identifier for item in queue}
        col1, col2 = st.columns([4, 1])
        with col1:
            selected_label = st.selectbox(
                "Remove item",
                ["Select to remove..."] + list(remove_map.keys()),
                key=f"queue-remove-select-{category.value}",
                label_visibility="collapsed",
            )
        with col2:
            node_to_remove = remove_map.get(selected_label)
            st.button(
                "🗑️",
                on_click=remove_queue_item,
                args=(node_to_remove,),
                disabled=node_to_remove is None,
                key=f"queue-remove-btn-{category.value}",
                help="Remove selected item and everything queued that depends on it",
            )


def render_queue_page() -> None:
    render_global_styles()
    ensure_state()

    report = load_inputs(st.session_state.reload_token)
    for message in report.errors:
        st.error(message)

    nodes = report.nodes
    validation = validate_graph(nodes)
    render_validation(validation)
    if validation.has_errors:
        st.stop()

    planner = get_planner(nodes)
    hydrate_queues_from_storage(planner)
    for notice in storage_notices(
        st.session_state.get("queue_storage_dropped"),
        st.session_state.get("queue_storage_read_error"),
    ):
        st.info(notice, icon="ℹ️")

    reconcile_queues()
    _flush_notices()

    render_header()
    left, right = st.columns([1, 2])
    with left:
        render_research_picker(planner)
    with right:
        for category in QueueCategory:
            render_queue_container(planner, category)
