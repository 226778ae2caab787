from __future__ import annotations

import streamlit as st

from research_queue_planner import (
    GraphValidator,
    InputLoader,
    KnowledgeGraph,
    QueueAdvanced,
    QueueSettings,
    ResearchPlanner,
)

from .config import HISTORY_LIMIT, INPUT_DIR, VERBOSE_DEBUG


def _load_inputs(reload_token: int):
    loader = InputLoader(INPUT_DIR)
    return loader.load()


@st.cache_data(show_spinner=False)
def load_inputs(reload_token: int):
    return _load_inputs(reload_token)


def validate_graph(nodes):
    return GraphValidator(nodes).validate()


def _record_notice(event: QueueAdvanced) -> None:
    st.session_state.setdefault("queue_notices", []).append(event)


def get_planner(nodes) -> ResearchPlanner:
    reload_token = st.session_state.get("reload_token", 0)
    planner_state = st.session_state.get("planner")

    if planner_state and planner_state.get("token") == reload_token:
        return planner_state["instance"]

    planner = ResearchPlanner(
        KnowledgeGraph(nodes),
        settings=QueueSettings(history_limit=HISTORY_LIMIT, verbose_debug=VERBOSE_DEBUG),
    )
    planner.subscribe(_record_notice)
    st.session_state.planner = {"instance": planner, "token": reload_token}
    st.session_state.queue_storage_hydrated = False
    return planner


def current_planner() -> ResearchPlanner | None:
    planner_state = st.session_state.get("planner")
    if not planner_state:
        return None
    return planner_state["instance"]
