from __future__ import annotations

import json

import streamlit as st
import streamlit.components.v1 as components
from streamlit_local_storage import LocalStorage

from research_queue_planner import DecodedQueues, ResearchPlanner
from research_queue_planner.queue_storage import STORAGE_KEY


def _get_local_storage() -> LocalStorage:
    manager = st.session_state.get("local_storage_manager")
    if manager is None:
        manager = LocalStorage()
        st.session_state.local_storage_manager = manager
    return manager


def _read_queue_storage() -> tuple[dict | None, str | None]:
    st.session_state.setdefault("queue_storage_attempts", 0)

    # Avoid spawning additional background iframes once we've tried a few times.
    if st.session_state.queue_storage_attempts > 3:
        return None, None

    st.session_state.queue_storage_attempts += 1
    storage = _get_local_storage()
    try:
        raw = storage.getItem(STORAGE_KEY)
    except Exception as exc:  # pragma: no cover - component failures surface as arbitrary errors.
        return None, str(exc)

    if raw is None:
        return None, None
    if isinstance(raw, dict):
        return raw, None
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            return None, str(exc)
        return parsed, None
    return None, f"Unexpected local storage payload type: {type(raw).__name__}"


def _write_queue_storage(payload: dict) -> None:
    payload_json = json.dumps(payload)
    components.html(
        f"""
        <script>
        (() => {{
          try {{
            const payload = {payload_json};
            window.localStorage.setItem("{STORAGE_KEY}", JSON.stringify(payload));
          }} catch (err) {{
            console.warn("Failed to persist research queues to localStorage", err);
          }}
        }})();
        </script>
        """,
        height=0,
        width=0,
    )


def hydrate_queues_from_storage(planner: ResearchPlanner) -> DecodedQueues | None:
    if st.session_state.get("queue_storage_hydrated"):
        return None

    payload, error = _read_queue_storage()
    if error:
        st.session_state.queue_storage_read_error = error
    if payload is None:
        st.session_state.queue_storage_hydrated = True
        return None

    decoded = planner.load(payload)
    st.session_state.queue_storage_hydrated = True
    if decoded is None:
        return None

    st.session_state.queue_storage_last = json.dumps(planner.save(), sort_keys=True)
    st.session_state.queue_storage_dirty = False
    if decoded.dropped:
        st.session_state.queue_storage_dropped = decoded.dropped
    return decoded


def persist_queue_storage(planner: ResearchPlanner) -> None:
    if not st.session_state.get("queue_storage_dirty", False):
        return None

    payload = planner.save()
    serialized = json.dumps(payload, sort_keys=True)
    if st.session_state.get("queue_storage_last") == serialized:
        st.session_state.queue_storage_dirty = False
        return None

    st.session_state.queue_storage_last = serialized
    st.session_state.queue_storage_dirty = False
    _write_queue_storage(payload)
    return None
