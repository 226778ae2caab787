from __future__ import annotations

import streamlit as st

from research_queue_planner.streamlit_app.ui.queue_page import render_queue_page

st.set_page_config(
    page_title="Research Queue Planner",
    layout="wide",
    page_icon="🔬",
)

render_queue_page()
