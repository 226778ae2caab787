from __future__ import annotations

import streamlit as st


def render_global_styles() -> None:
    st.markdown(
        """
        <style>
        /* Reduce default padding */
        .block-container {
            padding-top: 1rem;
            padding-bottom: 1rem;
        }

        /* Hide Streamlit's default header */
        header[data-testid="stHeader"] {
            display: none;
        }

        /* Queue drop inputs are written by the sortable strip, never typed into */
        input[aria-label$="queue drop"] {
            display: none;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )
