from __future__ import annotations

import streamlit as st


def main():
    """Redirect to the queue page as the default landing page."""
    st.switch_page("pages/Queue.py")


if __name__ == "__main__":
    main()
