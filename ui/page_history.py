"""
ui/page_history.py
"""
from datetime import datetime

import pandas as pd
import streamlit as st

from retinaview.app_controller import get_history


def render():
    st.title("🗂️ Scan History")

    store = get_history()
    entries = store.list()

    if not entries:
        st.info("No scans analysed yet.")
        return

    df = pd.DataFrame([
        {
            "ID": e.id,
            "Date": datetime.fromtimestamp(e.timestamp).strftime("%Y-%m-%d %H:%M"),
            "Image": e.image_name,
            "Image hash": e.image_id,
            "Findings": "; ".join(e.findings),
        }
        for e in entries
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)

    if st.button("🗑️ Clear history"):
        store.clear()
        st.rerun()
