from __future__ import annotations

import streamlit as st

from tracker.config import get_settings
from tracker.logging_config import setup_logging

st.set_page_config(page_title="Production Tracker", page_icon="🏭", layout="wide")

settings = get_settings()
setup_logging(settings.log_dir)

with st.sidebar:
    st.text_input(
        "Operator",
        key="operator",
        placeholder="Your name (optional)",
        help="Recorded as the author of SKUs and batches you create.",
    )

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_🏭_Production_Entry.py", title="Production Entry", icon="🏭"),
    st.Page("pages/2_🏷️_SKU_Manager.py", title="SKU Manager", icon="🏷️"),
    st.Page("pages/3_📜_Production_History.py", title="Production History", icon="📜"),
    st.Page("pages/4_🛡️_Admin_Reports.py", title="Admin Reports", icon="🛡️"),
    st.Page("pages/5_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
