from __future__ import annotations

import streamlit as st

from tracker.config import get_settings
from tracker.db import get_conn, ensure_schema
from tracker.services.batches import list_batches, production_totals
from tracker.services.skus import count_skus

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)

st.title(f"🏭 {settings.app_title}")
st.caption("Manage SKUs and track production batches.")

totals = production_totals(list_batches(conn))

c1, c2, c3 = st.columns(3)
c1.metric("Total Pieces", f"{totals['total_pieces']:,}")
c2.metric("Today's Production", f"{totals['today_pieces']:,}")
c3.metric("SKUs", f"{count_skus(conn)}")

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

st.info(
    "Use the left sidebar navigation. Add products in **🏷️ SKU Manager**, record runs in **🏭 Production Entry**, "
    "and browse them in **📜 Production History**. Reports are under **🛡️ Admin Reports**.",
    icon="ℹ️",
)
