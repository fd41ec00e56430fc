"""
app.py
------
Catalog Browser: products, SKUs, price groups and price points,
filtered, sorted and grouped by the facet engine.

Run with:
    streamlit run app.py
"""

import logging

import streamlit as st

from config.settings import get_log_level

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(
    page_title="Catalog Browser",
    page_icon="🗂️",
    layout="wide",
    initial_sidebar_state="collapsed",
    menu_items={
        "Get Help": None,
        "Report a bug": None,
        "About": "**Catalog Browser**: faceted views over the product / SKU / price hierarchy",
    },
)

# ── Session state defaults ──────────────────────────────────────────────────
DEFAULTS: dict = {
    "filter_states":   {},
    "catalog_version": 0,
}
for key, val in DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = val

# ── Header ───────────────────────────────────────────────────────────────────
st.markdown("## 🗂️ Catalog Browser")
st.caption("Products · SKUs · Price groups · Price points · Field pricing")
st.divider()

# ── Single page ──────────────────────────────────────────────────────────────
from ui.screen_main import render_home
render_home()
