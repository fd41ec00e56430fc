"""
ui/screen_main.py
-----------------
Catalog browser page.
Top:    view picker + reload.
Below:  filter bar and results for the selected view.

This file only owns the page layout and the run_engine call.
All rendering logic lives in ui/components/.
All data helpers live in ui/utils/.
"""

from __future__ import annotations
import logging

import streamlit as st

from config.settings             import get_catalog_path, get_rate_overrides
from engine.loader               import CatalogCache, load_catalog
from engine.orchestrator         import run_engine
from engine.predicates           import FilterState
from engine.rates                import StaticRateProvider
from engine.validity             import DefaultLatch
from engine.views                import field_pricing
from ui.components.filter_bar    import render_filter_bar, reset_widgets, widget_prefix
from ui.components.result_table  import render_result_table
from ui.utils.catalog            import VIEW_NAMES, build_view_configs, build_view_records, to_frame

logger = logging.getLogger(__name__)


def _catalog_cache() -> CatalogCache:
    cache = st.session_state.get("catalog_cache")
    if cache is None:
        def _drop_records(product_id: str | None) -> None:
            st.session_state.pop("view_records", None)
        cache = CatalogCache(on_invalidate=_drop_records)
        st.session_state["catalog_cache"] = cache
    return cache


def _view_records() -> dict[str, list]:
    """Per-view record snapshots; rebuilt (and re-versioned) after a reload."""
    records = st.session_state.get("view_records")
    if records is None:
        catalog = load_catalog(get_catalog_path(), _catalog_cache())
        records = build_view_records(catalog)
        st.session_state["view_records"]    = records
        st.session_state["catalog_version"] = st.session_state.get("catalog_version", 0) + 1
        logger.info(f"Catalog version {st.session_state['catalog_version']}: {len(catalog)} products")
    return records


def _filter_state(view_name: str) -> FilterState:
    states: dict[str, FilterState] = st.session_state.setdefault("filter_states", {})
    return states.setdefault(view_name, FilterState())


def render_home() -> None:
    provider = StaticRateProvider().with_overrides(get_rate_overrides())
    configs  = build_view_configs(provider)

    # ── View picker ───────────────────────────────────────────────────────────
    pick_col, reload_col = st.columns([5, 1])
    with pick_col:
        view_name = st.radio(
            "View", VIEW_NAMES, horizontal=True, key="active_view", label_visibility="collapsed"
        )
    with reload_col:
        if st.button("🔄 Reload", use_container_width=True, key="btn_reload"):
            _catalog_cache().invalidate()
            st.rerun()

    records = _view_records()[view_name]
    config  = configs[view_name]
    state   = _filter_state(view_name)
    version = st.session_state.get("catalog_version", 0)

    # ── Field pricing: seed the most recent validity period ───────────────────
    required: tuple[str, ...] = ()
    if view_name == field_pricing.VIEW_NAME:
        required = (field_pricing.VALIDITY,)
        latch: DefaultLatch = st.session_state.setdefault("validity_latch", DefaultLatch())
        seeded = field_pricing.seed_validity(state, latch, version, records)
        if seeded is not state:
            reset_widgets(config)
            state = seeded
            st.session_state["filter_states"][view_name] = state

    result = run_engine(config, records, state)

    # ── Filters ───────────────────────────────────────────────────────────────
    new_state = render_filter_bar(config, result, state, required=required)

    if view_name == field_pricing.VIEW_NAME:
        previous = field_pricing.selected_validity(state)
        if field_pricing.selected_validity(new_state) != previous:
            st.session_state["validity_latch"].mark_overridden()
            new_state = field_pricing.selections_after_validity_change(new_state, previous)
            reset_widgets(config)

    if new_state != state:
        st.session_state["filter_states"][view_name] = new_state
        st.rerun()

    st.divider()

    # ── Results ───────────────────────────────────────────────────────────────
    render_result_table(
        widget_prefix(config),
        result,
        lambda rows: to_frame(view_name, rows, provider, pool=records),
    )
