"""
ui/components/filter_bar.py
---------------------------
Search box, facet controls, sort and group-by selectors for one view.

Facet options come straight from ViewResult.options, so every control shows
the live count for each value. A selected value the other facets have
filtered away stays listed with a (0) count. The bar returns a new
FilterState; it never edits the one it was given.
"""

from __future__ import annotations
import streamlit as st

from engine.formatting   import to_sentence_case
from engine.options      import FacetOption, keep_selected
from engine.orchestrator import ViewConfig, ViewResult
from engine.predicates   import NONE_SENTINEL, FilterState, SearchFacet, SelectFacet

_ALL = "All"


def _facet_title(facet_id: str) -> str:
    return to_sentence_case(facet_id.replace("_", " "))


def _single_select(
    facet:    SelectFacet,
    options:  list[FacetOption],
    state:    FilterState,
    key:      str,
    required: bool = False,
) -> str | None:
    current = state.selected(facet.facet_id)[:1]
    labels  = {o.value: o.label for o in keep_selected(facet, options, current)}
    values  = list(labels) if required and labels else [_ALL, *labels]
    index   = values.index(current[0]) if current else 0
    picked  = st.selectbox(
        _facet_title(facet.facet_id),
        values,
        index=index,
        format_func=lambda v: labels.get(v, v),
        key=key,
    )
    return None if picked == _ALL else picked


def _multi_select(facet: SelectFacet, options: list[FacetOption], state: FilterState, key: str) -> list[str]:
    current = list(state.selected(facet.facet_id))
    labels  = {o.value: o.label for o in keep_selected(facet, options, current)}
    return st.multiselect(
        _facet_title(facet.facet_id),
        list(labels),
        default=current,
        format_func=lambda v: labels.get(v, v),
        key=key,
    )


def widget_prefix(config: ViewConfig) -> str:
    return config.name.lower().replace(" ", "_")


def reset_widgets(config: ViewConfig) -> None:
    """Forget the widget values of a view so the next render follows its FilterState."""
    prefix = f"{widget_prefix(config)}_"
    for key in [k for k in st.session_state if str(k).startswith(prefix)]:
        del st.session_state[key]


def render_filter_bar(
    config:   ViewConfig,
    result:   ViewResult,
    state:    FilterState,
    required: tuple[str, ...] = (),
) -> FilterState:
    """
    Render the controls for `config` and return the FilterState they describe.
    Single-select facets listed in `required` offer no "All" entry.
    """
    prefix = widget_prefix(config)
    new_state = FilterState(
        search     = state.search,
        selections = dict(state.selections),
        group_by   = state.group_by,
        sort_order = state.sort_order,
    )

    # ── Search ────────────────────────────────────────────────────────────────
    if any(isinstance(f, SearchFacet) for f in config.facets):
        new_state.search = st.text_input(
            "Search",
            value=state.search,
            placeholder="Search…",
            key=f"{prefix}_search",
            label_visibility="collapsed",
        )

    # ── Facets ────────────────────────────────────────────────────────────────
    select_facets = [f for f in config.facets if isinstance(f, SelectFacet)]
    if select_facets:
        for col, facet in zip(st.columns(len(select_facets)), select_facets):
            options = result.options.get(facet.facet_id, [])
            key = f"{prefix}_{facet.facet_id}"
            with col:
                if facet.multi:
                    new_state.selections[facet.facet_id] = _multi_select(facet, options, state, key)
                else:
                    new_state.selections[facet.facet_id] = _single_select(
                        facet, options, state, key, required=facet.facet_id in required
                    )

    # ── View options ──────────────────────────────────────────────────────────
    sort_col, group_col = st.columns(2)
    with sort_col:
        sort_names = config.sort_names
        new_state.sort_order = st.selectbox(
            "Sort",
            sort_names,
            index=sort_names.index(state.sort_order) if state.sort_order in sort_names else 0,
            format_func=lambda v: "Default" if v == NONE_SENTINEL else v,
            key=f"{prefix}_sort",
        )
    with group_col:
        group_names = config.group_names
        new_state.group_by = st.selectbox(
            "Group by",
            group_names,
            index=group_names.index(state.group_by) if state.group_by in group_names else 0,
            key=f"{prefix}_group",
        )

    return new_state
