"""
ui/components/result_table.py
-----------------------------
Renders a ViewResult: one table when ungrouped, otherwise one toggle and
table per partition with its count.

Which partitions are open is kept in session state per view and reconciled
after every recompute, so a re-sort or a narrowed filter keeps the
partitions that still exist open.
"""

from __future__ import annotations
from typing import Any, Callable

import pandas as pd
import streamlit as st

from engine.grouping     import reconcile_expanded
from engine.orchestrator import ViewResult

FrameBuilder = Callable[[list[Any]], pd.DataFrame]


def _table(df: pd.DataFrame) -> None:
    st.dataframe(df, use_container_width=True, hide_index=True)


def render_result_table(view_key: str, result: ViewResult, to_frame: FrameBuilder) -> None:
    st.caption(f"{result.count} of {result.total} shown")

    if result.is_empty:
        st.info("No records match the current filters.")
        return

    if result.groups is None:
        _table(to_frame(result.records))
        return

    expanded_key = f"{view_key}_expanded"
    expanded = reconcile_expanded(st.session_state.get(expanded_key, set()), result.groups)

    for label, members in result.groups.items():
        count = result.group_counts[label]
        is_open = st.toggle(
            f"**{label}** ({count})",
            value=label in expanded,
            key=f"{view_key}_group_{label}",
        )
        if is_open:
            expanded.add(label)
            _table(to_frame(members))
        else:
            expanded.discard(label)

    st.session_state[expanded_key] = expanded
