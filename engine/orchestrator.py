"""
engine/orchestrator.py
----------------------
Facet engine pipeline.

One generic engine, parameterised per entity view by a ViewConfig
(facets, closed sort-order table, default comparator, group keys). The five
concrete configurations live in engine/views/.

Pipeline
--------
    Step 1 → predicates.apply_filters()
                 search first, then every active select facet (AND)

    Step 2 → options.all_options()
                 per facet, counted over records filtered by every OTHER facet

    Step 3 → sorting.comparator_for() + sorting.sort_records()
                 named order chained with the view default; "None" = default

    Step 4 → grouping.group_records()
                 optional; partitions sorted with the Step 3 comparator

Every step is a pure function of (records, state). The input collection is
copied once up front and never mutated; callers sharing a record collection
across views must not mutate it in place while a pass runs.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from engine.grouping import GroupKey, group_counts, group_records
from engine.options import FacetOption, all_options
from engine.predicates import NONE_SENTINEL, Facet, FilterState, apply_filters
from engine.sorting import Comparator, comparator_for, sort_records

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Configuration / result
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ViewConfig:
    name:               str
    facets:             tuple[Facet, ...]
    sort_orders:        Mapping[str, Comparator]
    default_comparator: Comparator
    group_keys:         Mapping[str, GroupKey] = field(default_factory=dict)

    @property
    def sort_names(self) -> list[str]:
        return [NONE_SENTINEL, *self.sort_orders]

    @property
    def group_names(self) -> list[str]:
        return [NONE_SENTINEL, *self.group_keys]

    def facet(self, facet_id: str) -> Facet | None:
        return next((f for f in self.facets if f.facet_id == facet_id), None)


@dataclass
class ViewResult:
    records:      list[Any]                          # filtered + sorted
    groups:       dict[str, list[Any]] | None        # None when ungrouped
    group_counts: dict[str, int] | None
    options:      dict[str, list[FacetOption]]
    total:        int                                # size before filtering

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records


# ─────────────────────────────────────────────────────────────────────────────
# Main entry point
# ─────────────────────────────────────────────────────────────────────────────

def run_engine(config: ViewConfig, records: Iterable[Any] | None, state: FilterState) -> ViewResult:
    """
    Recompute one view from scratch.

    Args:
        config  : the entity view's ViewConfig
        records : the view's full record collection (None / empty allowed)
        state   : the view's FilterState

    Returns:
        ViewResult with the filtered+sorted records, optional grouping with
        per-group counts, and option lists for every select facet.
    """
    snapshot = list(records or ())

    # ── Step 1: Filter ────────────────────────────────────────────────────────
    filtered = apply_filters(snapshot, config.facets, state)

    # ── Step 2: Facet options ─────────────────────────────────────────────────
    options = all_options(snapshot, config.facets, state)

    # ── Step 3: Sort ──────────────────────────────────────────────────────────
    comparator = comparator_for(config.sort_orders, state.sort_order, config.default_comparator)
    ordered = sort_records(filtered, comparator)

    # ── Step 4: Group ─────────────────────────────────────────────────────────
    groups = group_records(ordered, state.group_by, config.group_keys, comparator)

    logger.debug(
        f"{config.name}: {len(ordered)}/{len(snapshot)} records, "
        f"sort={state.sort_order!r}, group_by={state.group_by!r}"
    )

    return ViewResult(
        records      = ordered,
        groups       = groups,
        group_counts = group_counts(groups),
        options      = options,
        total        = len(snapshot),
    )
