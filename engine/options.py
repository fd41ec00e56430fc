"""
engine/options.py
-----------------
Dynamic Option Generator.

For facet F the selectable values and their counts come from the CANDIDATE
set: the records filtered by every active facet except F itself. A facet's
own selection therefore never hides its sibling values, and each count says
how many records selecting that value would yield given the other filters.

    candidate(F) = apply_filters(records, facets, state, exclude=F)
    count(v)     = |{ r ∈ candidate(F) : v ∈ values(F, r) }|

Options sort ascending by value unless the facet supplies option_order
(validity periods by recency, billing cycles by fixed priority).

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Sequence

import pandas as pd

from engine.predicates import Facet, FilterState, SelectFacet, apply_filters, facet_values

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FacetOption:
    value: str
    label: str   # display name with the count appended, e.g. "USD (4)"
    count: int


def count_values(facet: SelectFacet, records: Sequence[Any]) -> dict[str, int]:
    """value → number of records exposing it (each record counted once per value)."""
    if not records:
        return {}
    series = pd.Series([facet_values(facet, r) for r in records], dtype=object).explode().dropna()
    if series.empty:
        return {}
    return {str(k): int(v) for k, v in series.value_counts(sort=False).items()}


def _order_values(facet: SelectFacet, values: list[str]) -> list[str]:
    missing = facet.missing_label in values
    if missing:
        values = [v for v in values if v != facet.missing_label]
    if facet.option_order is not None:
        ordered = sorted(values, key=cmp_to_key(facet.option_order))
    else:
        ordered = sorted(values)
    return ordered + [facet.missing_label] if missing else ordered


def options_for(
    facet_id: str,
    records: Sequence[Any] | None,
    facets: Sequence[Facet],
    state: FilterState,
) -> list[FacetOption]:
    """Options for one facet, counted over the candidate set that ignores it."""
    facet = next((f for f in facets if f.facet_id == facet_id), None)
    if facet is None:
        logger.warning(f"Unknown facet {facet_id!r}; no options generated")
        return []
    if not isinstance(facet, SelectFacet) or not records:
        return []

    candidates = apply_filters(records, facets, state, exclude=facet_id)
    counts = count_values(facet, candidates)

    options = []
    for value in _order_values(facet, list(counts)):
        display = facet.label(value) if facet.label else value
        options.append(FacetOption(value=value, label=f"{display} ({counts[value]})", count=counts[value]))

    logger.debug(f"{facet_id}: {len(options)} options from {len(candidates)} candidates")
    return options


def keep_selected(
    facet: SelectFacet,
    options: Sequence[FacetOption],
    selected: Sequence[str],
) -> list[FacetOption]:
    """
    `options` plus a zero-count entry for every selected value the candidate
    set no longer contains, so a control never drops a live selection.
    """
    present = {o.value for o in options}
    kept = list(options)
    for value in selected:
        if value in present:
            continue
        present.add(value)
        display = facet.label(value) if facet.label else value
        kept.append(FacetOption(value=value, label=f"{display} (0)", count=0))
    return kept


def all_options(
    records: Sequence[Any] | None,
    facets: Sequence[Facet],
    state: FilterState,
) -> dict[str, list[FacetOption]]:
    return {
        f.facet_id: options_for(f.facet_id, records, facets, state)
        for f in facets
        if isinstance(f, SelectFacet)
    }
