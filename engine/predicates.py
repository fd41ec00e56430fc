"""
engine/predicates.py
--------------------
Predicate Composer.

A view declares its facets once; a FilterState carries the user's current
selections. apply_filters() keeps the records that pass every active facet.

Facet kinds
-----------
    SearchFacet              case-insensitive substring over configured fields
    SelectFacet(multi=False) single-select equality
    SelectFacet(multi=True)  multi-select membership (OR across values)

An empty selection never constrains. All active facets combine with AND, so
evaluation order does not change the result; search runs first because it
is usually the most selective.

Derived facets: an extractor may return a collection (e.g. the channels of
every SKU a product owns). The record passes when any returned value is
selected.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from collections.abc import Iterable
from typing import Any, Callable, Sequence, Union

logger = logging.getLogger(__name__)

NONE_SENTINEL = "None"


# ─────────────────────────────────────────────────────────────────────────────
# Facet declarations
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SearchFacet:
    facet_id: str
    fields:   tuple[Callable[[Any], Any], ...]


@dataclass(frozen=True)
class SelectFacet:
    facet_id:      str
    extract:       Callable[[Any], Any]
    multi:         bool = False
    label:         Callable[[str], str] | None = None       # display name for a value
    option_order:  Callable[[str, str], int] | None = None  # custom option comparator
    missing_label: str | None = None   # value standing in for records with none; listed last


Facet = Union[SearchFacet, SelectFacet]


# ─────────────────────────────────────────────────────────────────────────────
# Filter state
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class FilterState:
    """Per-view selection state. Created on mount, discarded on unmount."""
    search:     str = ""
    selections: dict[str, Any] = field(default_factory=dict)
    group_by:   str = NONE_SENTINEL
    sort_order: str = NONE_SENTINEL

    def selected(self, facet_id: str) -> tuple[str, ...]:
        value = self.selections.get(facet_id)
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,) if value.strip() else ()
        return tuple(str(v) for v in value if v is not None and str(v).strip())

    def with_selection(self, facet_id: str, value: Any) -> "FilterState":
        return replace(self, selections={**self.selections, facet_id: value})


# ─────────────────────────────────────────────────────────────────────────────
# Evaluation
# ─────────────────────────────────────────────────────────────────────────────

def facet_values(facet: SelectFacet, record: Any) -> tuple[str, ...]:
    """
    Normalised values a record exposes for a select facet.

    Blank values are dropped. A record left with none exposes the facet's
    missing_label instead, so it is still counted and selectable.
    """
    raw = facet.extract(record)
    if raw is None:
        items: Iterable[Any] = ()
    elif isinstance(raw, str) or not isinstance(raw, Iterable):
        items = (raw,)
    else:
        items = raw
    values = []
    for item in items:
        if item is None:
            continue
        text = str(item)
        if text.strip():
            values.append(text)
    if not values and facet.missing_label:
        return (facet.missing_label,)
    return tuple(dict.fromkeys(values))


def is_active(facet: Facet, state: FilterState) -> bool:
    if isinstance(facet, SearchFacet):
        return bool(state.search and state.search.strip())
    return bool(state.selected(facet.facet_id))


def matches(facet: Facet, record: Any, state: FilterState) -> bool:
    if isinstance(facet, SearchFacet):
        query = state.search.strip().lower()
        for get in facet.fields:
            value = get(record)
            if value is not None and query in str(value).lower():
                return True
        return False

    selected = state.selected(facet.facet_id)
    if not facet.multi:
        selected = selected[:1]
    values = facet_values(facet, record)
    return any(v in selected for v in values)


def apply_filters(
    records: Sequence[Any] | None,
    facets: Sequence[Facet],
    state: FilterState,
    exclude: str | None = None,
) -> list[Any]:
    """
    Records passing every active facet except `exclude`.

    Always returns a new list; the caller's sequence is left untouched.
    """
    if not records:
        return []

    active = [f for f in facets if f.facet_id != exclude and is_active(f, state)]
    active.sort(key=lambda f: 0 if isinstance(f, SearchFacet) else 1)
    if not active:
        return list(records)

    return [r for r in records if all(matches(f, r, state) for f in active)]
