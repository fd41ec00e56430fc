"""
engine/sorting.py
-----------------
Multi-Key Sorter.

Each view registers a closed table of named sort orders plus one DEFAULT
multi-key comparator. Unknown names and "None" resolve to that default,
never to a no-op: grouping relies on a stable, meaningful order even when
the user picked nothing.

Default comparators are priority chains, e.g. for SKUs:

    validity (newest first)
      → channel (A-Z)
        → billing cycle (Monthly, Annual, Quarterly, then A-Z)
          → id (A-Z)                      ← total-order tiebreak

Missing sort keys (None / blank) always sort after present values,
whatever the direction.

Named orders are chained with the view's default, so ties inside a named
order still resolve deterministically.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, Callable, Mapping, Sequence

from engine.predicates import NONE_SENTINEL
from engine.validity import ValidityWindow, compare_windows

logger = logging.getLogger(__name__)

Comparator = Callable[[Any, Any], int]


# ─────────────────────────────────────────────────────────────────────────────
# Building blocks
# ─────────────────────────────────────────────────────────────────────────────

def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _missing_last(va: Any, vb: Any) -> int | None:
    ma, mb = _is_missing(va), _is_missing(vb)
    if ma or mb:
        return _cmp(ma, mb)
    return None


def by_key(key: Callable[[Any], Any], descending: bool = False, casefold: bool = False) -> Comparator:
    """Compare on key(record); missing keys last in either direction."""
    def compare(a: Any, b: Any) -> int:
        va, vb = key(a), key(b)
        missing = _missing_last(va, vb)
        if missing is not None:
            return missing
        if casefold and isinstance(va, str) and isinstance(vb, str):
            va, vb = va.casefold(), vb.casefold()
        result = _cmp(va, vb)
        return -result if descending else result
    return compare


def by_priority(key: Callable[[Any], Any], priority: Sequence[str]) -> Comparator:
    """Fixed priority list first, unlisted values after it alphabetically, missing last."""
    rank = {value: i for i, value in enumerate(priority)}

    def compare(a: Any, b: Any) -> int:
        va, vb = key(a), key(b)
        missing = _missing_last(va, vb)
        if missing is not None:
            return missing
        ra, rb = rank.get(va, len(rank)), rank.get(vb, len(rank))
        if ra != rb:
            return _cmp(ra, rb)
        return _cmp(str(va), str(vb))
    return compare


def by_validity(window: Callable[[Any], ValidityWindow]) -> Comparator:
    """Most recent validity window first (see engine.validity)."""
    def compare(a: Any, b: Any) -> int:
        return compare_windows(window(a), window(b))
    return compare


def first_when(predicate: Callable[[Any], bool]) -> Comparator:
    """Records satisfying predicate sort ahead of the rest."""
    def compare(a: Any, b: Any) -> int:
        return _cmp(not predicate(a), not predicate(b))
    return compare


def reverse(comparator: Comparator) -> Comparator:
    def compare(a: Any, b: Any) -> int:
        return comparator(b, a)
    return compare


def chain(*comparators: Comparator) -> Comparator:
    def compare(a: Any, b: Any) -> int:
        for cmp in comparators:
            result = cmp(a, b)
            if result:
                return result
        return 0
    return compare


def priority_order(priority: Sequence[str]) -> Callable[[str, str], int]:
    """Value comparator (not record comparator) for options and partitions."""
    return by_priority(lambda v: v, priority)


# ─────────────────────────────────────────────────────────────────────────────
# Resolution
# ─────────────────────────────────────────────────────────────────────────────

def comparator_for(
    sort_orders: Mapping[str, Comparator],
    name: str | None,
    default: Comparator,
) -> Comparator:
    """Comparator for a named order; "None" and unknown names give the default."""
    if not name or name == NONE_SENTINEL:
        return default
    named = sort_orders.get(name)
    if named is None:
        logger.debug(f"Unrecognised sort order {name!r}; using default order")
        return default
    return chain(named, default)


def sort_records(records: Sequence[Any] | None, comparator: Comparator) -> list[Any]:
    """Stable sort into a new list."""
    return sorted(records or (), key=cmp_to_key(comparator))
