"""
engine/grouping.py
------------------
Grouper.

    group_records(records, group_by, group_keys, comparator)
        → None                         when group_by is "None"
        → {partition: [records…]}      ordered mapping otherwise

Steps
-----
    1. partition key per record via the view's GroupKey extractor
       (may be a majority vote over a one-to-many relation)
    2. partition
    3. sort each partition with the view comparator
    4. order partitions: alphabetical, or the GroupKey's ordinal order
       (billing cycle priority, validity recency, …); records with no key
       land in the GroupKey's missing_label partition, placed last

Partition identity depends only on record keys, never on sort order, so a
caller's expanded/collapsed UI state survives re-sorts (reconcile_expanded).

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Mapping, Sequence

from engine.predicates import NONE_SENTINEL
from engine.sorting import Comparator, sort_records

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupKey:
    extract:       Callable[[Any], Any]
    order:         Callable[[str, str], int] | None = None   # ordinal domain; None = A-Z
    missing_label: str = "Other"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def majority_vote(values: Iterable[Any]) -> str | None:
    """Most frequent value; ties broken alphabetically. None for no values."""
    counts = Counter(str(v) for v in values if not _is_missing(v))
    if not counts:
        return None
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0][0]


def _order_keys(keys: list[str], group_key: GroupKey) -> list[str]:
    if group_key.order is not None:
        return sorted(keys, key=cmp_to_key(group_key.order))
    return sorted(keys, key=lambda k: (k.casefold(), k))


def group_records(
    records: Sequence[Any] | None,
    group_by: str | None,
    group_keys: Mapping[str, GroupKey],
    comparator: Comparator,
) -> dict[str, list[Any]] | None:
    if not group_by or group_by == NONE_SENTINEL:
        return None
    group_key = group_keys.get(group_by)
    if group_key is None:
        logger.warning(f"Unknown group-by key {group_by!r}; leaving records ungrouped")
        return None

    partitions: dict[str, list[Any]] = {}
    missing: list[Any] = []
    for record in records or ():
        value = group_key.extract(record)
        if _is_missing(value):
            missing.append(record)
        else:
            partitions.setdefault(str(value), []).append(record)

    ordered = _order_keys(list(partitions), group_key)
    if missing:
        if group_key.missing_label in partitions:
            partitions[group_key.missing_label].extend(missing)
            ordered.remove(group_key.missing_label)
        else:
            partitions[group_key.missing_label] = missing
        ordered.append(group_key.missing_label)

    return {key: sort_records(partitions[key], comparator) for key in ordered}


def group_counts(groups: Mapping[str, Sequence[Any]] | None) -> dict[str, int] | None:
    if groups is None:
        return None
    return {key: len(members) for key, members in groups.items()}


def reconcile_expanded(
    expanded: Iterable[str],
    groups: Mapping[str, Sequence[Any]] | None,
) -> set[str]:
    """Keep the caller's expanded partitions that still exist after a recompute."""
    expanded = set(expanded or ())
    if groups is None:
        return expanded
    return {key for key in expanded if key in groups}
