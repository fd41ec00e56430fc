"""
engine/views/price_groups.py
----------------------------
Price group list view.

Price groups are not loaded on their own: they are reached through the SKUs
that reference them, and several SKUs may share one group. price_group_rows()
folds that fan-in into one PriceGroupRow per group id, keeping the SKUs.

Channel and billing cycle are properties of the SKUs, not of the group, so
both are derived:
    facets   → the row passes when ANY of its SKUs matches
    grouping → majority vote over the row's SKUs (ties alphabetical)

    Default order : validity (newest first)
                      → primary channel (A-Z)
                        → primary billing cycle (priority)
                          → id

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
from typing import Iterable

from engine.grouping import GroupKey, majority_vote
from engine.models import BILLING_CYCLE_PRIORITY, PriceGroup, PriceGroupRow, Sku
from engine.orchestrator import ViewConfig
from engine.predicates import SearchFacet, SelectFacet
from engine.sorting import by_key, by_priority, by_validity, chain, priority_order, reverse
from engine.validity import ValidityWindow, compare_validity, parse_date, resolve_validity, window_of

logger = logging.getLogger(__name__)

VIEW_NAME = "Price groups"

# Facet ids
SEARCH        = "search"
CHANNEL       = "channel"
BILLING_CYCLE = "billing_cycle"
STATUS        = "status"
VALIDITY      = "validity"

# Sort orders
SORT_NAME           = "Name (A-Z)"
SORT_VALIDITY_ASC   = "Validity (Earliest to latest)"
SORT_VALIDITY_DESC  = "Validity (Latest to earliest)"
SORT_SKU_COUNT      = "SKU count (High to low)"

# Group-by keys
GROUP_CHANNEL       = "Channel"
GROUP_BILLING_CYCLE = "Billing cycle"
GROUP_STATUS        = "Status"


def price_group_rows(skus: Iterable[Sku] | None) -> list[PriceGroupRow]:
    """One row per distinct price group id, in first-seen order."""
    groups: dict[str, list[Sku]] = {}
    first: dict[str, PriceGroup] = {}
    for sku in skus or ():
        pg = sku.price_group
        if pg.id not in first:
            first[pg.id] = pg
        elif first[pg.id] != pg:
            logger.debug(f"Price group {pg.id!r} referenced with differing contents; keeping first")
        groups.setdefault(pg.id, []).append(sku)
    return [PriceGroupRow(price_group=first[gid], skus=tuple(members)) for gid, members in groups.items()]


def row_window(row: PriceGroupRow) -> ValidityWindow:
    return window_of(row.price_group.valid_from, row.price_group.valid_until)


def row_validity(row: PriceGroupRow) -> str:
    return resolve_validity(row.price_group.valid_from, row.price_group.valid_until)


def primary_channel(row: PriceGroupRow) -> str | None:
    return majority_vote(row.channels)


def primary_billing_cycle(row: PriceGroupRow) -> str | None:
    return majority_vote(row.billing_cycles)


def build_config() -> ViewConfig:
    default = chain(
        by_validity(row_window),
        by_key(primary_channel, casefold=True),
        by_priority(primary_billing_cycle, BILLING_CYCLE_PRIORITY),
        by_key(lambda r: r.id),
    )

    facets = (
        SearchFacet(SEARCH, fields=(lambda r: r.id, lambda r: r.price_group.name)),
        SelectFacet(CHANNEL, extract=lambda r: r.channels),
        SelectFacet(
            BILLING_CYCLE,
            extract      = lambda r: r.billing_cycles,
            option_order = priority_order(BILLING_CYCLE_PRIORITY),
        ),
        SelectFacet(STATUS, extract=lambda r: r.price_group.status),
        SelectFacet(VALIDITY, extract=row_validity, option_order=compare_validity),
    )

    sort_orders = {
        SORT_NAME:          by_key(lambda r: r.price_group.name, casefold=True),
        SORT_VALIDITY_ASC:  chain(
            by_key(lambda r: parse_date(r.price_group.valid_from)),
            reverse(by_validity(row_window)),
        ),
        SORT_VALIDITY_DESC: by_validity(row_window),
        SORT_SKU_COUNT:     by_key(lambda r: len(r.skus), descending=True),
    }

    group_keys = {
        GROUP_CHANNEL:       GroupKey(extract=primary_channel),
        GROUP_BILLING_CYCLE: GroupKey(
            extract = primary_billing_cycle,
            order   = priority_order(BILLING_CYCLE_PRIORITY),
        ),
        GROUP_STATUS:        GroupKey(extract=lambda r: r.price_group.status),
    }

    return ViewConfig(
        name               = VIEW_NAME,
        facets             = facets,
        sort_orders        = sort_orders,
        default_comparator = default,
        group_keys         = group_keys,
    )
