"""
engine/views/skus.py
--------------------
SKU list view (all SKUs of the loaded products, flattened).

    Default order : price group validity (newest first)
                      → channel (A-Z)
                        → billing cycle (Monthly, Annual, Quarterly, A-Z)
                          → id

A SKU's validity is its price group's window; SKUs sharing a price group
therefore tie on it and fall through to channel.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

from engine.formatting import to_sentence_case
from engine.grouping import GroupKey
from engine.models import BILLING_CYCLE_PRIORITY, Sku
from engine.orchestrator import ViewConfig
from engine.predicates import SearchFacet, SelectFacet
from engine.sorting import by_key, by_priority, by_validity, chain, priority_order, reverse
from engine.validity import ValidityWindow, parse_date, window_of

VIEW_NAME = "SKUs"

# Facet ids
SEARCH        = "search"
CHANNEL       = "channel"
STATUS        = "status"
BILLING_CYCLE = "billing_cycle"
EXPERIMENT    = "experiment"

# Sort orders
SORT_EFFECTIVE_ASC  = "Effective date (Earliest to latest)"
SORT_EFFECTIVE_DESC = "Effective date (Latest to earliest)"
SORT_EXPERIMENT     = "Experiment key (A-Z)"
SORT_ID             = "ID (A-Z)"

# Group-by keys
GROUP_CHANNEL       = "Channel"
GROUP_BILLING_CYCLE = "Billing cycle"
GROUP_STATUS        = "Status"
GROUP_PRICE_GROUP   = "Price group"
GROUP_EXPERIMENT    = "Experiment"

NO_EXPERIMENT = "No experiment"


def sku_window(sku: Sku) -> ValidityWindow:
    pg = sku.price_group
    return window_of(pg.valid_from, pg.valid_until)


def experiment_key(sku: Sku) -> str | None:
    return sku.experiment.key if sku.experiment else None


def build_config() -> ViewConfig:
    default = chain(
        by_validity(sku_window),
        by_key(lambda s: s.sales_channel, casefold=True),
        by_priority(lambda s: s.billing_cycle, BILLING_CYCLE_PRIORITY),
        by_key(lambda s: s.id),
    )

    facets = (
        SearchFacet(SEARCH, fields=(
            lambda s: s.id,
            lambda s: s.name,
            lambda s: s.price_group.id,
            experiment_key,
        )),
        SelectFacet(CHANNEL, extract=lambda s: s.sales_channel, label=to_sentence_case),
        SelectFacet(STATUS, extract=lambda s: s.status),
        SelectFacet(
            BILLING_CYCLE,
            extract      = lambda s: s.billing_cycle,
            option_order = priority_order(BILLING_CYCLE_PRIORITY),
        ),
        SelectFacet(EXPERIMENT, extract=experiment_key, multi=True, missing_label=NO_EXPERIMENT),
    )

    sort_orders = {
        SORT_EFFECTIVE_ASC:  chain(
            by_key(lambda s: parse_date(s.price_group.valid_from)),
            reverse(by_validity(sku_window)),
        ),
        SORT_EFFECTIVE_DESC: by_validity(sku_window),
        SORT_EXPERIMENT:     by_key(experiment_key, casefold=True),
        SORT_ID:             by_key(lambda s: s.id),
    }

    group_keys = {
        GROUP_CHANNEL:       GroupKey(extract=lambda s: s.sales_channel),
        GROUP_BILLING_CYCLE: GroupKey(
            extract = lambda s: s.billing_cycle,
            order   = priority_order(BILLING_CYCLE_PRIORITY),
        ),
        GROUP_STATUS:        GroupKey(extract=lambda s: s.status),
        GROUP_PRICE_GROUP:   GroupKey(extract=lambda s: s.price_group.id),
        GROUP_EXPERIMENT:    GroupKey(extract=experiment_key, missing_label=NO_EXPERIMENT),
    }

    return ViewConfig(
        name               = VIEW_NAME,
        facets             = facets,
        sort_orders        = sort_orders,
        default_comparator = default,
        group_keys         = group_keys,
    )
