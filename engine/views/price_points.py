"""
engine/views/price_points.py
----------------------------
Price point list view (points of one or more price groups).

    Default order : USD first
                      → Active before Expired
                        → currency (A-Z)
                          → min quantity
                            → point key

"USD equivalent (High to low)" converts every amount through a RateProvider
(placeholder rates by default, see engine/rates.py). Points that cannot be
converted sort last.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

from engine.grouping import GroupKey
from engine.models import CORE_CURRENCIES, PRICE_POINT_STATUSES, STANDARD_TIER, PricePoint
from engine.orchestrator import ViewConfig
from engine.predicates import SearchFacet, SelectFacet
from engine.rates import BASE_CURRENCY, RateProvider, StaticRateProvider, to_usd
from engine.sorting import by_key, by_priority, chain, first_when, priority_order

VIEW_NAME = "Price points"

# Facet ids
SEARCH       = "search"
CURRENCY     = "currency"
STATUS       = "status"
PRICING_RULE = "pricing_rule"
TIER         = "tier"

# Sort orders
SORT_AMOUNT_DESC = "Amount (High to low)"
SORT_AMOUNT_ASC  = "Amount (Low to high)"
SORT_ALPHA       = "Alphabetical A-Z"
SORT_USD_EQUIV   = "USD equivalent (High to low)"

# Group-by keys
GROUP_CATEGORY     = "Category"
GROUP_STATUS       = "Status"
GROUP_PRICING_RULE = "Pricing rule"
GROUP_CURRENCY     = "Currency"

CORE      = "Core"
LONG_TAIL = "Long Tail"


def currency_category(point: PricePoint) -> str:
    return CORE if point.currency_code in CORE_CURRENCIES else LONG_TAIL


def build_config(rate_provider: RateProvider | None = None) -> ViewConfig:
    provider = rate_provider or StaticRateProvider()

    default = chain(
        first_when(lambda p: p.currency_code == BASE_CURRENCY),
        by_priority(lambda p: p.status, PRICE_POINT_STATUSES),
        by_key(lambda p: p.currency_code),
        by_key(lambda p: p.min_quantity),
        by_key(lambda p: p.key),
    )

    facets = (
        SearchFacet(SEARCH, fields=(lambda p: p.currency_code, lambda p: p.pricing_tier)),
        SelectFacet(CURRENCY, extract=lambda p: p.currency_code, multi=True),
        SelectFacet(STATUS, extract=lambda p: p.status, option_order=priority_order(PRICE_POINT_STATUSES)),
        SelectFacet(PRICING_RULE, extract=lambda p: p.pricing_rule, multi=True),
        SelectFacet(TIER, extract=lambda p: p.pricing_tier, multi=True, missing_label=STANDARD_TIER),
    )

    sort_orders = {
        SORT_AMOUNT_DESC: by_key(lambda p: p.amount, descending=True),
        SORT_AMOUNT_ASC:  by_key(lambda p: p.amount),
        SORT_ALPHA:       by_key(lambda p: p.currency_code),
        SORT_USD_EQUIV:   by_key(lambda p: to_usd(p, provider), descending=True),
    }

    group_keys = {
        GROUP_CATEGORY:     GroupKey(extract=currency_category, order=priority_order((CORE, LONG_TAIL))),
        GROUP_STATUS:       GroupKey(extract=lambda p: p.status, order=priority_order(PRICE_POINT_STATUSES)),
        GROUP_PRICING_RULE: GroupKey(extract=lambda p: p.pricing_rule),
        GROUP_CURRENCY:     GroupKey(extract=lambda p: p.currency_code),
    }

    return ViewConfig(
        name               = VIEW_NAME,
        facets             = facets,
        sort_orders        = sort_orders,
        default_comparator = default,
        group_keys         = group_keys,
    )
